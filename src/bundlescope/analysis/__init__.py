"""Chunk summaries, one-pass analysis and build comparison."""

from bundlescope.analysis.chunks import filter_chunks, summarize
from bundlescope.analysis.compare import compare_analyses, match_chunks, score_change
from bundlescope.analysis.engine import BundleAnalysis, analyse

__all__ = [
    "BundleAnalysis",
    "analyse",
    "compare_analyses",
    "filter_chunks",
    "match_chunks",
    "score_change",
    "summarize",
]
