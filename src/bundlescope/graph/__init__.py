"""Dependency graph analysis over bundle outputs and inputs."""

from bundlescope.graph.builder import BundleGraphBuilder
from bundlescope.graph.classify import BrowserOutputFilter, classify, pick_entry
from bundlescope.graph.models import (
    ChunkSummary,
    ChunkType,
    ImportSource,
    InclusionStep,
    InitialSummary,
)
from bundlescope.graph.query import find_best_chunk, get_import_sources, get_inclusion_path

__all__ = [
    "BrowserOutputFilter",
    "BundleGraphBuilder",
    "ChunkSummary",
    "ChunkType",
    "ImportSource",
    "InclusionStep",
    "InitialSummary",
    "classify",
    "find_best_chunk",
    "get_import_sources",
    "get_inclusion_path",
    "pick_entry",
]
