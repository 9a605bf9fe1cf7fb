"""One-pass analysis of a bundle graph.

All graph traversals run once in :func:`analyse`; the resulting
:class:`BundleAnalysis` is a plain value that a renderer can consume without
recomputing anything. Each analysis owns its own graph snapshot, so two of
them (say, the left and right side of a comparison) never interfere.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field

from bundlescope.analysis.chunks import summarize
from bundlescope.config import AnalysisConfig
from bundlescope.exceptions import ClassificationError
from bundlescope.graph.classify import BrowserOutputFilter, classify, pick_entry
from bundlescope.graph.models import (
    ChunkSummary,
    CreatedChunk,
    ImportSource,
    InclusionStep,
    InitialSummary,
)
from bundlescope.graph.query import (
    find_best_chunk,
    get_chunks_created_by_file,
    get_import_sources,
    get_inclusion_path,
)
from bundlescope.parser.core import validate_graph
from bundlescope.parser.models import Graph

logger = logging.getLogger("bundlescope.analysis")


class BundleAnalysis(BaseModel):
    """Everything derived from one graph."""

    model_config = ConfigDict(frozen=True)

    graph: Graph
    initial_summary: InitialSummary
    chunks: list[ChunkSummary] = Field(default_factory=list)  # largest first
    initial_chunks: list[ChunkSummary] = Field(default_factory=list)
    lazy_chunks: list[ChunkSummary] = Field(default_factory=list)
    initial_chunk: ChunkSummary | None = None  # the chunk that bootstraps the app

    @property
    def entry_output(self) -> str:
        return self.initial_summary.entry_output

    def lookup_chunks(self) -> list[ChunkSummary]:
        """Initial chunks, then lazy chunks: the order path lookups expect."""
        return [*self.initial_chunks, *self.lazy_chunks]

    def inclusion_path(self, target_input: str) -> list[InclusionStep]:
        return get_inclusion_path(
            self.graph,
            target_input,
            self.lookup_chunks(),
            initial_outputs=self.initial_summary.initial.outputs,
            entry_output=self.entry_output,
        )

    def import_sources(self, target_input: str) -> list[ImportSource]:
        return get_import_sources(
            self.graph,
            target_input,
            self.lookup_chunks(),
            self.initial_summary.initial.outputs,
        )

    def best_chunk(
        self, file_path: str, fallback: ChunkSummary | None = None
    ) -> ChunkSummary | None:
        return find_best_chunk(file_path, self.lookup_chunks(), self.graph, fallback)

    def created_chunks(self, file_path: str) -> list[CreatedChunk]:
        return get_chunks_created_by_file(self.graph, file_path, self.chunks)


def analyse(
    graph: Graph,
    config: AnalysisConfig | None = None,
    preferred_entry: str | None = None,
) -> BundleAnalysis:
    """Classify and summarize every browser chunk of a graph.

    Raises:
        ValidationError: the graph breaks a structural invariant.
        ClassificationError: no entry output can be identified.
    """
    config = config or AnalysisConfig()
    validate_graph(graph)
    output_filter = BrowserOutputFilter(config)

    entry_output = pick_entry(
        graph,
        preferred_entry=preferred_entry or config.preferred_entry or None,
        is_browser=output_filter,
    )
    if entry_output is None:
        raise ClassificationError("Could not determine an initial output bundle")

    summary = classify(graph, entry_output, is_browser=output_filter)
    initial_chunks = summarize(summary.initial.outputs, graph)
    lazy_chunks = summarize(summary.lazy.outputs, graph)
    chunks = sorted([*initial_chunks, *lazy_chunks], key=lambda c: -c.bytes)

    initial_chunk = next(
        (c for c in initial_chunks if c.output_file == entry_output), None
    )
    logger.info(
        "Analysed bundle: entry '%s', %d initial and %d lazy chunks",
        entry_output, len(initial_chunks), len(lazy_chunks),
    )
    return BundleAnalysis(
        graph=graph,
        initial_summary=summary,
        chunks=chunks,
        initial_chunks=initial_chunks,
        lazy_chunks=lazy_chunks,
        initial_chunk=initial_chunk,
    )
