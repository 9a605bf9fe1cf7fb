"""Chunk summaries and chunk list filtering."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from bundlescope.graph.models import ChunkSummary, ChunkType, InitialSummary
from bundlescope.graph.query import infer_entry_for_output, static_output_graph
from bundlescope.parser.models import Graph


def summarize(outputs: Iterable[str], graph: Graph) -> list[ChunkSummary]:
    """Build chunk summaries for `outputs`, largest first.

    Paths missing from the graph are skipped. Equal sizes keep the order of
    `outputs`. Chunks without an entry point of their own get the entry of
    their nearest static importer as `inferred_entry`.
    """
    static_graph = static_output_graph(graph)
    summaries = []
    for output_file in outputs:
        out = graph.outputs.get(output_file)
        if out is None:
            continue
        summaries.append(
            ChunkSummary(
                output_file=output_file,
                bytes=out.bytes,
                entry_point=out.entry_point,
                inferred_entry=infer_entry_for_output(graph, output_file, static_graph),
                included_inputs=tuple(out.inputs),
            )
        )
    return sorted(summaries, key=lambda c: -c.bytes)


def get_chunk_load_type(chunk: ChunkSummary, summary: InitialSummary | None) -> ChunkType:
    """Initial when the summary lists the chunk as loaded on page load.

    Without a summary every chunk counts as initial.
    """
    if summary is None:
        return ChunkType.INITIAL
    return summary.chunk_type_of(chunk.output_file)


def is_entry_point_in_chunk(chunk: ChunkSummary) -> bool:
    """Whether the chunk's own entry point is bundled inside it."""
    return bool(chunk.entry_point) and chunk.contains(chunk.entry_point)


def is_main_entry_point(file_path: str, initial_chunk: ChunkSummary | None) -> bool:
    return initial_chunk is not None and file_path == initial_chunk.entry_point


def matches_search(chunk: ChunkSummary, search_term: str) -> bool:
    """Case-insensitive substring match against the chunk's inputs."""
    if not search_term:
        return True
    needle = search_term.lower()
    return any(needle in path.lower() for path in chunk.included_inputs)


def filter_chunks(
    chunks: Iterable[ChunkSummary],
    search_term: str,
    type_filters: Mapping[ChunkType | str, bool],
    summary: InitialSummary | None,
) -> list[ChunkSummary]:
    """Keep chunks matching the search term whose load type is switched on."""
    enabled = {ChunkType(k) for k, on in type_filters.items() if on}
    return [
        chunk for chunk in chunks
        if matches_search(chunk, search_term)
        and get_chunk_load_type(chunk, summary) in enabled
    ]
