"""Queries answering why a file is in the bundle and who pulls it in."""

from __future__ import annotations

import logging
import re
from collections.abc import Collection, Sequence

import networkx as nx

from bundlescope.exceptions import ClassificationError
from bundlescope.graph.builder import BundleGraphBuilder
from bundlescope.graph.classify import classify, pick_entry
from bundlescope.graph.models import (
    ChunkSummary,
    ChunkType,
    CreatedChunk,
    ImportSource,
    InclusionStep,
)
from bundlescope.parser.core import validate_graph
from bundlescope.parser.models import Graph

logger = logging.getLogger("bundlescope.query")


def _first_chunk_containing(
    input_path: str, chunks: Sequence[ChunkSummary]
) -> ChunkSummary | None:
    for chunk in chunks:
        if chunk.contains(input_path):
            return chunk
    return None


def _chunk_type_for(
    input_path: str,
    chunks: Sequence[ChunkSummary],
    initial_outputs: Collection[str],
) -> tuple[ChunkType, ChunkSummary | None]:
    chunk = _first_chunk_containing(input_path, chunks)
    if chunk is not None and chunk.output_file in initial_outputs:
        return ChunkType.INITIAL, chunk
    return ChunkType.LAZY, chunk


def _resolve_entry(graph: Graph, entry_output: str | None) -> str:
    entry_output = entry_output or pick_entry(graph)
    if entry_output is None:
        raise ClassificationError("Could not determine an initial output bundle")
    return entry_output


def static_output_graph(graph: Graph) -> nx.DiGraph:
    """All outputs joined by their static imports only."""
    dg = BundleGraphBuilder(graph).build_output_graph()
    return nx.subgraph_view(dg, filter_edge=lambda u, v: dg.edges[u, v]["static"])


def infer_entry_for_output(
    graph: Graph, output_file: str, static_graph: nx.DiGraph | None = None
) -> str:
    """Entry point of the output, or of its nearest static importer that has one.

    Shared chunks carry no entry point of their own; walking static imports
    backwards finds the entry that pulls them in. Empty when none does.
    """
    out = graph.outputs.get(output_file)
    if out is None:
        return ""
    if out.entry_point:
        return out.entry_point
    if static_graph is None:
        static_graph = static_output_graph(graph)
    for _, importer in nx.bfs_edges(static_graph, output_file, reverse=True):
        if graph.outputs[importer].entry_point:
            return graph.outputs[importer].entry_point
    return ""


def find_shortest_import_chain(
    graph: Graph, entry_input: str, target_input: str
) -> list[tuple[str, str]] | None:
    """Fewest-hop chain of (importer, imported) pairs from one input to another.

    Static and dynamic imports are both followed. Among equally short chains
    the one found first in declared import order wins. Returns None when the
    target cannot be reached.
    """
    if entry_input == target_input:
        return []
    dg = BundleGraphBuilder(graph).build_input_graph()
    if entry_input not in dg or target_input not in dg:
        return None

    parents: dict[str, str] = {}
    for node, parent in nx.bfs_predecessors(dg, entry_input):
        parents[node] = parent
        if node == target_input:
            break
    if target_input not in parents:
        return None

    chain = []
    current = target_input
    while current != entry_input:
        prev = parents[current]
        chain.append((prev, current))
        current = prev
    chain.reverse()
    return chain


def get_inclusion_path(
    graph: Graph,
    target_input: str,
    chunks: Sequence[ChunkSummary],
    initial_outputs: Collection[str] | None = None,
    entry_output: str | None = None,
) -> list[InclusionStep]:
    """Shortest import chain from the application entry to `target_input`.

    Each step names the importing file, the import statement it used, whether
    that import was dynamic, and whether the importer lives in an initial or a
    lazy chunk. The chunk is the first one in `chunks` that contains the
    importer, so pass initial chunks first for stable results.

    Args:
        graph: The bundle graph.
        target_input: Input path to explain.
        chunks: Chunk summaries to attribute importers to.
        initial_outputs: Outputs loaded on page load. Defaults to the
            classification of the entry output.
        entry_output: Entry output to start from. Defaults to pick_entry().

    Returns:
        The steps in order, or an empty list when the target is missing,
        unreachable, or is the entry itself.

    Raises:
        ValidationError: the graph breaks a structural invariant.
        ClassificationError: no entry output can be identified.
    """
    validate_graph(graph, warn_dangling=False)
    if target_input not in graph.inputs:
        return []

    entry_output = _resolve_entry(graph, entry_output)
    out = graph.outputs.get(entry_output)
    entry_input = out.entry_point if out is not None else ""
    if not entry_input:
        raise ClassificationError(f"'{entry_output}' is not an entry output")
    if initial_outputs is None:
        initial_outputs = classify(graph, entry_output).initial.outputs
    initial_outputs = set(initial_outputs)

    chain = find_shortest_import_chain(graph, entry_input, target_input)
    if not chain:
        logger.debug("No inclusion path from '%s' to '%s'", entry_input, target_input)
        return []

    steps: list[InclusionStep] = []
    for importer, imported in chain:
        edge = next(e for e in graph.inputs[importer].imports if e.path == imported)
        chunk_type, _ = _chunk_type_for(importer, chunks, initial_outputs)
        steps.append(
            InclusionStep(
                file=importer,
                import_statement=edge.specifier,
                is_dynamic_import=edge.is_dynamic,
                importer_chunk_type=chunk_type,
            )
        )
    return steps


def get_import_sources(
    graph: Graph,
    target_input: str,
    chunks: Sequence[ChunkSummary],
    initial_outputs: Collection[str],
) -> list[ImportSource]:
    """Every file that directly imports `target_input`.

    Importers in initial chunks come first, then importers in lazy chunks;
    within each group the metafile's input order is kept.
    """
    initial_outputs = set(initial_outputs)
    sources: list[ImportSource] = []

    for importer, node in graph.inputs.items():
        for edge in node.imports:
            if edge.path != target_input:
                continue
            chunk_type, chunk = _chunk_type_for(importer, chunks, initial_outputs)
            sources.append(
                ImportSource(
                    importer=importer,
                    import_statement=edge.specifier,
                    chunk_type=chunk_type,
                    is_dynamic_import=edge.is_dynamic,
                    chunk_output_file=chunk.output_file if chunk else None,
                    chunk_size=chunk.bytes if chunk else None,
                )
            )

    return sorted(sources, key=lambda s: s.chunk_type != ChunkType.INITIAL)


def find_best_chunk(
    file_path: str,
    chunks: Sequence[ChunkSummary],
    graph: Graph | None,
    fallback: ChunkSummary | None = None,
) -> ChunkSummary | None:
    """Find the chunk most relevant to a file.

    1. A chunk that bundles the file itself.
    2. The first chunk bundling one of the file's imports, in declared order.
       Barrel files that only re-export have no code of their own.
    3. `fallback`, usually the chunk currently on screen, else None.
    """
    direct = _first_chunk_containing(file_path, chunks)
    if direct is not None:
        return direct

    node = graph.inputs.get(file_path) if graph is not None else None
    if node is not None:
        for edge in node.imports:
            chunk = _first_chunk_containing(edge.path, chunks)
            if chunk is not None:
                return chunk

    return fallback


def get_chunks_created_by_file(
    graph: Graph, file_path: str, chunks: Sequence[ChunkSummary]
) -> list[CreatedChunk]:
    """Chunks that a file's dynamic imports most likely split off."""
    node = graph.inputs.get(file_path)
    if node is None:
        return []

    created: list[CreatedChunk] = []
    for edge in node.imports:
        if not edge.is_dynamic:
            continue
        import_path = re.sub(r"^[\"']|[\"']$", "", edge.path)
        needle = import_path.replace("./", "", 1)
        for chunk in chunks:
            entry = chunk.entry_point or chunk.inferred_entry
            if needle in entry or any(needle in i for i in chunk.included_inputs):
                created.append(
                    CreatedChunk(
                        chunk=chunk,
                        dynamic_import_path=import_path,
                        import_statement=edge.specifier,
                    )
                )
    return created
