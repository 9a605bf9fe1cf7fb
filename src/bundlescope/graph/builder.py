"""Build networkx views of a bundle graph."""

from __future__ import annotations

from collections.abc import Callable, Iterable

import networkx as nx

from bundlescope.parser.models import Graph


class BundleGraphBuilder:
    """Builds directed graphs over a metafile's outputs and inputs.

    Two graphs are produced:
    - Output graph: chunk -> chunk edges, flagged ``static`` and/or ``dynamic``
      (a pair of chunks may be joined by both kinds of import).
    - Input graph: source file -> source file edges. Only the first declared
      edge between two files is kept, so adjacency order matches the order of
      the importer's import list.
    """

    def __init__(self, graph: Graph) -> None:
        self.source = graph

    def build_output_graph(
        self,
        is_relevant: Callable[[str], bool] | None = None,
        always_include: Iterable[str] = (),
    ) -> nx.DiGraph:
        """Build the chunk graph, keeping only outputs accepted by `is_relevant`.

        External edges and edges to outputs missing from the metafile are dropped.
        """
        outputs = self.source.outputs
        keep = {
            path for path in outputs
            if is_relevant is None or is_relevant(path)
        }
        keep.update(p for p in always_include if p in outputs)

        dg = nx.DiGraph()
        for path in outputs:
            if path in keep:
                dg.add_node(path, bytes=outputs[path].bytes)

        for path in outputs:
            if path not in keep:
                continue
            for edge in outputs[path].imports:
                if edge.external or edge.path not in keep:
                    continue
                if dg.has_edge(path, edge.path):
                    data = dg.edges[path, edge.path]
                else:
                    dg.add_edge(path, edge.path, static=False, dynamic=False)
                    data = dg.edges[path, edge.path]
                if edge.is_dynamic:
                    data["dynamic"] = True
                else:
                    data["static"] = True
        return dg

    def build_input_graph(self) -> nx.DiGraph:
        """Build the source file graph following every import kind."""
        dg = nx.DiGraph()
        for path, node in self.source.inputs.items():
            dg.add_node(path, bytes=node.bytes)

        for path, node in self.source.inputs.items():
            for edge in node.imports:
                if dg.has_edge(path, edge.path):
                    continue
                dg.add_edge(
                    path,
                    edge.path,
                    kind=edge.kind,
                    dynamic=edge.is_dynamic,
                    specifier=edge.specifier,
                )
        return dg

    def get_stats(self) -> dict:
        """Get graph statistics."""
        edge_kinds: dict[str, int] = {}
        for node in self.source.inputs.values():
            for edge in node.imports:
                edge_kinds[edge.kind] = edge_kinds.get(edge.kind, 0) + 1

        return {
            "inputs": len(self.source.inputs),
            "outputs": len(self.source.outputs),
            "entry_outputs": sum(1 for o in self.source.outputs.values() if o.entry_point),
            "input_bytes": sum(i.bytes for i in self.source.inputs.values()),
            "output_bytes": sum(o.bytes for o in self.source.outputs.values()),
            "external_imports": sum(
                1 for i in self.source.inputs.values() for e in i.imports if e.external
            ),
            "edge_kinds": edge_kinds,
        }
