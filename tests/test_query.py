"""Tests for inclusion paths, importer lookup and the best-chunk heuristic."""

from __future__ import annotations

import pytest

from bundlescope.analysis.chunks import summarize
from bundlescope.exceptions import ClassificationError, ValidationError
from bundlescope.graph.models import ChunkSummary, ChunkType
from bundlescope.graph.query import (
    find_best_chunk,
    find_shortest_import_chain,
    get_chunks_created_by_file,
    get_import_sources,
    get_inclusion_path,
    infer_entry_for_output,
)
from bundlescope.parser.core import parse_metafile
from bundlescope.parser.models import Graph, InputFile, OutputFile

INITIAL = ("dist/main.js", "dist/app.js", "dist/main.css")


def _diamond(first: str, second: str) -> Graph:
    """main.ts imports `first` then `second`; both import target.ts."""
    return parse_metafile({
        "inputs": {
            "main.ts": {"imports": [
                {"path": first, "kind": "import-statement", "original": f"./{first}"},
                {"path": second, "kind": "import-statement", "original": f"./{second}"},
            ]},
            "a.ts": {"imports": [{"path": "target.ts", "kind": "import-statement", "original": "./target"}]},
            "b.ts": {"imports": [{"path": "target.ts", "kind": "dynamic-import", "original": "./target"}]},
            "target.ts": {},
        },
        "outputs": {
            "main.js": {"entryPoint": "main.ts", "inputs": {"main.ts": {}, "a.ts": {}, "b.ts": {}}},
            "target.js": {"inputs": {"target.ts": {}}},
        },
    })


class TestInclusionPath:
    def test_scenario(self, scenario_graph: Graph, scenario_chunks):
        steps = get_inclusion_path(scenario_graph, "src/leaf.ts", scenario_chunks)
        assert [s.file for s in steps] == ["src/main.ts", "src/app.ts", "src/lazy.ts"]
        assert [s.import_statement for s in steps] == ["./app", "./lazy", "./leaf"]
        assert [s.is_dynamic_import for s in steps] == [False, True, False]
        assert [s.importer_chunk_type for s in steps] == [
            ChunkType.INITIAL, ChunkType.INITIAL, ChunkType.LAZY,
        ]

    def test_nonexistent_file(self, scenario_graph: Graph, scenario_chunks):
        assert get_inclusion_path(scenario_graph, "nonexistent-file", scenario_chunks) == []

    def test_unreachable_file(self, scenario_graph: Graph, scenario_chunks):
        assert get_inclusion_path(scenario_graph, "src/orphan.ts", scenario_chunks) == []

    def test_entry_itself(self, scenario_graph: Graph, scenario_chunks):
        assert get_inclusion_path(scenario_graph, "src/main.ts", scenario_chunks) == []

    def test_deterministic(self, scenario_graph: Graph, scenario_chunks):
        first = get_inclusion_path(scenario_graph, "src/leaf.ts", scenario_chunks)
        second = get_inclusion_path(scenario_graph, "src/leaf.ts", scenario_chunks)
        assert [s.model_dump() for s in first] == [s.model_dump() for s in second]

    def test_tie_break_follows_declared_order(self):
        chunks = summarize(["main.js", "target.js"], _diamond("a.ts", "b.ts"))
        steps = get_inclusion_path(_diamond("a.ts", "b.ts"), "target.ts", chunks)
        assert [s.file for s in steps] == ["main.ts", "a.ts"]
        assert not steps[1].is_dynamic_import

        steps = get_inclusion_path(_diamond("b.ts", "a.ts"), "target.ts", chunks)
        assert [s.file for s in steps] == ["main.ts", "b.ts"]
        assert steps[1].is_dynamic_import

    def test_prefers_fewer_hops(self):
        graph = parse_metafile({
            "inputs": {
                "main.ts": {"imports": [{"path": "long1.ts"}, {"path": "target.ts"}]},
                "long1.ts": {"imports": [{"path": "target.ts"}]},
                "target.ts": {},
            },
            "outputs": {"main.js": {"entryPoint": "main.ts", "inputs": {"main.ts": {}}}},
        })
        steps = get_inclusion_path(graph, "target.ts", [])
        assert [s.file for s in steps] == ["main.ts"]
        assert steps[0].import_statement == "target.ts"

    def test_dynamic_flag_only_on_dynamic_step(self, scenario_graph: Graph, scenario_chunks):
        steps = get_inclusion_path(scenario_graph, "src/leaf.ts", scenario_chunks)
        assert sum(s.is_dynamic_import for s in steps) == 1

    def test_first_matching_chunk_wins(self, scenario_graph: Graph):
        lazy_copy = ChunkSummary(output_file="dist/lazy.js", included_inputs=("src/main.ts",))
        chunks = [lazy_copy, *summarize(INITIAL, scenario_graph)]
        steps = get_inclusion_path(scenario_graph, "src/app.ts", chunks, initial_outputs=INITIAL)
        assert steps[0].importer_chunk_type == ChunkType.LAZY

    def test_importer_outside_chunks_is_lazy(self, scenario_graph: Graph):
        steps = get_inclusion_path(scenario_graph, "src/app.ts", [], initial_outputs=INITIAL)
        assert steps[0].importer_chunk_type == ChunkType.LAZY

    def test_explicit_entry_output(self, scenario_graph: Graph, scenario_chunks):
        steps = get_inclusion_path(
            scenario_graph, "src/app.ts", scenario_chunks, entry_output="dist/server/render.js"
        )
        assert [s.file for s in steps] == ["src/server.ts"]

    def test_invalid_graph_rejected(self):
        graph = Graph(
            inputs={"main.ts": InputFile()},
            outputs={"main.js": OutputFile(entry_point="gone.ts")},
        )
        with pytest.raises(ValidationError):
            get_inclusion_path(graph, "main.ts", [], initial_outputs=["main.js"])

    def test_no_entry_raises(self):
        graph = parse_metafile({"inputs": {"a.ts": {}}, "outputs": {"a.js": {"inputs": {"a.ts": {}}}}})
        with pytest.raises(ClassificationError):
            get_inclusion_path(graph, "a.ts", [])


class TestShortestImportChain:
    def test_chain(self, scenario_graph: Graph):
        chain = find_shortest_import_chain(scenario_graph, "src/main.ts", "src/leaf.ts")
        assert chain == [
            ("src/main.ts", "src/app.ts"),
            ("src/app.ts", "src/lazy.ts"),
            ("src/lazy.ts", "src/leaf.ts"),
        ]

    def test_unreachable(self, scenario_graph: Graph):
        assert find_shortest_import_chain(scenario_graph, "src/main.ts", "src/orphan.ts") is None

    def test_same_file(self, scenario_graph: Graph):
        assert find_shortest_import_chain(scenario_graph, "src/main.ts", "src/main.ts") == []


class TestImportSources:
    def test_direct_importers(self, scenario_graph: Graph, scenario_chunks):
        sources = get_import_sources(scenario_graph, "src/app.ts", scenario_chunks, INITIAL)
        assert [s.importer for s in sources] == ["src/main.ts", "src/server.ts"]

        main, server = sources
        assert main.chunk_type == ChunkType.INITIAL
        assert main.chunk_output_file == "dist/main.js"
        assert main.chunk_size == 1000
        assert main.import_statement == "./app"
        assert not main.is_dynamic_import

        assert server.chunk_type == ChunkType.LAZY
        assert server.chunk_output_file is None
        assert server.chunk_size is None

    def test_not_transitive(self, scenario_graph: Graph, scenario_chunks):
        sources = get_import_sources(scenario_graph, "src/leaf.ts", scenario_chunks, INITIAL)
        assert [s.importer for s in sources] == ["src/lazy.ts"]
        assert sources[0].chunk_type == ChunkType.LAZY

    def test_dynamic_importer(self, scenario_graph: Graph, scenario_chunks):
        (source,) = get_import_sources(scenario_graph, "src/lazy.ts", scenario_chunks, INITIAL)
        assert source.is_dynamic_import
        assert source.chunk_type == ChunkType.INITIAL

    def test_initial_before_lazy(self):
        graph = parse_metafile({
            "inputs": {
                "lazy1.ts": {"imports": [{"path": "shared.ts", "original": "./shared"}]},
                "eager.ts": {"imports": [{"path": "shared.ts", "original": "./shared"}]},
                "lazy2.ts": {"imports": [{"path": "shared.ts", "kind": "dynamic-import"}]},
                "eager2.ts": {"imports": [{"path": "shared.ts"}]},
                "shared.ts": {},
            },
            "outputs": {
                "main.js": {"entryPoint": "eager.ts", "inputs": {"eager.ts": {}, "eager2.ts": {}}},
                "route.js": {"inputs": {"lazy1.ts": {}, "lazy2.ts": {}}},
            },
        })
        chunks = summarize(["main.js", "route.js"], graph)
        sources = get_import_sources(graph, "shared.ts", chunks, ["main.js"])
        assert [s.importer for s in sources] == ["eager.ts", "eager2.ts", "lazy1.ts", "lazy2.ts"]
        assert [s.chunk_type for s in sources] == [
            ChunkType.INITIAL, ChunkType.INITIAL, ChunkType.LAZY, ChunkType.LAZY,
        ]

    def test_no_importers(self, scenario_graph: Graph, scenario_chunks):
        assert get_import_sources(scenario_graph, "src/main.ts", scenario_chunks, INITIAL) == []

    def test_missing_file(self, scenario_graph: Graph, scenario_chunks):
        assert get_import_sources(scenario_graph, "src/nope.ts", scenario_chunks, INITIAL) == []


class TestFindBestChunk:
    def test_direct(self, scenario_graph: Graph, scenario_chunks):
        chunk = find_best_chunk("src/lazy.ts", scenario_chunks, scenario_graph)
        assert chunk is not None and chunk.output_file == "dist/lazy.js"

    def test_barrel_file(self, barrel_graph: Graph):
        chunks = summarize(["dist/main.js", "dist/chunk-x.js"], barrel_graph)
        chunk = find_best_chunk("src/feature/index.ts", chunks, barrel_graph)
        assert chunk is not None and chunk.output_file == "dist/chunk-x.js"

    def test_fallback(self, scenario_graph: Graph, scenario_chunks):
        current = scenario_chunks[0]
        assert find_best_chunk("src/orphan.ts", scenario_chunks, scenario_graph, current) is current

    def test_not_found(self, scenario_graph: Graph, scenario_chunks):
        assert find_best_chunk("src/orphan.ts", scenario_chunks, scenario_graph) is None

    def test_without_graph(self, scenario_chunks):
        assert find_best_chunk("src/feature/index.ts", scenario_chunks, None) is None


class TestCreatedChunks:
    def test_dynamic_import_creates_chunk(self, scenario_graph: Graph, scenario_chunks):
        created = get_chunks_created_by_file(scenario_graph, "src/app.ts", scenario_chunks)
        assert [c.chunk.output_file for c in created] == ["dist/lazy.js"]
        assert created[0].import_statement == "./lazy"
        assert created[0].dynamic_import_path == "src/lazy.ts"

    def test_static_imports_ignored(self, scenario_graph: Graph, scenario_chunks):
        assert get_chunks_created_by_file(scenario_graph, "src/main.ts", scenario_chunks) == []

    def test_unknown_file(self, scenario_graph: Graph, scenario_chunks):
        assert get_chunks_created_by_file(scenario_graph, "nope.ts", scenario_chunks) == []

    def test_match_on_inferred_entry(self):
        graph = parse_metafile({
            "inputs": {
                "src/main.ts": {"imports": [
                    {"path": "src/page.ts", "kind": "dynamic-import", "original": "./page"},
                ]},
                "src/page.ts": {},
                "src/shared.ts": {},
            },
            "outputs": {
                "main.js": {"entryPoint": "src/main.ts", "inputs": {"src/main.ts": {}}},
                "page.js": {
                    "entryPoint": "src/page.ts",
                    "imports": [{"path": "shared-3f9a2c1d.js"}],
                    "inputs": {"src/page.ts": {}},
                },
                "shared-3f9a2c1d.js": {"inputs": {"src/shared.ts": {}}},
            },
        })
        chunks = summarize(["page.js", "shared-3f9a2c1d.js"], graph)
        created = get_chunks_created_by_file(graph, "src/main.ts", chunks)
        assert {c.chunk.output_file for c in created} == {"page.js", "shared-3f9a2c1d.js"}


class TestInferEntry:
    def test_own_entry(self, scenario_graph: Graph):
        assert infer_entry_for_output(scenario_graph, "dist/main.js") == "src/main.ts"

    def test_nearest_static_importer(self, scenario_graph: Graph):
        assert infer_entry_for_output(scenario_graph, "dist/app.js") == "src/main.ts"

    def test_dynamic_edges_not_followed(self, scenario_graph: Graph):
        assert infer_entry_for_output(scenario_graph, "dist/leaf.js") == ""

    def test_unknown_output(self, scenario_graph: Graph):
        assert infer_entry_for_output(scenario_graph, "dist/nope.js") == ""
