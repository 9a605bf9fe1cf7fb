"""Shared test fixtures for bundlescope."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from bundlescope.analysis.chunks import summarize
from bundlescope.parser.core import parse_metafile
from bundlescope.parser.models import Graph


def _edge(path: str, kind: str = "import-statement", original: str = "", external: bool = False) -> dict:
    edge = {"path": path, "kind": kind}
    if original:
        edge["original"] = original
    if external:
        edge["external"] = True
    return edge


@pytest.fixture
def scenario_metafile() -> dict:
    """main.ts -static-> app.ts -dynamic-> lazy.ts -static-> leaf.ts, one chunk each.

    Also carries a server bundle, a stylesheet, a source map, and an output
    nothing imports.
    """
    return {
        "inputs": {
            "src/main.ts": {
                "bytes": 120,
                "imports": [
                    _edge("src/app.ts", original="./app"),
                    _edge("src/styles.css", kind="import-statement", original="./styles.css"),
                ],
                "format": "esm",
            },
            "src/app.ts": {
                "bytes": 400,
                "imports": [_edge("src/lazy.ts", kind="dynamic-import", original="./lazy")],
            },
            "src/lazy.ts": {
                "bytes": 250,
                "imports": [
                    _edge("src/leaf.ts", original="./leaf"),
                    _edge("react", original="react", external=True),
                ],
            },
            "src/leaf.ts": {"bytes": 90},
            "src/styles.css": {"bytes": 60, "imports": []},
            "src/server.ts": {"bytes": 900, "imports": [_edge("src/app.ts", original="./app")]},
            "src/orphan.ts": {"bytes": 10},
        },
        "outputs": {
            "dist/main.js": {
                "bytes": 1000,
                "entryPoint": "src/main.ts",
                "imports": [
                    _edge("dist/app.js"),
                    _edge("dist/main.css", kind="import-rule"),
                ],
                "inputs": {"src/main.ts": {"bytesInOutput": 100}},
                "exports": [],
            },
            "dist/main.css": {
                "bytes": 50,
                "inputs": {"src/styles.css": {"bytesInOutput": 50}},
            },
            "dist/app.js": {
                "bytes": 500,
                "imports": [_edge("dist/lazy.js", kind="dynamic-import")],
                "inputs": {"src/app.ts": {"bytesInOutput": 480}},
                "exports": ["App"],
            },
            "dist/lazy.js": {
                "bytes": 300,
                "imports": [_edge("dist/leaf.js")],
                "inputs": {"src/lazy.ts": {"bytesInOutput": 290}},
            },
            "dist/leaf.js": {
                "bytes": 200,
                "inputs": {"src/leaf.ts": {"bytesInOutput": 90}},
            },
            "dist/main.js.map": {"bytes": 4000},
            "dist/server/render.js": {
                "bytes": 5000,
                "entryPoint": "src/server.ts",
                "imports": [_edge("dist/app.js")],
                "inputs": {"src/server.ts": {"bytesInOutput": 900}},
            },
            "dist/orphan.js": {
                "bytes": 70,
                "inputs": {"src/orphan.ts": {"bytesInOutput": 10}},
            },
        },
    }


@pytest.fixture
def scenario_graph(scenario_metafile: dict) -> Graph:
    return parse_metafile(scenario_metafile)


@pytest.fixture
def scenario_chunks(scenario_graph: Graph):
    """Initial chunks first, then lazy ones."""
    initial = summarize(["dist/main.js", "dist/app.js", "dist/main.css"], scenario_graph)
    lazy = summarize(["dist/lazy.js", "dist/leaf.js"], scenario_graph)
    return initial + lazy


@pytest.fixture
def barrel_graph() -> Graph:
    """An index.ts barrel that re-exports impl.ts and is bundled nowhere itself."""
    return parse_metafile({
        "inputs": {
            "src/main.ts": {"imports": [_edge("src/feature/index.ts", original="./feature")]},
            "src/feature/index.ts": {
                "imports": [
                    _edge("src/feature/types.ts", original="./types"),
                    _edge("src/feature/impl.ts", original="./impl"),
                ],
            },
            "src/feature/types.ts": {},
            "src/feature/impl.ts": {"bytes": 800},
        },
        "outputs": {
            "dist/main.js": {
                "bytes": 100,
                "entryPoint": "src/main.ts",
                "imports": [_edge("dist/chunk-x.js")],
                "inputs": {"src/main.ts": {}},
            },
            "dist/chunk-x.js": {
                "bytes": 800,
                "inputs": {"src/feature/impl.ts": {"bytesInOutput": 800}},
            },
        },
    })


@pytest.fixture
def write_metafile(tmp_path: Path):
    """Write a metafile dict to disk and return its path."""

    def _write(data: dict, name: str = "meta.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return path

    return _write
