"""Metafile loading, normalization and validation."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from bundlescope.exceptions import MetafileError, ValidationError
from bundlescope.parser.models import Graph

logger = logging.getLogger("bundlescope.parser")


def _normalize_edges(raw: Any) -> list[dict]:
    edges = []
    for edge in raw or []:
        if not isinstance(edge, dict) or "path" not in edge:
            raise MetafileError(f"Malformed import edge: {edge!r}")
        edges.append({
            "path": edge["path"],
            "kind": edge.get("kind") or "import-statement",
            "external": bool(edge.get("external", False)),
            "original": edge.get("original") or "",
        })
    return edges


def _normalize_input(raw: dict) -> dict:
    return {
        "bytes": raw.get("bytes") or 0,
        "imports": _normalize_edges(raw.get("imports")),
        "format": raw.get("format"),
        "loader": raw.get("loader"),
    }


def _normalize_output(raw: dict) -> dict:
    contributions = {}
    for input_path, info in (raw.get("inputs") or {}).items():
        info = info or {}
        contributions[input_path] = {"bytes_in_output": info.get("bytesInOutput") or 0}
    return {
        "bytes": raw.get("bytes") or 0,
        "entry_point": raw.get("entryPoint") or "",
        "imports": _normalize_edges(raw.get("imports")),
        "inputs": contributions,
        "exports": list(raw.get("exports") or []),
        "css_bundle": raw.get("cssBundle"),
    }


def parse_metafile(data: Any) -> Graph:
    """Turn decoded metafile JSON into a validated Graph.

    Missing sizes become 0 and missing import lists become empty. Raises
    MetafileError for documents that are not metafiles and ValidationError
    when the resulting graph breaks an invariant.
    """
    if not isinstance(data, dict) or "inputs" not in data or "outputs" not in data:
        raise MetafileError("Invalid esbuild metafile JSON: expected 'inputs' and 'outputs'")
    if not isinstance(data["inputs"], dict) or not isinstance(data["outputs"], dict):
        raise MetafileError("Invalid esbuild metafile JSON: 'inputs' and 'outputs' must be objects")

    try:
        graph = Graph(
            inputs={p: _normalize_input(i or {}) for p, i in data["inputs"].items()},
            outputs={p: _normalize_output(o or {}) for p, o in data["outputs"].items()},
        )
    except (AttributeError, PydanticValidationError) as e:
        raise MetafileError(f"Invalid esbuild metafile JSON: {e}") from e

    logger.debug(
        "Parsed metafile with %d inputs and %d outputs",
        len(graph.inputs), len(graph.outputs),
    )
    return validate_graph(graph)


def load_metafile(path: str | Path) -> Graph:
    """Read and parse a metafile from disk."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise MetafileError(f"Cannot read {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise MetafileError(f"{path} is not UTF-8 text: {e}") from e
    except json.JSONDecodeError as e:
        raise MetafileError(f"{path} is not valid JSON: {e}") from e
    return parse_metafile(data)


def validate_graph(graph: Graph, warn_dangling: bool = True) -> Graph:
    """Check structural invariants, returning the graph unchanged when valid.

    Output imports that point at unknown outputs are tolerated; they are
    logged unless `warn_dangling` is off.
    """
    problems = [
        f"output '{path}' has entry point '{out.entry_point}' which is not an input"
        for path, out in graph.outputs.items()
        if out.entry_point and out.entry_point not in graph.inputs
    ]
    if problems:
        raise ValidationError("Invalid bundle graph", problems)
    if not warn_dangling:
        return graph

    for path, out in graph.outputs.items():
        for edge in out.imports:
            if not edge.external and edge.path not in graph.outputs:
                logger.warning("Output '%s' imports unknown output '%s'", path, edge.path)
    return graph


def get_module_details(graph: Graph, input_path: str) -> dict | None:
    """Get size, format, loader and import count for one input."""
    node = graph.inputs.get(input_path)
    if node is None:
        return None
    return {
        "bytes": node.bytes,
        "format": node.format,
        "loader": node.loader,
        "imports_count": len(node.imports),
    }
