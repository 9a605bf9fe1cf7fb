"""Metafile parsing into the bundle graph model."""

from bundlescope.parser.core import load_metafile, parse_metafile, validate_graph
from bundlescope.parser.models import Graph, ImportEdge, ImportKind, InputFile, OutputFile

__all__ = [
    "Graph",
    "ImportEdge",
    "ImportKind",
    "InputFile",
    "OutputFile",
    "load_metafile",
    "parse_metafile",
    "validate_graph",
]
