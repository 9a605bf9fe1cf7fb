"""Initial versus lazy classification of bundle outputs."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

import networkx as nx

from bundlescope.config import AnalysisConfig
from bundlescope.exceptions import ClassificationError
from bundlescope.graph.builder import BundleGraphBuilder
from bundlescope.graph.models import InitialSummary, LoadBucket
from bundlescope.parser.core import validate_graph
from bundlescope.parser.models import Graph

logger = logging.getLogger("bundlescope.classify")

_DEFAULT_CONFIG = AnalysisConfig()


def _suffix_pattern(extensions: list[str]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(ext) for ext in extensions) or r"(?!)"
    return re.compile(rf"(?:{alternatives})(\?.*)?$", re.IGNORECASE)


class BrowserOutputFilter:
    """Decides which outputs a browser actually downloads.

    Server artefacts follow common React/Next.js conventions (``*.server.js``,
    ``server/`` directories) and are excluded along with source maps. The
    patterns come from AnalysisConfig, and any callable taking an output path
    can be used in place of this class where a plain predicate is accepted.
    """

    def __init__(self, config: AnalysisConfig | None = None) -> None:
        config = config or _DEFAULT_CONFIG
        self._js = _suffix_pattern(config.js_extensions)
        self._css = _suffix_pattern(config.css_extensions)
        self._server = [re.compile(p) for p in config.server_patterns]
        self._excluded = tuple(s.lower() for s in config.exclude_suffixes)

    def is_js(self, path: str) -> bool:
        return bool(self._js.search(path))

    def is_css(self, path: str) -> bool:
        return bool(self._css.search(path))

    def is_server(self, path: str) -> bool:
        lower = path.lower()
        return any(p.search(lower) for p in self._server)

    def accepts_entry(self, path: str) -> bool:
        """Whether an output may be picked as the main browser entry."""
        return self.is_js(path) and not self.is_server(path)

    def __call__(self, path: str) -> bool:
        if path.lower().endswith(self._excluded):
            return False
        return (self.is_js(path) or self.is_css(path)) and not self.is_server(path)


_DEFAULT_FILTER = BrowserOutputFilter()


def is_js_output(path: str) -> bool:
    """True for browser JavaScript (`.js`, `.cjs`); `.mjs` is left to the server."""
    return _DEFAULT_FILTER.is_js(path)


def is_likely_server_output(path: str) -> bool:
    """Best-effort check for server-only bundles."""
    return _DEFAULT_FILTER.is_server(path)


def _entry_predicate(is_browser: Callable[[str], bool] | None) -> Callable[[str], bool]:
    if is_browser is None:
        return _DEFAULT_FILTER.accepts_entry
    if isinstance(is_browser, BrowserOutputFilter):
        return is_browser.accepts_entry
    return lambda path: is_js_output(path) and is_browser(path)


def _basename(path: str) -> str:
    parts = path.replace("\\", "/").split("/")
    return parts[-1] or path


def _entry_score(entry_point: str, reachable: int) -> int:
    base = _basename(entry_point)
    score = reachable
    if re.match(r"main(\.|$)", base):
        score += 100
    if re.search(r"polyfills", base, re.IGNORECASE):
        score -= 80
    if re.search(r"styles?", base, re.IGNORECASE):
        score -= 80
    if re.search(r"(spec|test)\.", base, re.IGNORECASE):
        score -= 50
    return score


def pick_entry(
    graph: Graph,
    preferred_entry: str | None = None,
    is_browser: Callable[[str], bool] | None = None,
) -> str | None:
    """Pick the output most likely to be the main browser bundle.

    Only JavaScript outputs accepted by `is_browser` are candidates. Returns
    None when no such output has an entry point; callers must treat that as
    fatal instead of guessing.
    """
    accepts = _entry_predicate(is_browser)
    candidates = [
        path for path, out in graph.outputs.items()
        if out.entry_point and accepts(path)
    ]
    if not candidates:
        logger.debug("No browser entry outputs among %d outputs", len(graph.outputs))
        return None
    if len(candidates) == 1:
        return candidates[0]

    if preferred_entry:
        for path in candidates:
            if graph.outputs[path].entry_point == preferred_entry:
                return path
        logger.warning("Preferred entry '%s' matches no entry output", preferred_entry)

    # Entries statically imported by another entry are not the root
    entry_graph = BundleGraphBuilder(graph).build_output_graph(
        is_relevant=set(candidates).__contains__,
    )
    static_graph = nx.subgraph_view(
        entry_graph, filter_edge=lambda u, v: entry_graph.edges[u, v]["static"]
    )
    roots = [p for p in candidates if static_graph.in_degree(p) == 0]
    pool = roots or candidates

    scored = sorted(
        (
            -_entry_score(graph.outputs[p].entry_point, len(nx.descendants(static_graph, p))),
            p,
        )
        for p in pool
    )
    picked = scored[0][1]
    logger.debug("Picked entry output '%s' from %d candidates", picked, len(candidates))
    return picked


def classify(
    graph: Graph,
    entry_output: str,
    is_browser: Callable[[str], bool] | None = None,
) -> InitialSummary:
    """Split outputs into those loaded on page load and those loaded on demand.

    Static imports are followed from the entry output; all of that closure is
    initial. Crossing a dynamic import leads into lazy territory, which spreads
    through every edge kind. Outputs rejected by `is_browser` or unreachable
    from the entry end up in neither bucket.
    """
    validate_graph(graph, warn_dangling=False)
    out = graph.outputs.get(entry_output)
    if out is None:
        raise ClassificationError(f"Entry output '{entry_output}' is not in the graph")
    if not out.entry_point:
        raise ClassificationError(f"Output '{entry_output}' has no entry point")

    dg = BundleGraphBuilder(graph).build_output_graph(
        is_relevant=is_browser or _DEFAULT_FILTER,
        always_include=(entry_output,),
    )
    static_graph = nx.subgraph_view(
        dg, filter_edge=lambda u, v: dg.edges[u, v]["static"]
    )

    initial = {entry_output} | nx.descendants(static_graph, entry_output)

    lazy: set[str] = set()
    for node in initial:
        for succ in dg.successors(node):
            if dg.edges[node, succ]["dynamic"] and succ not in lazy:
                lazy.add(succ)
                lazy |= nx.descendants(dg, succ)
    lazy -= initial

    ordered_initial = [entry_output] + [
        p for p in graph.outputs if p in initial and p != entry_output
    ]
    ordered_lazy = [p for p in graph.outputs if p in lazy]

    summary = InitialSummary(
        entry_output=entry_output,
        initial=LoadBucket(
            outputs=tuple(ordered_initial),
            total_bytes=sum(graph.outputs[p].bytes for p in ordered_initial),
        ),
        lazy=LoadBucket(
            outputs=tuple(ordered_lazy),
            total_bytes=sum(graph.outputs[p].bytes for p in ordered_lazy),
        ),
    )
    logger.debug(
        "Classified %d initial (%d bytes) and %d lazy (%d bytes) outputs",
        len(ordered_initial), summary.initial.total_bytes,
        len(ordered_lazy), summary.lazy.total_bytes,
    )
    return summary
