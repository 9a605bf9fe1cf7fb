"""Side-by-side comparison of two bundle analyses."""

from __future__ import annotations

import math
import re
from collections.abc import Sequence
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from bundlescope.analysis.engine import BundleAnalysis
from bundlescope.graph.models import ChunkSummary

WEIGHTS = {"total": 40, "initial": 40, "chunks": 20}


class Verdict(str, Enum):
    """Overall judgement of a bundle change."""

    POSITIVE = "positive"
    MIXED = "mixed"
    NEGATIVE = "negative"


class ComparisonMetrics(BaseModel):
    """Headline numbers for the left (before) and right (after) builds."""

    total_left: int
    total_right: int
    initial_left: int
    initial_right: int
    chunks_left: int
    chunks_right: int


class ScoreResult(BaseModel):
    score: float  # 0-1
    verdict: Verdict
    detail: dict[str, float] = Field(default_factory=dict)

    def describe(self) -> str:
        """Human-readable summary, e.g. "80% (smaller total size & fewer chunks)"."""
        percentage = round(self.score * 100)
        improvements = []
        if self.detail.get("total", 0) > 0:
            improvements.append("smaller total size")
        if self.detail.get("initial", 0) > 0:
            improvements.append("less initial code")
        if self.detail.get("chunks", 0) > 0:
            improvements.append("fewer chunks")
        if not improvements:
            return f"{percentage}% - No improvements detected"
        return f"{percentage}% ({' & '.join(improvements)})"


def _section_score(delta: int, weight: int) -> float:
    if delta < 0:
        return weight
    if delta == 0:
        return weight / 2
    return 0


def score_change(metrics: ComparisonMetrics) -> ScoreResult:
    """Score a change: shrinking earns full points, unchanged half, growth none."""
    detail = {
        "total": _section_score(metrics.total_right - metrics.total_left, WEIGHTS["total"]),
        "initial": _section_score(
            metrics.initial_right - metrics.initial_left, WEIGHTS["initial"]
        ),
        "chunks": _section_score(metrics.chunks_right - metrics.chunks_left, WEIGHTS["chunks"]),
    }
    score = sum(detail.values()) / 100

    verdict = Verdict.MIXED
    if score >= 0.7:
        verdict = Verdict.POSITIVE
    elif score < 0.4:
        verdict = Verdict.NEGATIVE
    return ScoreResult(score=score, verdict=verdict, detail=detail)


class OutputDiff(BaseModel):
    """Set differences between the outputs of two builds."""

    model_config = ConfigDict(frozen=True)

    added: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    shared: list[str] = Field(default_factory=list)


MATCH_THRESHOLD = 40
GOOD_MATCH = 65

_HASH_SUFFIX = re.compile(r"-(?:[A-Z0-9]{8}|[a-f0-9]{6,})\.")


class MatchType(str, Enum):
    GOOD = "good"
    WEAK = "weak"


class ChunkMatch(BaseModel):
    """A chunk of the left build paired with its counterpart on the right."""

    model_config = ConfigDict(frozen=True)

    left: ChunkSummary
    right: ChunkSummary
    score: int  # 0-100
    match_type: MatchType

    @property
    def renamed(self) -> bool:
        return self.left.output_file != self.right.output_file


class ChunkComparison(BaseModel):
    model_config = ConfigDict(frozen=True)

    matched: list[ChunkMatch] = Field(default_factory=list)
    unmatched_left: list[ChunkSummary] = Field(default_factory=list)
    unmatched_right: list[ChunkSummary] = Field(default_factory=list)
    average_score: float = 0


def _round(value: float) -> int:
    return math.floor(value + 0.5)


def _size_similarity(left: int, right: int) -> int:
    if left == 0 and right == 0:
        return 25
    if left == 0 or right == 0:
        return 0
    return _round(min(left, right) / max(left, right) * 25)


def _entry_similarity(left: str, right: str) -> int:
    if not left and not right:
        return 20
    if not left or not right:
        return 0
    if left == right:
        return 20
    left_parts, right_parts = left.split("/"), right.split("/")
    if left_parts[-1] == right_parts[-1]:
        return 15
    if set(left_parts) & set(right_parts):
        return 10
    return 0


def _content_similarity(left: Sequence[str], right: Sequence[str]) -> int:
    if not left and not right:
        return 25
    if not left or not right:
        return 0
    left_set, right_set = set(left), set(right)
    return _round(len(left_set & right_set) / len(left_set | right_set) * 25)


def strip_hash(filename: str) -> str:
    """Drop a content hash: ``chunk-5HZJ2QLD.js`` becomes ``chunk.js``."""
    return _HASH_SUFFIX.sub(".", filename, count=1)


def _filename_similarity(left: str, right: str) -> int:
    if left == right:
        return 10
    left, right = strip_hash(left), strip_hash(right)
    if left == right:
        return 8
    left_prefix = re.split(r"[-.]", left)[0]
    right_prefix = re.split(r"[-.]", right)[0]
    if left_prefix == right_prefix and len(left_prefix) > 2:
        return 5
    return 0


def chunk_similarity(left: ChunkSummary, right: ChunkSummary) -> int:
    """Score how likely two chunks are the same chunk across builds (0-100).

    Size 25, entry point 20, entry/non-entry kind 20, shared inputs 25 and
    file name 10.
    """
    return (
        _size_similarity(left.bytes, right.bytes)
        + _entry_similarity(left.entry_point, right.entry_point)
        + (20 if left.is_entry == right.is_entry else 0)
        + _content_similarity(left.included_inputs, right.included_inputs)
        + _filename_similarity(left.output_file, right.output_file)
    )


def match_chunks(
    left_chunks: Sequence[ChunkSummary], right_chunks: Sequence[ChunkSummary]
) -> ChunkComparison:
    """Pair chunks between two builds, one to one.

    Every left/right pair is scored and pairs are taken greedily, best score
    first; ties go to the pair that comes first in the input order. Pairs
    scoring below MATCH_THRESHOLD stay unmatched.
    """
    pairs = sorted(
        (
            (chunk_similarity(left, right), i, j)
            for i, left in enumerate(left_chunks)
            for j, right in enumerate(right_chunks)
        ),
        key=lambda pair: -pair[0],
    )

    matched: list[ChunkMatch] = []
    used_left: set[int] = set()
    used_right: set[int] = set()
    for score, i, j in pairs:
        if score < MATCH_THRESHOLD:
            break
        if i in used_left or j in used_right:
            continue
        matched.append(
            ChunkMatch(
                left=left_chunks[i],
                right=right_chunks[j],
                score=score,
                match_type=MatchType.GOOD if score >= GOOD_MATCH else MatchType.WEAK,
            )
        )
        used_left.add(i)
        used_right.add(j)

    return ChunkComparison(
        matched=matched,
        unmatched_left=[c for i, c in enumerate(left_chunks) if i not in used_left],
        unmatched_right=[c for j, c in enumerate(right_chunks) if j not in used_right],
        average_score=sum(m.score for m in matched) / len(matched) if matched else 0,
    )


class BundleComparison(BaseModel):
    metrics: ComparisonMetrics
    score: ScoreResult
    initial_outputs: OutputDiff
    lazy_outputs: OutputDiff
    chunks: ChunkComparison = Field(default_factory=ChunkComparison)

    @property
    def total_delta(self) -> int:
        return self.metrics.total_right - self.metrics.total_left

    @property
    def initial_delta(self) -> int:
        return self.metrics.initial_right - self.metrics.initial_left


def _diff(left: tuple[str, ...], right: tuple[str, ...]) -> OutputDiff:
    left_set, right_set = set(left), set(right)
    return OutputDiff(
        added=[p for p in right if p not in left_set],
        removed=[p for p in left if p not in right_set],
        shared=[p for p in left if p in right_set],
    )


def compare_analyses(left: BundleAnalysis, right: BundleAnalysis) -> BundleComparison:
    """Compare two independently analysed builds."""
    ls, rs = left.initial_summary, right.initial_summary
    metrics = ComparisonMetrics(
        total_left=ls.initial.total_bytes + ls.lazy.total_bytes,
        total_right=rs.initial.total_bytes + rs.lazy.total_bytes,
        initial_left=ls.initial.total_bytes,
        initial_right=rs.initial.total_bytes,
        chunks_left=len(left.chunks),
        chunks_right=len(right.chunks),
    )
    return BundleComparison(
        metrics=metrics,
        score=score_change(metrics),
        initial_outputs=_diff(ls.initial.outputs, rs.initial.outputs),
        lazy_outputs=_diff(ls.lazy.outputs, rs.lazy.outputs),
        chunks=match_chunks(left.chunks, right.chunks),
    )
