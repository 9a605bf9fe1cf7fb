"""Jump-to-next/previous match across a multi-chunk search."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from pydantic import BaseModel, ConfigDict

from bundlescope.analysis.chunks import matches_search
from bundlescope.graph.models import ChunkSummary


class Direction(str, Enum):
    NEXT = "next"
    PREV = "prev"


def find_chunks_with_search_term(
    chunks: Iterable[ChunkSummary], search_term: str
) -> list[ChunkSummary]:
    """Chunks with at least one input matching the term (case-insensitive).

    An empty term matches nothing.
    """
    if not search_term:
        return []
    return [chunk for chunk in chunks if matches_search(chunk, search_term)]


def matching_inputs(chunk: ChunkSummary, search_term: str) -> list[str]:
    if not search_term:
        return []
    needle = search_term.lower()
    return [path for path in chunk.included_inputs if needle in path.lower()]


def next_result_index(current: int, total: int, direction: Direction) -> int:
    """Step within one chunk's results, wrapping at both ends; -1 if there are none."""
    if total == 0:
        return -1
    step = 1 if direction == Direction.NEXT else -1
    return (current + step) % total


def should_switch_chunk(direction: Direction, current: int, total: int) -> bool:
    """Whether stepping from `current` leaves the chunk's results."""
    if total == 0:
        return True
    if direction == Direction.NEXT:
        return current >= total - 1
    return current <= 0


class SearchCursor(BaseModel):
    """Position within the matches of a search spanning several chunks.

    Both indices are -1 when nothing matches; moving is then a no-op.
    """

    model_config = ConfigDict(frozen=True)

    search_term: str = ""
    matching_chunks: tuple[ChunkSummary, ...] = ()
    chunk_index: int = -1
    result_index: int = -1

    @classmethod
    def start(cls, chunks: Iterable[ChunkSummary], search_term: str) -> SearchCursor:
        matching = tuple(find_chunks_with_search_term(chunks, search_term))
        start = 0 if matching else -1
        return cls(
            search_term=search_term,
            matching_chunks=matching,
            chunk_index=start,
            result_index=start,
        )

    @property
    def current_chunk(self) -> ChunkSummary | None:
        if self.chunk_index < 0:
            return None
        return self.matching_chunks[self.chunk_index]

    @property
    def current_match(self) -> str | None:
        chunk = self.current_chunk
        if chunk is None:
            return None
        results = matching_inputs(chunk, self.search_term)
        if not 0 <= self.result_index < len(results):
            return None
        return results[self.result_index]

    def results_in(self, chunk_index: int) -> list[str]:
        return matching_inputs(self.matching_chunks[chunk_index], self.search_term)

    def locate(self, chunk: ChunkSummary) -> int:
        """Index of `chunk` among the matching chunks, or -1."""
        for i, candidate in enumerate(self.matching_chunks):
            if candidate == chunk:
                return i
        return -1

    def _move(self, direction: Direction) -> SearchCursor:
        if not self.matching_chunks:
            return self
        count = len(self.matching_chunks)
        total = len(self.results_in(self.chunk_index))

        if not should_switch_chunk(direction, self.result_index, total):
            return self.model_copy(
                update={"result_index": next_result_index(self.result_index, total, direction)}
            )

        if direction == Direction.NEXT:
            chunk_index = (self.chunk_index + 1) % count
            result_index = 0
        else:
            chunk_index = (self.chunk_index - 1) % count
            result_index = len(self.results_in(chunk_index)) - 1
        return self.model_copy(
            update={"chunk_index": chunk_index, "result_index": result_index}
        )

    def next(self) -> SearchCursor:
        """Advance to the next match, rolling over into the next chunk."""
        return self._move(Direction.NEXT)

    def prev(self) -> SearchCursor:
        """Go back to the previous match, rolling over to the previous chunk's last match."""
        return self._move(Direction.PREV)
