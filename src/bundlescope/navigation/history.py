"""Back/forward history over visited files."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class HistoryState(BaseModel):
    """An immutable history: visited paths plus a cursor.

    The cursor is -1 exactly when there are no entries. Transitions return a
    new state and leave the receiver untouched.
    """

    model_config = ConfigDict(frozen=True)

    entries: tuple[str, ...] = ()
    cursor: int = -1

    @property
    def current(self) -> str | None:
        return self.entries[self.cursor] if self.cursor >= 0 else None

    @property
    def has_previous(self) -> bool:
        return self.cursor > 0

    @property
    def has_next(self) -> bool:
        return self.cursor < len(self.entries) - 1

    def push(self, path: str) -> HistoryState:
        """Visit `path`, dropping any forward entries.

        Visiting the path that is already the last kept entry only moves the
        cursor onto it.
        """
        kept = self.entries[: self.cursor + 1]
        if kept and kept[-1] == path:
            return HistoryState(entries=kept, cursor=len(kept) - 1)
        return HistoryState(entries=(*kept, path), cursor=len(kept))

    def retreat(self) -> HistoryState:
        if not self.has_previous:
            return self
        return HistoryState(entries=self.entries, cursor=self.cursor - 1)

    def advance(self) -> HistoryState:
        if not self.has_next:
            return self
        return HistoryState(entries=self.entries, cursor=self.cursor + 1)

    def clear(self) -> HistoryState:
        return HistoryState()


class NavigationHistory:
    """Single-owner browser-style history for one panel.

    Wraps a HistoryState; use clone() to give an independent panel (such as
    the other side of a comparison) its own copy.
    """

    def __init__(self, state: HistoryState | None = None) -> None:
        self.state = state or HistoryState()

    def push(self, path: str) -> None:
        self.state = self.state.push(path)

    def get_current(self) -> str | None:
        return self.state.current

    def get_previous(self) -> str | None:
        """Step back; None (cursor unchanged) when already at the oldest entry."""
        if not self.state.has_previous:
            return None
        self.state = self.state.retreat()
        return self.state.current

    def get_next(self) -> str | None:
        """Step forward; None (cursor unchanged) when already at the newest entry."""
        if not self.state.has_next:
            return None
        self.state = self.state.advance()
        return self.state.current

    def has_previous(self) -> bool:
        return self.state.has_previous

    def has_next(self) -> bool:
        return self.state.has_next

    def clear(self) -> None:
        self.state = self.state.clear()

    def clone(self) -> NavigationHistory:
        return NavigationHistory(self.state)

    def __len__(self) -> int:
        return len(self.state.entries)
