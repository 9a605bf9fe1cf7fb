"""Stateful navigation over analysis results."""

from bundlescope.navigation.history import HistoryState, NavigationHistory
from bundlescope.navigation.search import SearchCursor, find_chunks_with_search_term

__all__ = ["HistoryState", "NavigationHistory", "SearchCursor", "find_chunks_with_search_term"]
