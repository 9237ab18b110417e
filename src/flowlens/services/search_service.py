"""
Search service - free-text matching of transactions against a SearchState.

Matching is locale-agnostic: text is folded with str.casefold() and compared
with plain substring/equality tests, so results are deterministic across
platforms.
"""

from __future__ import annotations

from flowlens.config import UNTITLED_PLACEHOLDER
from flowlens.model.search import SearchMatchType, SearchState
from flowlens.model.transaction import Transaction


def _fold(text: str | None) -> str:
    return (text or "").strip().casefold()


def is_untitled(title: str | None) -> bool:
    """True for an empty title or the placeholder given to untitled transactions."""
    folded = _fold(title)
    return not folded or folded == UNTITLED_PLACEHOLDER.casefold()


def _fields(txn: Transaction, include_notes: bool) -> list[str]:
    fields = [_fold(txn.title)]
    if include_notes and txn.notes:
        fields.append(_fold(txn.notes))
    return fields


def match(state: SearchState, txn: Transaction) -> bool:
    """Decide whether a transaction satisfies the search.

    - untitled: title is empty or the placeholder; the query is ignored
    - exact: trimmed, case-folded equality with the title (or the notes)
    - partial: the trimmed query is a substring of the title (or the notes)
    - smart: every whitespace-separated token appears somewhere in the
      title, or in title + notes when notes are included

    An empty query matches everything in the text modes.
    """
    if state.match_type == SearchMatchType.untitled:
        return is_untitled(txn.title)

    query = _fold(state.query)
    if not query:
        return True

    fields = _fields(txn, state.include_notes)

    if state.match_type == SearchMatchType.exact:
        return any(field == query for field in fields)

    if state.match_type == SearchMatchType.partial:
        return any(query in field for field in fields)

    haystack = " ".join(fields)
    return all(token in haystack for token in query.split())


def is_search_active(state: SearchState) -> bool:
    return bool(_fold(state.query)) or state.match_type == SearchMatchType.untitled


def search_label(state: SearchState) -> str:
    """Chip label: the query, "Untitled" for the untitled mode, else "Search"."""
    if not is_search_active(state):
        return "Search"
    if state.match_type == SearchMatchType.untitled:
        return "Untitled"
    return state.query.strip()


__all__ = [
    "is_search_active",
    "is_untitled",
    "match",
    "search_label",
]
