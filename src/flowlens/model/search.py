from __future__ import annotations

"""Search state for the transaction list search panel."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class SearchMatchType(StrEnum):
    smart = "smart"
    partial = "partial"
    exact = "exact"
    untitled = "untitled"


SEARCH_MATCH_LABELS: dict[SearchMatchType, str] = {
    SearchMatchType.smart: "Smart",
    SearchMatchType.partial: "Partial match",
    SearchMatchType.exact: "Exact match",
    SearchMatchType.untitled: "Untitled",
}


class SearchState(BaseModel):
    """Query text plus match semantics. `untitled` ignores `query` entirely."""

    model_config = ConfigDict(frozen=True)

    query: str = ""
    match_type: SearchMatchType = SearchMatchType.smart
    include_notes: bool = False


DEFAULT_SEARCH_STATE = SearchState()


__all__ = [
    "DEFAULT_SEARCH_STATE",
    "SEARCH_MATCH_LABELS",
    "SearchMatchType",
    "SearchState",
]
