from __future__ import annotations

"""
Transaction snapshot and saved-filter I/O.

- Ledger JSON <-> model conversion is pure text (no disk access); callers read
  and write files.
- Saved filters live in config/filters.yml and are loaded with PyYAML's safe
  loader, then validated with pydantic.

Privacy
- All operations are local; no network access.
- No logging of raw data here; callers decide what to print.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from flowlens.model.filters import FilterState
from flowlens.model.search import SearchState
from flowlens.model.transaction import Account, Transaction


class Ledger(BaseModel):
    """Snapshot of the store handed to the query engine."""

    accounts: list[Account] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)


class SavedFilter(BaseModel):
    """A named filter + search combination."""

    filters: FilterState = Field(default_factory=FilterState)
    search: SearchState = Field(default_factory=SearchState)


class SavedFilterConfig(BaseModel):
    saved: dict[str, SavedFilter] = Field(default_factory=dict)


def load_ledger_json(text: str) -> Ledger:
    """Parse a ledger snapshot.

    Accepts either {"accounts": [...], "transactions": [...]} or a bare list
    of transactions.

    Raises:
        pydantic.ValidationError: if any row is malformed
    """
    text = text.strip()
    if not text:
        return Ledger()
    if text.startswith("["):
        return Ledger.model_validate_json(f'{{"transactions": {text}}}')
    return Ledger.model_validate_json(text)


def dump_ledger_json(ledger: Ledger) -> str:
    # Computed fields such as has_attachments are written too and ignored on load
    return ledger.model_dump_json(indent=2)


def load_saved_filters(path: Path) -> SavedFilterConfig:
    """Load saved filters from YAML; an absent file yields an empty config."""
    if not path.exists():
        return SavedFilterConfig()
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return SavedFilterConfig.model_validate(data)


def save_saved_filters(path: Path, config: SavedFilterConfig) -> None:
    """Write saved filters to YAML, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    # mode="json" turns enums and frozensets into plain YAML-friendly values
    data = config.model_dump(mode="json")
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(
            data,
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )


__all__ = [
    "Ledger",
    "SavedFilter",
    "SavedFilterConfig",
    "dump_ledger_json",
    "load_ledger_json",
    "load_saved_filters",
    "save_saved_filters",
]
