from __future__ import annotations

from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.text import Text

from flowlens.model.transaction_io import Ledger, load_ledger_json

console = Console()


def read_ledger(path: Path) -> Ledger:
    if not path.exists():
        raise FileNotFoundError(f"Transaction snapshot not found: {path}")
    return load_ledger_json(path.read_text(encoding="utf-8"))


def fmt_amount(amt: float) -> Text:
    s = f"{amt:,.2f}"
    if amt < 0:
        return Text(s, style="bold red")
    elif amt > 0:
        return Text(s, style="bold green")
    return Text(s)


def fmt_moment(moment: datetime) -> str:
    if moment.time() == datetime.min.time():
        return moment.strftime("%Y-%m-%d")
    return moment.strftime("%Y-%m-%d %H:%M")


def parse_moment(value: str) -> datetime:
    """Parse YYYY-MM-DD or an ISO timestamp from the command line."""
    return datetime.fromisoformat(value.strip())
