from __future__ import annotations

# Command implementations for the flowlens CLI.
# Each command module exposes a `run(...)` function that performs the action
# and prints to the console. Typer wrappers in flowlens.cli.app delegate here.

__all__ = [
    "date_range",
    "occurrences",
    "query",
]
