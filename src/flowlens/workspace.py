"""
Workspace - data path resolution for the flowlens CLI.

A Workspace is the root directory holding the transaction snapshot and
saved filter configuration. The engine itself never touches these paths.

Resolution priority:
1. Explicit path (--data-dir CLI option)
2. FLOWLENS_DATA environment variable
3. Current working directory
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_VAR = "FLOWLENS_DATA"


@dataclass
class Workspace:
    """Root directory for all flowlens data paths."""

    root: Path

    @classmethod
    def resolve(cls, explicit: Path | None = None) -> Workspace:
        """Resolve workspace root from explicit path, env var, or CWD.

        Args:
            explicit: Explicitly provided path (highest priority)

        Returns:
            Workspace with resolved root
        """
        if explicit is not None:
            return cls(root=explicit)
        env = os.environ.get(ENV_VAR)
        if env:
            return cls(root=Path(env))
        return cls(root=Path.cwd())

    @property
    def transactions_path(self) -> Path:
        return self.root / "data" / "transactions.json"

    @property
    def filters_config(self) -> Path:
        return self.root / "config" / "filters.yml"


__all__ = ["Workspace"]
