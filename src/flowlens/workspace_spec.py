from __future__ import annotations

from pathlib import Path

from flowlens.workspace import Workspace


class DescribeWorkspace:
    class DescribeResolve:
        def it_should_use_explicit_path_when_provided(self):
            ws = Workspace.resolve(explicit=Path("/tmp/my-finances"))
            assert ws.root == Path("/tmp/my-finances")

        def it_should_use_flowlens_data_env_var_when_set(self, monkeypatch):
            monkeypatch.setenv("FLOWLENS_DATA", "/tmp/env-finances")
            ws = Workspace.resolve()
            assert ws.root == Path("/tmp/env-finances")

        def it_should_prefer_explicit_over_env_var(self, monkeypatch):
            monkeypatch.setenv("FLOWLENS_DATA", "/tmp/env-finances")
            ws = Workspace.resolve(explicit=Path("/tmp/explicit"))
            assert ws.root == Path("/tmp/explicit")

        def it_should_fall_back_to_cwd_when_no_env_var(self, monkeypatch):
            monkeypatch.delenv("FLOWLENS_DATA", raising=False)
            ws = Workspace.resolve()
            assert ws.root == Path.cwd()

    class DescribePaths:
        def it_should_compute_transactions_path(self):
            ws = Workspace(root=Path("/data"))
            assert ws.transactions_path == Path("/data/data/transactions.json")

        def it_should_compute_filters_config(self):
            ws = Workspace(root=Path("/data"))
            assert ws.filters_config == Path("/data/config/filters.yml")
