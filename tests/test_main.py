"""Tests for main module."""

import logging
import sys
from unittest.mock import MagicMock

import pytest

from smart_search import main as main_module
from smart_search.config import Config
from smart_search.main import create_server


def test_create_server(tmp_path, analyzer, caplog):
    """Test create_server initializes all components."""
    vault = tmp_path / "vault"
    vault.mkdir()
    (vault / "Budget Report.md").write_text("# Budget\n\nQuarterly finances.\n")
    (vault / "Notes").mkdir()
    (vault / "Notes" / "Meeting.md").write_text("We discussed the budget.\n")

    config = Config(vault_root=vault)

    with caplog.at_level(logging.INFO):
        mcp, service = create_server(config, analyzer=analyzer)

    assert mcp is not None
    assert mcp.name == "smart-search"
    assert len(service.index) == 2

    log_messages = [record.message for record in caplog.records]
    assert any("Performing initial index" in msg for msg in log_messages)
    assert any("Initial index complete: 2 documents indexed" in msg for msg in log_messages)
    assert any("Registering tools" in msg for msg in log_messages)
    assert any("Server configured successfully" in msg for msg in log_messages)


def test_create_server_reports_failed_documents(tmp_path, failing_analyzer, caplog):
    """Test documents that fail to index are reported, not fatal."""
    vault = tmp_path / "vault"
    vault.mkdir()
    (vault / "Good.md").write_text("fine\n")
    (vault / "Bad.md").write_text("EXPLODE\n")

    with caplog.at_level(logging.INFO):
        _, service = create_server(Config(vault_root=vault), analyzer=failing_analyzer)

    assert service.index.paths() == ["Good.md"]
    assert "1 documents could not be indexed" in caplog.text


def test_create_server_empty_vault(tmp_path, analyzer):
    """Test a missing vault directory yields an empty index."""
    _, service = create_server(Config(vault_root=tmp_path / "missing"), analyzer=analyzer)
    assert len(service.index) == 0


class TestMain:
    """Tests for the main() entry point."""

    @pytest.fixture
    def server(self, monkeypatch):
        mcp = MagicMock()
        service = MagicMock()
        monkeypatch.setattr(main_module, "create_server", lambda config: (mcp, service))
        return mcp

    def test_invalid_config_exits(self, monkeypatch):
        """Test invalid configuration exits with status 2."""
        monkeypatch.setattr(sys, "argv", ["smart-search"])
        monkeypatch.setenv("SMART_SEARCH_PORT", "not_a_number")

        with pytest.raises(SystemExit) as exc_info:
            main_module.main()

        assert exc_info.value.code == 2

    def test_runs_sse_server_without_sync(self, server, tmp_path, monkeypatch):
        """Test --no-sync skips the sync manager."""
        sync_manager = MagicMock()
        monkeypatch.setattr(main_module, "SyncManager", sync_manager)
        monkeypatch.setattr(sys, "argv", ["smart-search", "--no-sync"])
        monkeypatch.setenv("SMART_SEARCH_VAULT", str(tmp_path))
        monkeypatch.setenv("SMART_SEARCH_PORT", "9123")

        main_module.main()

        server.run.assert_called_once_with(transport="sse", host="0.0.0.0", port=9123)
        sync_manager.assert_not_called()

    def test_starts_and_stops_sync_manager(self, server, tmp_path, monkeypatch):
        """Test the sync manager runs alongside the server."""
        sync_manager = MagicMock()
        monkeypatch.setattr(main_module, "SyncManager", sync_manager)
        monkeypatch.setattr(sys, "argv", ["smart-search"])
        monkeypatch.setenv("SMART_SEARCH_VAULT", str(tmp_path))
        monkeypatch.setenv("SMART_SEARCH_SYNC_INTERVAL", "15")

        main_module.main()

        sync_manager.assert_called_once()
        assert sync_manager.call_args.args[1] == 15
        sync_manager.return_value.start.assert_called_once()
        sync_manager.return_value.stop.assert_called_once()

    def test_server_error_exits(self, server, tmp_path, monkeypatch):
        """Test an unexpected server error exits with status 1."""
        server.run.side_effect = RuntimeError("boom")
        monkeypatch.setattr(sys, "argv", ["smart-search", "--no-sync"])
        monkeypatch.setenv("SMART_SEARCH_VAULT", str(tmp_path))

        with pytest.raises(SystemExit) as exc_info:
            main_module.main()

        assert exc_info.value.code == 1
