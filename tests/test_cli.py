"""Tests for the click CLI: project creation, backup and usage reporting."""

import json

import pytest
from click.testing import CliRunner
from unittest.mock import AsyncMock, MagicMock, patch


@pytest.fixture
def runner(tmp_path, monkeypatch):
    """CliRunner working inside tmp_path so ./data lands there."""
    monkeypatch.chdir(tmp_path)
    with patch("cli.main._init_logging"):
        yield CliRunner()


def _invoke(runner, *args):
    from cli.main import cli
    return runner.invoke(cli, list(args), catch_exceptions=False)


def _project_id(runner) -> str:
    result = _invoke(runner, "new", "Olive Oil", "--author", "Ada Rossi")
    assert result.exit_code == 0
    from config.settings import Settings
    from models.database import SqliteSnapshotStore
    settings = Settings()
    adapter = SqliteSnapshotStore(settings.snapshot_db_path)
    archive = json.loads(adapter.get(f"{settings.archive_key_prefix}-guest"))
    return archive[0]["id"]


class TestProjectCommands:
    def test_new_and_list(self, runner):
        _project_id(runner)
        result = _invoke(runner, "list")
        assert result.exit_code == 0
        assert "Olive Oil" in result.output

    def test_unknown_project(self, runner):
        result = _invoke(runner, "show", "-p", "id_missing")
        assert result.exit_code == 1


class TestBackupCommand:
    def test_backup_copies_database(self, runner, tmp_path):
        project_id = _project_id(runner)
        target = tmp_path / "backups" / "copy.db"

        result = _invoke(runner, "backup", str(target))

        assert result.exit_code == 0
        assert target.exists()
        from models.database import SqliteSnapshotStore
        copy = SqliteSnapshotStore(target)
        assert project_id in copy.get("bookforge-projects-archive-guest")


class TestUsageReporting:
    def _provider(self):
        provider = MagicMock()
        provider.generate_once = AsyncMock(
            return_value='[{"topic": "Air fryer", "reason": "Everywhere", "trendScore": 92}]'
        )
        provider.get_usage_summary.return_value = {"total_calls": 1}
        return provider

    def test_verbose_prints_call_count(self, runner):
        with patch("cli.main._provider", return_value=self._provider()):
            result = _invoke(runner, "--verbose", "trends", "last quarter")
        assert result.exit_code == 0
        assert "Air fryer" in result.output
        assert "Provider calls: 1" in result.output

    def test_quiet_by_default(self, runner):
        with patch("cli.main._provider", return_value=self._provider()):
            result = _invoke(runner, "trends")
        assert result.exit_code == 0
        assert "Provider calls" not in result.output
