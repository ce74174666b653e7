"""CLI command tests using Click CliRunner."""

import pytest
from click.testing import CliRunner

from cli.main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "goalctl.yaml"
    path.write_text("logging:\n  level: warning\n")
    return path


def _invoke(runner, config_file, *args):
    return runner.invoke(cli, ["--config", str(config_file), *args])


class TestTransitions:
    def test_canonical_status(self, runner, config_file):
        result = _invoke(runner, config_file, "transitions", "in-progress")
        assert result.exit_code == 0
        assert "blocked, pending-review, achieved, cancelled" in result.output

    def test_legacy_status_read_as_canonical(self, runner, config_file):
        result = _invoke(runner, config_file, "transitions", "completed")
        assert result.exit_code == 0
        assert "read as" in result.output
        assert "achieved -> in-progress" in result.output


class TestInspect:
    def test_progress_breakdown(self, runner, config_file, goal_file):
        result = _invoke(runner, config_file, "inspect", str(goal_file))
        assert result.exit_code == 0
        assert "Ship onboarding revamp" in result.output
        assert "stored as 'completed'" in result.output
        assert "58%" in result.output
        assert "stale" in result.output
        assert "Milestones: 2 completed, 1 partial, 1 incomplete" in result.output
        assert "Ready for completion" not in result.output

    def test_configured_cap(self, runner, tmp_path, goal_file):
        config = tmp_path / "custom.yaml"
        config.write_text("progress:\n  milestone_cap: 50\n")
        result = runner.invoke(cli, ["--config", str(config), "inspect", str(goal_file)])
        assert result.exit_code == 0
        assert "71%" in result.output

    def test_auto_advance_hint(self, runner, config_file, tmp_path):
        path = tmp_path / "goal.yaml"
        path.write_text(
            "id: g9\ntitle: Write docs\nstatus: not-started\n"
            "linkedJournalEntries:\n  - journalEntryId: j1\n    progressContribution: 20\n"
        )
        result = _invoke(runner, config_file, "inspect", str(path))
        assert result.exit_code == 0
        assert "Would auto-advance to" in result.output

    def test_completion_hint(self, runner, config_file, tmp_path):
        path = tmp_path / "goal.yaml"
        path.write_text(
            "id: g9\ntitle: Write docs\nstatus: in-progress\nprogressPercentage: 100\n"
            "linkedJournalEntries:\n  - journalEntryId: j1\n    progressContribution: 100\n"
        )
        result = _invoke(runner, config_file, "inspect", str(path))
        assert "Ready for completion" in result.output

    def test_missing_file(self, runner, config_file, tmp_path):
        result = _invoke(runner, config_file, "inspect", str(tmp_path / "nope.yaml"))
        assert result.exit_code != 0

    def test_invalid_file(self, runner, config_file, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("42\n")
        result = _invoke(runner, config_file, "inspect", str(path))
        assert result.exit_code == 1
        assert "Error" in result.output


class TestHistory:
    def test_newest_first(self, runner, config_file, goal_file):
        result = _invoke(runner, config_file, "history", str(goal_file))
        assert result.exit_code == 0
        assert result.output.index("2024-03-05T09:30") < result.output.index("2024-03-01T10:00")
        assert "No edit history for Learn Rust" in result.output

    def test_limit(self, runner, config_file, goal_file):
        result = _invoke(runner, config_file, "history", str(goal_file), "-n", "1")
        assert "2024-03-05T09:30" in result.output
        assert "2024-03-01T10:00" not in result.output

    def test_mixed_offset_timestamps(self, runner, config_file, tmp_path):
        path = tmp_path / "goal.yaml"
        path.write_text(
            "id: g1\ntitle: Write docs\neditHistory:\n"
            "  - {id: r1, editedBy: u1, editedAt: '2024-03-01T10:00:00Z', field: title}\n"
            "  - {id: r2, editedBy: u1, editedAt: '2024-03-02T10:00:00', field: status}\n"
        )
        result = _invoke(runner, config_file, "history", str(path))
        assert result.exit_code == 0
        assert result.output.index("2024-03-02T10:00") < result.output.index("2024-03-01T10:00")


class TestLegacy:
    def test_lists_old_vocabulary(self, runner, config_file, goal_file):
        result = _invoke(runner, config_file, "legacy", str(goal_file))
        assert result.exit_code == 0
        assert "g1: 'completed' -> achieved" in result.output
        assert "g2: 'not-started' -> yet-to-start" in result.output

    def test_all_current(self, runner, config_file, tmp_path):
        path = tmp_path / "goal.yaml"
        path.write_text("id: g1\nstatus: blocked\n")
        result = _invoke(runner, config_file, "legacy", str(path))
        assert "All statuses are current" in result.output


def test_config_error_exits(runner, tmp_path):
    config = tmp_path / "goalctl.yaml"
    config.write_text("progress:\n  milestone_cap: 500\n")
    result = runner.invoke(cli, ["--config", str(config), "transitions", "blocked"])
    assert result.exit_code == 1
    assert "Config error" in result.output


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output
