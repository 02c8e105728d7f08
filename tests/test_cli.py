"""
Tests for the command-line interface.
"""

import pytest
from click.testing import CliRunner

from remote_agent import __version__
from remote_agent.cli import main
from remote_agent.playback import replay as replay_module


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr(replay_module.time, "sleep", lambda seconds: None)


class TestCli:
    """Tests for the remote-agent command group."""

    def test_version(self, runner):
        """Test --version."""
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_exec_dry_run(self, runner):
        """Test executing commands without posting events."""
        result = runner.invoke(main, ["exec", "--dry-run", "shortcut:command+c", "click:1,2"])
        assert result.exit_code == 0
        assert "shortcut:command+c: ok" in result.output
        assert "6 input events" in result.output

    def test_exec_failure_exit_code(self, runner):
        """Test that a failed command sets the exit status."""
        result = runner.invoke(main, ["exec", "--dry-run", "press:a", "click:abc"])
        assert result.exit_code == 1
        assert "press:a: ok" in result.output

    def test_replay_dry_run(self, runner, tmp_path):
        """Test replaying a recorded log."""
        log = tmp_path / "session.csv"
        log.write_text(
            "Timestamp,Command\n"
            "t1,type:hi\n"
            "t2,bogus:1\n"
            "t3,END\n"
            "t4,press:a\n",
            encoding="utf-8",
        )
        result = runner.invoke(main, ["replay", "--log", str(log), "--dry-run"])
        assert result.exit_code == 0, result.output
        assert "Loaded 4 commands" in result.output
        assert "2 commands executed" in result.output
        assert "1 failed" in result.output
        assert "Ended by the server" in result.output
        assert "4 input events" in result.output

    def test_replay_with_config(self, runner, tmp_path):
        """Test that a configuration file is honoured."""
        config = tmp_path / "agent.yaml"
        config.write_text("replay:\n  end_sentinel: STOP\n")
        log = tmp_path / "session.txt"
        log.write_text("press:a\nSTOP\npress:b\n")
        result = runner.invoke(
            main, ["replay", "-l", str(log), "--dry-run", "-c", str(config), "-n", "0"]
        )
        assert result.exit_code == 0, result.output
        assert "1 commands executed" in result.output

    def test_replay_missing_log(self, runner, tmp_path):
        """Test that a missing log file is a usage error."""
        result = runner.invoke(main, ["replay", "--log", str(tmp_path / "nope.csv")])
        assert result.exit_code == 2
