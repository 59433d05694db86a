"""
Unit tests for external command execution.

subprocess.run is mocked; nothing is actually executed.
"""

import logging
import subprocess

import pytest

from deployhook.services.commands import CommandFailure, CommandRunner


@pytest.fixture
def fake_run(monkeypatch):
    """Replace subprocess.run and record its calls"""
    calls = []
    result = {"value": subprocess.CompletedProcess(args=[], returncode=0, stdout="ok\n", stderr="")}

    def mock_run(args, **kwargs):
        calls.append((args, kwargs))
        value = result["value"]
        if isinstance(value, BaseException):
            raise value
        return value

    monkeypatch.setattr("deployhook.services.commands.subprocess.run", mock_run)
    return calls, result


class TestCommandRunner:
    """Test CommandRunner.run"""

    def test_success_returns_stdout(self, fake_run):
        calls, _ = fake_run

        output = CommandRunner(timeout=30).run(["git", "pull", "origin", "main"], cwd="/opt/Backend")

        assert output == "ok\n"
        args, kwargs = calls[0]
        assert args == ["git", "pull", "origin", "main"]
        assert kwargs["cwd"] == "/opt/Backend"
        assert kwargs["timeout"] == 30
        assert kwargs["capture_output"] is True

    def test_non_zero_exit_raises(self, fake_run):
        _, result = fake_run
        result["value"] = subprocess.CompletedProcess(
            args=[], returncode=128, stdout="", stderr="fatal: not a git repository\n"
        )

        with pytest.raises(CommandFailure) as exc_info:
            CommandRunner().run(["git", "pull", "origin", "main"])

        assert exc_info.value.returncode == 128
        assert "exited with status 128: fatal: not a git repository" in str(exc_info.value)

    def test_timeout_raises(self, fake_run):
        _, result = fake_run
        result["value"] = subprocess.TimeoutExpired(cmd=["docker"], timeout=5)

        with pytest.raises(CommandFailure, match="timed out after 5s"):
            CommandRunner(timeout=5).run(["docker", "compose", "up"])

    def test_missing_binary_raises(self, fake_run):
        _, result = fake_run
        result["value"] = FileNotFoundError(2, "No such file or directory", "/usr/bin/docker")

        with pytest.raises(CommandFailure, match="could not be started"):
            CommandRunner().run(["/usr/bin/docker", "compose", "up"])

    def test_quiet_suppresses_output(self, fake_run, caplog):
        caplog.set_level(logging.INFO, logger="deployhook.services.commands")

        CommandRunner().run(["docker", "compose", "up", "-d", "--no-deps", "api"], quiet=True)

        assert caplog.records == []

    def test_output_logged_when_not_quiet(self, fake_run, caplog):
        caplog.set_level(logging.INFO, logger="deployhook.services.commands")

        CommandRunner().run(["git", "pull", "origin", "main"])

        assert any("ok" == record.getMessage() for record in caplog.records)
