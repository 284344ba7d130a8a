"""
Tests for the process execution layer, using the running interpreter as the child process.
"""

import logging
import subprocess
import sys

import pytest

from brewherd.core import system_utils
from brewherd.core.system_utils import CommandLine, run_command


def _python(code: str):
    return [sys.executable, "-c", code]


def test_run_command_captures_output():
    code, stdout, stderr = run_command(_python("import sys; print('hello'); print('oops', file=sys.stderr)"))

    assert code == 0
    assert stdout == "hello"
    assert stderr == "oops"


def test_run_command_reports_exit_code():
    code, _, _ = run_command(_python("import sys; sys.exit(3)"))

    assert code == 3


def test_run_command_missing_binary():
    code, stdout, stderr = run_command(["brewherd-no-such-binary-xyz"])

    assert code == -1
    assert stdout == ""
    assert "not found" in stderr


def test_run_as_user_prefixes_sudo(monkeypatch):
    seen = []

    def fake_run_command(command):
        seen.append(list(command))
        return 0, "out", ""

    monkeypatch.setattr(system_utils, "run_command", fake_run_command)

    assert CommandLine("taylor").run_as_user(["brew", "install", "php70"]) == "out"
    assert seen == [["sudo", "-u", "taylor", "brew", "install", "php70"]]


def test_run_as_user_calls_on_error_with_stderr(monkeypatch):
    monkeypatch.setattr(system_utils, "run_command", lambda command: (1, "", "Error: nope"))
    errors = []

    CommandLine("taylor").run_as_user(["brew", "install", "php70"], lambda code, err: errors.append((code, err)))

    assert errors == [(1, "Error: nope")]


def test_run_as_user_skips_on_error_after_success(monkeypatch):
    monkeypatch.setattr(system_utils, "run_command", lambda command: (0, "", "warning only"))
    errors = []

    CommandLine("taylor").run_as_user(["brew", "install", "php70"], lambda code, err: errors.append(code))

    assert errors == []


def test_quietly_discards_output_and_returns_code(capfd):
    code = CommandLine("taylor").quietly(_python("import sys; print('noise'); sys.exit(2)"))

    assert code == 2
    assert "noise" not in capfd.readouterr().out


def test_quietly_missing_binary():
    assert CommandLine("taylor").quietly(["brewherd-no-such-binary-xyz"]) == -1


def test_passthru_success():
    assert CommandLine("taylor").passthru(_python("pass")) == 0


def test_passthru_raises_on_failure():
    with pytest.raises(subprocess.CalledProcessError) as exc_info:
        CommandLine("taylor").passthru(_python("import sys; sys.exit(4)"))

    assert exc_info.value.returncode == 4


def test_passthru_missing_binary_is_logged_and_raised(caplog):
    with caplog.at_level(logging.DEBUG, logger="brewherd.core.system_utils"):
        with pytest.raises(FileNotFoundError):
            CommandLine("taylor").passthru(["brewherd-no-such-binary-xyz"])

    assert "Running command (passthru): brewherd-no-such-binary-xyz" in caplog.text
    assert "Command not found: brewherd-no-such-binary-xyz" in caplog.text


def test_passthru_failure_is_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="brewherd.core.system_utils"):
        with pytest.raises(subprocess.CalledProcessError):
            CommandLine("taylor").passthru(_python("import sys; sys.exit(4)"))

    assert "Command failed (Code: 4)" in caplog.text
