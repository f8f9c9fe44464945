from __future__ import annotations

import subprocess

import pytest

from drafts_cli import runner as runner_module
from drafts_cli.errors import ExecutionError, SelectionCancelledError
from drafts_cli.runner import FuzzySelector, ScriptRunner


def test_run_passes_script_and_trims_output(monkeypatch) -> None:
    calls = []

    def fake_run(args, **kwargs):
        calls.append((args, kwargs))
        return subprocess.CompletedProcess(args, 0, stdout="  UUID-1\n", stderr="")

    monkeypatch.setattr(runner_module.subprocess, "run", fake_run)

    out = ScriptRunner(interpreter="/usr/bin/osascript").run('tell application "Drafts"\nend tell')

    assert out == "UUID-1"
    args, kwargs = calls[0]
    assert args == ["/usr/bin/osascript", "-e", 'tell application "Drafts"\nend tell']
    assert kwargs["capture_output"] is True
    assert kwargs["encoding"] == "utf-8"


def test_run_nonzero_exit_raises(monkeypatch) -> None:
    def fake_run(args, **kwargs):
        return subprocess.CompletedProcess(args, 1, stdout="", stderr="execution error: boom (-2700)\n")

    monkeypatch.setattr(runner_module.subprocess, "run", fake_run)

    with pytest.raises(ExecutionError) as exc_info:
        ScriptRunner().run("x")
    err = exc_info.value
    assert err.returncode == 1
    assert err.stderr == "execution error: boom (-2700)"
    assert "osascript exited with status 1" in str(err)


def test_run_missing_interpreter_raises() -> None:
    with pytest.raises(ExecutionError) as exc_info:
        ScriptRunner(interpreter="definitely-not-an-osascript-binary").run("x")
    assert exc_info.value.returncode is None
    assert "could not be run" in str(exc_info.value)


def test_selector_returns_choice(monkeypatch) -> None:
    seen = {}

    def fake_run(args, **kwargs):
        seen["input"] = kwargs["input"]
        return subprocess.CompletedProcess(args, 0, stdout="U2 | second\n")

    monkeypatch.setattr(runner_module.subprocess, "run", fake_run)

    assert FuzzySelector().choose("U1 | first\nU2 | second\n") == "U2 | second"
    assert seen["input"] == "U1 | first\nU2 | second\n"


@pytest.mark.parametrize("code", [1, 130])
def test_selector_cancel(monkeypatch, code: int) -> None:
    monkeypatch.setattr(
        runner_module.subprocess,
        "run",
        lambda args, **kwargs: subprocess.CompletedProcess(args, code, stdout=""),
    )
    with pytest.raises(SelectionCancelledError):
        FuzzySelector().choose("U1 | first\n")


def test_selector_failure(monkeypatch) -> None:
    monkeypatch.setattr(
        runner_module.subprocess,
        "run",
        lambda args, **kwargs: subprocess.CompletedProcess(args, 2, stdout=""),
    )
    with pytest.raises(ExecutionError):
        FuzzySelector(command="fzf").choose("U1 | first\n")
