"""Run generated scripts and the fuzzy selector as external processes."""

from __future__ import annotations

import logging
import subprocess

from .errors import ExecutionError, SelectionCancelledError

logger = logging.getLogger(__name__)

# fzf: 1 = no match, 130 = interrupted with Esc / Ctrl-C
_SELECTOR_CANCEL_CODES = frozenset({1, 130})


class ScriptRunner:
    """Thin wrapper around ``osascript -e <script>``."""

    def __init__(self, *, interpreter: str = "osascript") -> None:
        self._interpreter = interpreter

    @property
    def interpreter(self) -> str:
        return self._interpreter

    def run(self, script: str) -> str:
        logger.debug("Running script with %s:\n%s", self._interpreter, script)
        try:
            proc = subprocess.run(
                [self._interpreter, "-e", script],
                capture_output=True,
                text=True,
                encoding="utf-8",
                check=False,
            )
        except OSError as exc:
            raise ExecutionError(
                command=self._interpreter,
                returncode=None,
                stderr=str(exc),
            ) from exc

        if proc.returncode != 0:
            stderr = (proc.stderr or "").strip()
            logger.debug("%s failed with %s: %s", self._interpreter, proc.returncode, stderr)
            raise ExecutionError(
                command=self._interpreter,
                returncode=proc.returncode,
                stderr=stderr,
            )
        return (proc.stdout or "").strip()


class FuzzySelector:
    """Pipe candidate lines to fzf and return the chosen line."""

    def __init__(self, *, command: str = "fzf") -> None:
        self._command = command

    def choose(self, candidates: str) -> str:
        try:
            # stderr stays attached to the terminal so fzf can draw its UI
            proc = subprocess.run(
                [self._command],
                input=candidates,
                stdout=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                check=False,
            )
        except OSError as exc:
            raise ExecutionError(command=self._command, returncode=None, stderr=str(exc)) from exc

        if proc.returncode in _SELECTOR_CANCEL_CODES:
            raise SelectionCancelledError()
        if proc.returncode != 0:
            raise ExecutionError(command=self._command, returncode=proc.returncode, stderr="")

        choice = (proc.stdout or "").strip()
        if not choice:
            raise SelectionCancelledError()
        return choice
