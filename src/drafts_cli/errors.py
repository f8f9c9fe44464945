"""Domain errors."""

from __future__ import annotations

from dataclasses import dataclass


class DraftsError(RuntimeError):
    """Base class for every failure the command layer reports to the user."""


@dataclass(frozen=True, slots=True)
class ExecutionError(DraftsError):
    """Raised when an external process (osascript, fzf) fails to run or exits non-zero."""

    command: str
    returncode: int | None
    stderr: str

    def __str__(self) -> str:
        if self.returncode is None:
            return f"{self.command} could not be run: {self.stderr}"
        detail = self.stderr or "no error output"
        return f"{self.command} exited with status {self.returncode}: {detail}"


@dataclass(frozen=True, slots=True)
class DraftNotFoundError(DraftsError):
    """Raised when Drafts returned nothing that parses into a draft record."""

    uuid: str
    output: str = ""

    def __str__(self) -> str:
        return f"Draft not found: {self.uuid}"


@dataclass(frozen=True, slots=True)
class NoActiveDraftError(DraftsError):
    """Raised when no UUID was given and Drafts has no current draft."""

    def __str__(self) -> str:
        return "No UUID given and no active draft in Drafts"


@dataclass(frozen=True, slots=True)
class SelectionCancelledError(DraftsError):
    """Raised when the fuzzy selector exits without a choice."""

    def __str__(self) -> str:
        return "No draft selected"


@dataclass(frozen=True, slots=True)
class ReleaseCheckError(DraftsError):
    """Raised when the release host returns a non-success response."""

    status_code: int
    url: str
    response_text: str

    def __str__(self) -> str:
        return f"Release check failed with {self.status_code} for {self.url}: {self.response_text}"
