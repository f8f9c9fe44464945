"""Shared fixtures: an in-memory Drafts app that understands the generated scripts."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

import pytest

from drafts_cli.drafts_client import DraftsClient
from drafts_cli.errors import ExecutionError

_STRING = r'"((?:[^"\\]|\\.)*)"'
_DRAFT_ID = re.compile(r"set d to draft id " + _STRING)
_CREATE = re.compile(
    r"make new draft with properties \{content:"
    + _STRING
    + r", flagged:(true|false), tags:\{(.*?)\}\}\nset folder of d to (inbox|archive)",
    re.DOTALL,
)
_CREATE_PLAIN = re.compile(r"make new draft with properties \{content:" + _STRING + r"\}", re.DOTALL)
_ACTION_NAME = re.compile(r"if name of a is " + _STRING)
_PREPEND = re.compile(r"set content of d to " + _STRING + r" & linefeed & \(content of d\)", re.DOTALL)
_APPEND = re.compile(r"set content of d to \(content of d\) & linefeed & " + _STRING, re.DOTALL)
_REPLACE = re.compile(r"set content of d to " + _STRING + r"\nend tell$", re.DOTALL)
_NEW_TAGS = re.compile(r"set newTags to \{(.*?)\}\n", re.DOTALL)
_FOLDER_QUERY = re.compile(r"every draft whose isArchived is (true|false) and isTrashed is (true|false)")


def unescape(text: str) -> str:
    return re.sub(r"\\(.)", r"\1", text, flags=re.DOTALL)


def parse_tag_list(body: str) -> list[str]:
    return [unescape(m) for m in re.findall(_STRING, body)]


@dataclass
class FakeDraft:
    uuid: str
    content: str
    tags: list[str] = field(default_factory=list)
    flagged: bool = False
    archived: bool = False
    trashed: bool = False

    @property
    def folder(self) -> str:
        if self.trashed:
            return "trash"
        if self.archived:
            return "archive"
        return "inbox"

    def record(self) -> str:
        title = self.content.split("\n", 1)[0]
        return "\t".join(
            [
                self.uuid,
                title,
                self.content,
                self.folder,
                str(self.flagged).lower(),
                str(self.archived).lower(),
                str(self.trashed).lower(),
                "|||".join(self.tags),
                "Monday, 19 October 2026 at 10:00:00",
                "Monday, 19 October 2026 at 10:05:00",
                f"drafts://open?uuid={self.uuid}",
            ]
        )


class FakeDrafts:
    """Runner double that applies generated AppleScript to an in-memory store."""

    def __init__(self) -> None:
        self.drafts: dict[str, FakeDraft] = {}
        self.scripts: list[str] = []
        self.performed: list[tuple[str, str]] = []
        self.active: str | None = None
        self._counter = 0

    def add(self, content: str, **kwargs) -> FakeDraft:
        self._counter += 1
        draft = FakeDraft(uuid=f"UUID-{self._counter:04d}", content=content, **kwargs)
        self.drafts[draft.uuid] = draft
        return draft

    def _draft(self, script: str) -> FakeDraft:
        m = _DRAFT_ID.search(script)
        uuid = unescape(m.group(1)) if m else ""
        if uuid not in self.drafts:
            raise ExecutionError(
                command="osascript",
                returncode=1,
                stderr=f"Drafts got an error: Can't get draft id \"{uuid}\". (-1728)",
            )
        return self.drafts[uuid]

    def run(self, script: str) -> str:
        self.scripts.append(script)
        return self._run(script).strip()

    def _run(self, script: str) -> str:
        if "perform action" in script:
            action = unescape(_ACTION_NAME.search(script).group(1))
            if "make new draft" in script:
                draft = self.add(unescape(_CREATE_PLAIN.search(script).group(1)))
            else:
                draft = self._draft(script)
            self.performed.append((action, draft.uuid))
            return draft.uuid

        if "make new draft" in script:
            m = _CREATE.search(script)
            draft = self.add(
                unescape(m.group(1)),
                flagged=m.group(2) == "true",
                tags=parse_tag_list(m.group(3)),
                archived=m.group(4) == "archive",
            )
            return draft.uuid

        if "current draft" in script:
            return self.active or ""

        if "repeat with d in (every draft" in script:
            m = _FOLDER_QUERY.search(script)
            drafts = list(self.drafts.values())
            if m:
                archived, trashed = m.group(1) == "true", m.group(2) == "true"
                drafts = [d for d in drafts if d.archived == archived and d.trashed == trashed]
            return "\n".join(d.record() for d in drafts)

        draft = self._draft(script)
        if "& tab &" in script and "return (id of d)" in script:
            return draft.record()
        if "set newTags to" in script:
            for t in parse_tag_list(_NEW_TAGS.search(script).group(1)):
                if t not in draft.tags:
                    draft.tags.append(t)
            return "|||".join(draft.tags)
        if "set isTrashed of d to true" in script:
            draft.trashed = True
            return ""
        if "set isArchived of d to true" in script:
            draft.archived = True
            return ""
        if "open d" in script:
            self.active = draft.uuid
            return ""
        if m := _PREPEND.search(script):
            draft.content = unescape(m.group(1)) + "\n" + draft.content
            return ""
        if m := _APPEND.search(script):
            draft.content = draft.content + "\n" + unescape(m.group(1))
            return ""
        if m := _REPLACE.search(script):
            draft.content = unescape(m.group(1))
            return ""
        raise AssertionError(f"Unrecognised script:\n{script}")


@pytest.fixture
def fake_drafts() -> FakeDrafts:
    return FakeDrafts()


@pytest.fixture
def client(fake_drafts: FakeDrafts) -> DraftsClient:
    return DraftsClient(fake_drafts)
