"""Structured models for drafts and the options passed to Drafts operations."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Folder(str, Enum):
    INBOX = "inbox"
    ARCHIVE = "archive"
    TRASH = "trash"


class Filter(str, Enum):
    INBOX = "inbox"
    FLAGGED = "flagged"
    ARCHIVE = "archive"
    TRASH = "trash"
    ALL = "all"


def classify_folder(*, is_trashed: bool, is_archived: bool) -> Folder:
    """Trash wins over archive; a draft with neither flag lives in the inbox."""
    if is_trashed:
        return Folder.TRASH
    if is_archived:
        return Folder.ARCHIVE
    return Folder.INBOX


class Draft(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    uuid: str
    title: str = ""
    content: str = ""
    folder: Folder = Folder.INBOX
    is_flagged: bool = False
    is_archived: bool = False
    is_trashed: bool = False
    tags: list[str] = Field(default_factory=list)
    created_at: str = ""
    modified_at: str = ""
    permalink: str = ""


class CreateOptions(BaseModel):
    tags: list[str] = Field(default_factory=list)
    folder: Folder = Folder.INBOX
    flagged: bool = False
    action: str | None = None


class ModifyOptions(BaseModel):
    tags: list[str] = Field(default_factory=list)
    action: str | None = None


class QueryOptions(BaseModel):
    tags: list[str] = Field(default_factory=list)
    omit_tags: list[str] = Field(default_factory=list)


class ReleaseInfo(BaseModel):
    current_version: str
    latest_version: str | None = None
    url: str | None = None
    update_available: bool = False
