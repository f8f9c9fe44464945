"""Parse the tab-delimited draft records emitted by the read scripts.

One record is eleven fields joined by TAB, in this order::

    id, title, content, folder, flagged, archived, trashed, tags, created, modified, permalink

Records are joined by LF and the tag field joins tags with ``|||``. Content
may itself contain line feeds, so a record can span several physical lines.
"""

from __future__ import annotations

import logging

from .models import Draft, classify_folder

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "\t"
RECORD_SEPARATOR = "\n"
TAG_SEPARATOR = "|||"
FIELD_COUNT = 11


def split_tags(raw: str) -> list[str]:
    if not raw:
        return []
    return raw.split(TAG_SEPARATOR)


def _parse_bool(raw: str) -> bool:
    return raw == "true"


def parse_draft(line: str) -> Draft | None:
    """Parse one record, or return None when it has fewer than eleven fields."""
    parts = line.split(FIELD_SEPARATOR)
    if len(parts) < FIELD_COUNT:
        return None

    is_archived = _parse_bool(parts[5])
    is_trashed = _parse_bool(parts[6])
    # parts[3] carries the script-side folder name; recompute it from the flags
    return Draft(
        uuid=parts[0],
        title=parts[1],
        content=parts[2],
        folder=classify_folder(is_trashed=is_trashed, is_archived=is_archived),
        is_flagged=_parse_bool(parts[4]),
        is_archived=is_archived,
        is_trashed=is_trashed,
        tags=split_tags(parts[7]),
        created_at=parts[8],
        modified_at=parts[9],
        permalink=parts[10],
    )


def _logical_records(output: str) -> list[str]:
    records: list[str] = []
    pending: str | None = None
    for line in output.split(RECORD_SEPARATOR):
        if pending is not None:
            joined = pending + RECORD_SEPARATOR + line
            if joined.count(FIELD_SEPARATOR) > FIELD_COUNT - 1:
                # the leftover can't belong to this line's record; start over here
                logger.debug("Dropping incomplete draft record: %r", pending[:120])
                pending = None
            else:
                pending = joined
        if pending is None:
            pending = line
        if pending.count(FIELD_SEPARATOR) >= FIELD_COUNT - 1:
            records.append(pending)
            pending = None
    if pending is not None and pending.strip():
        records.append(pending)
    return records


def parse_drafts(output: str) -> list[Draft]:
    """Parse a multi-record script result, preserving the order Drafts returned."""
    if not output.strip():
        return []

    drafts: list[Draft] = []
    for record in _logical_records(output):
        draft = parse_draft(record)
        if draft is None or not draft.uuid:
            logger.debug("Skipping malformed draft record: %r", record[:120])
            continue
        drafts.append(draft)
    return drafts
