"""Record operations against the Drafts app, built on the script builders."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

from . import applescript
from .errors import DraftNotFoundError, NoActiveDraftError
from .models import CreateOptions, Draft, Filter, Folder, ModifyOptions, QueryOptions
from .records import parse_draft, parse_drafts, split_tags

logger = logging.getLogger(__name__)

_FILTER_FOLDERS = {
    Filter.INBOX: Folder.INBOX,
    Filter.ARCHIVE: Folder.ARCHIVE,
    Filter.TRASH: Folder.TRASH,
    # No flagged query script exists yet; see matching warning in DraftsClient.query.
    Filter.FLAGGED: Folder.INBOX,
}


class Runner(Protocol):
    def run(self, script: str) -> str: ...


def matches_tags(
    draft_tags: Iterable[str],
    *,
    required: Iterable[str] = (),
    excluded: Iterable[str] = (),
) -> bool:
    """True when every required tag is present and no excluded tag is."""
    present = set(draft_tags)
    if not present.issuperset(required):
        return False
    return present.isdisjoint(excluded)


class DraftsClient:
    """Create, read, modify and query drafts through a script runner."""

    def __init__(self, runner: Runner, *, app_name: str = applescript.DEFAULT_APP) -> None:
        self._runner = runner
        self._app = app_name

    # ---- Writing -----------------------------------------------------------

    def create(self, text: str, options: CreateOptions | None = None) -> str:
        """Create a new draft and return its UUID."""
        opt = options or CreateOptions()
        uuid = self._runner.run(
            applescript.create(
                text,
                tags=opt.tags,
                folder=opt.folder,
                flagged=opt.flagged,
                app=self._app,
            )
        )
        if opt.action:
            self.run_action_on_draft(opt.action, uuid)
        return uuid

    def prepend(self, uuid: str, text: str, options: ModifyOptions | None = None) -> None:
        self._runner.run(applescript.prepend(uuid, text, app=self._app))
        self._after_modify(uuid, options)

    def append(self, uuid: str, text: str, options: ModifyOptions | None = None) -> None:
        self._runner.run(applescript.append(uuid, text, app=self._app))
        self._after_modify(uuid, options)

    def _after_modify(self, uuid: str, options: ModifyOptions | None) -> None:
        if options is None:
            return
        if options.tags:
            self.tag(uuid, options.tags)
        if options.action:
            self.run_action_on_draft(options.action, uuid)

    def replace(self, uuid: str, text: str) -> None:
        self._runner.run(applescript.replace(uuid, text, app=self._app))

    def trash(self, uuid: str) -> None:
        self._runner.run(applescript.trash(uuid, app=self._app))

    def archive(self, uuid: str) -> None:
        self._runner.run(applescript.archive(uuid, app=self._app))

    def tag(self, uuid: str, tags: Iterable[str]) -> list[str]:
        """Add tags to a draft and return the draft's tags afterwards."""
        tags = list(tags)
        if not tags:
            return self.get(uuid).tags
        return split_tags(self._runner.run(applescript.tag(uuid, tags, app=self._app)))

    # ---- Reading -----------------------------------------------------------

    def get(self, uuid: str) -> Draft:
        output = self._runner.run(applescript.get(uuid, app=self._app))
        draft = parse_draft(output)
        if draft is None or not draft.uuid:
            raise DraftNotFoundError(uuid=uuid, output=output)
        return draft

    def query(self, filter: Filter = Filter.INBOX, options: QueryOptions | None = None) -> list[Draft]:
        """Fetch drafts visible under ``filter``, then apply the tag predicate."""
        opt = options or QueryOptions()

        if filter is Filter.ALL:
            script = applescript.query_all(app=self._app)
        else:
            if filter is Filter.FLAGGED:
                logger.warning("The 'flagged' filter is not implemented yet; listing the inbox")
            script = applescript.query_folder(_FILTER_FOLDERS[filter], app=self._app)

        drafts = parse_drafts(self._runner.run(script))
        return [
            d
            for d in drafts
            if matches_tags(d.tags, required=opt.tags, excluded=opt.omit_tags)
        ]

    # ---- App state ---------------------------------------------------------

    def select(self, uuid: str) -> None:
        """Open the draft in Drafts, making it the active draft."""
        self._runner.run(applescript.select(uuid, app=self._app))

    def active(self) -> str:
        uuid = self._runner.run(applescript.active(app=self._app))
        if not uuid or uuid == "missing value":
            raise NoActiveDraftError()
        return uuid

    # ---- Actions -----------------------------------------------------------

    def run_action(self, action: str, text: str) -> str:
        """Run ``action`` on a new draft holding ``text``; return that draft's UUID."""
        return self._runner.run(applescript.run_action(action, text, app=self._app))

    def run_action_on_draft(self, action: str, uuid: str) -> None:
        self._runner.run(applescript.run_action_on_draft(action, uuid, app=self._app))
