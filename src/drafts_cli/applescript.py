"""AppleScript source builders for the Drafts scripting dictionary.

Every user-supplied string goes through :func:`escape` before it is placed
inside a string literal. Nothing in this module runs a script.
"""

from __future__ import annotations

from collections.abc import Iterable

from .models import Folder
from .records import TAG_SEPARATOR

DEFAULT_APP = "Drafts"

# Emitted into every read script so all paths classify folders the same way.
_CLASSIFY_FOLDER = """\
set folder_name to "inbox"
if isTrashed of d then
	set folder_name to "trash"
else if isArchived of d then
	set folder_name to "archive"
end if"""

_JOIN_TAGS = f"""\
set tag_str to ""
repeat with t in (tags of d)
	if tag_str is not "" then
		set tag_str to tag_str & "{TAG_SEPARATOR}"
	end if
	set tag_str to tag_str & t
end repeat"""

_RECORD_LINE = (
    "(id of d) & tab & (title of d) & tab & (content of d) & tab & folder_name"
    " & tab & (flagged of d) & tab & (isArchived of d) & tab & (isTrashed of d)"
    " & tab & tag_str & tab & ((createdAt of d) as string)"
    " & tab & ((modifiedAt of d) as string) & tab & (permalink of d)"
)


def escape(text: str) -> str:
    """Escape text for an AppleScript string literal (backslashes before quotes)."""
    return text.replace("\\", "\\\\").replace('"', '\\"')


def quote(text: str) -> str:
    return f'"{escape(text)}"'


def tags_literal(tags: Iterable[str]) -> str:
    """Render tags as an AppleScript list literal, keeping their order."""
    return "{" + ", ".join(quote(t) for t in tags) + "}"


def _tell(body: str, app: str) -> str:
    # body is not re-indented: string literals in it may span lines
    return f"tell application {quote(app)}\n{body}\nend tell"


def _bool(value: bool) -> str:
    return "true" if value else "false"


def _with_draft(uuid: str) -> str:
    return f"set d to draft id {quote(uuid)}"


def _indent(block: str) -> str:
    return "\n".join(f"\t{line}" for line in block.splitlines())


# ---- Writing ---------------------------------------------------------------


def create(
    content: str,
    *,
    tags: Iterable[str] = (),
    folder: Folder = Folder.INBOX,
    flagged: bool = False,
    app: str = DEFAULT_APP,
) -> str:
    if folder is Folder.TRASH:
        raise ValueError("New drafts can only be created in the inbox or the archive")
    body = (
        f"set d to make new draft with properties "
        f"{{content:{quote(content)}, flagged:{_bool(flagged)}, tags:{tags_literal(tags)}}}\n"
        f"set folder of d to {folder.value}\n"
        "return id of d"
    )
    return _tell(body, app)


def prepend(uuid: str, text: str, *, app: str = DEFAULT_APP) -> str:
    body = f"{_with_draft(uuid)}\nset content of d to {quote(text)} & linefeed & (content of d)"
    return _tell(body, app)


def append(uuid: str, text: str, *, app: str = DEFAULT_APP) -> str:
    body = f"{_with_draft(uuid)}\nset content of d to (content of d) & linefeed & {quote(text)}"
    return _tell(body, app)


def replace(uuid: str, text: str, *, app: str = DEFAULT_APP) -> str:
    body = f"{_with_draft(uuid)}\nset content of d to {quote(text)}"
    return _tell(body, app)


def trash(uuid: str, *, app: str = DEFAULT_APP) -> str:
    return _tell(f"{_with_draft(uuid)}\nset isTrashed of d to true", app)


def archive(uuid: str, *, app: str = DEFAULT_APP) -> str:
    return _tell(f"{_with_draft(uuid)}\nset isArchived of d to true", app)


def tag(uuid: str, tags: Iterable[str], *, app: str = DEFAULT_APP) -> str:
    """Add tags that are not already on the draft and return the resulting tag field."""
    body = (
        f"{_with_draft(uuid)}\n"
        "set existingTags to tags of d\n"
        f"set newTags to {tags_literal(tags)}\n"
        "repeat with t in newTags\n"
        "\tif (contents of t) is not in existingTags then\n"
        "\t\tset end of existingTags to (contents of t)\n"
        "\tend if\n"
        "end repeat\n"
        "set tags of d to existingTags\n"
        f"{_JOIN_TAGS}\n"
        "return tag_str"
    )
    return _tell(body, app)


# ---- Reading ---------------------------------------------------------------


def get(uuid: str, *, app: str = DEFAULT_APP) -> str:
    body = f"{_with_draft(uuid)}\n{_CLASSIFY_FOLDER}\n{_JOIN_TAGS}\nreturn {_RECORD_LINE}"
    return _tell(body, app)


def _query(selector: str, app: str) -> str:
    body = (
        'set output to ""\n'
        f"repeat with d in ({selector})\n"
        f"{_indent(_CLASSIFY_FOLDER)}\n"
        f"{_indent(_JOIN_TAGS)}\n"
        f"\tset line_out to {_RECORD_LINE}\n"
        '\tif output is "" then\n'
        "\t\tset output to line_out\n"
        "\telse\n"
        "\t\tset output to output & linefeed & line_out\n"
        "\tend if\n"
        "end repeat\n"
        "return output"
    )
    return _tell(body, app)


def query_folder(folder: Folder, *, app: str = DEFAULT_APP) -> str:
    """Select drafts whose archived/trashed flags match ``folder`` exactly."""
    archived = folder is Folder.ARCHIVE
    trashed = folder is Folder.TRASH
    selector = f"every draft whose isArchived is {_bool(archived)} and isTrashed is {_bool(trashed)}"
    return _query(selector, app)


def query_all(*, app: str = DEFAULT_APP) -> str:
    return _query("every draft", app)


# ---- App state -------------------------------------------------------------


def select(uuid: str, *, app: str = DEFAULT_APP) -> str:
    return _tell(f"{_with_draft(uuid)}\nopen d", app)


def active(*, app: str = DEFAULT_APP) -> str:
    body = (
        "set d to current draft\n"
        'if d is missing value then return ""\n'
        "return id of d"
    )
    return _tell(body, app)


# ---- Actions ---------------------------------------------------------------


def _find_action(action: str) -> str:
    return (
        "set actionToRun to missing value\n"
        "repeat with a in (every action)\n"
        f"\tif name of a is {quote(action)} then\n"
        "\t\tset actionToRun to a\n"
        "\t\texit repeat\n"
        "\tend if\n"
        "end repeat\n"
        "if actionToRun is missing value then\n"
        f'\terror "Action not found: " & {quote(action)}\n'
        "end if"
    )


def run_action(action: str, text: str, *, app: str = DEFAULT_APP) -> str:
    """Create a draft holding ``text``, run ``action`` on it and return its id."""
    body = (
        f"set d to make new draft with properties {{content:{quote(text)}}}\n"
        f"{_find_action(action)}\n"
        "perform action actionToRun on draft d\n"
        "return id of d"
    )
    return _tell(body, app)


def run_action_on_draft(action: str, uuid: str, *, app: str = DEFAULT_APP) -> str:
    body = (
        f"{_with_draft(uuid)}\n"
        f"{_find_action(action)}\n"
        "perform action actionToRun on draft d\n"
        "return id of d"
    )
    return _tell(body, app)
