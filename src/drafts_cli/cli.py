"""Command-line interface for Drafts using Typer and Rich."""

import asyncio
import functools
import logging
import platform
import re
from dataclasses import dataclass
from importlib.metadata import PackageNotFoundError, version as package_version
from typing import Callable, List, Optional

import click
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from .drafts_client import DraftsClient
from .errors import DraftsError
from .models import CreateOptions, Filter, Folder, ModifyOptions, QueryOptions
from .release import ReleaseChecker
from .runner import FuzzySelector, ScriptRunner
from .settings import Settings

PACKAGE_NAME = "drafts-cli"

# Shown between UUID and content in the selector; the chosen UUID is read back up to it.
SELECT_SEPARATOR = "|"
LINEBREAK_MARKER = " ¶ "
LIST_WIDTH = 80

_LINEBREAKS = re.compile(r"\n+")

app = typer.Typer(
    name="drafts",
    help="Drafts CLI - create, read and query drafts in the Drafts app",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


@dataclass(slots=True)
class AppContext:
    settings: Settings
    drafts: DraftsClient
    selector: FuzzySelector


def build_context(settings: Settings) -> AppContext:
    runner = ScriptRunner(interpreter=settings.osascript_path)
    return AppContext(
        settings=settings,
        drafts=DraftsClient(runner, app_name=settings.app_name),
        selector=FuzzySelector(command=settings.fzf_path),
    )


def build_release_checker(settings: Settings, version: str) -> ReleaseChecker:
    return ReleaseChecker(
        api_url=str(settings.release_api_url),
        repo=settings.release_repo,
        current_version=version,
        timeout_seconds=settings.http_timeout_seconds,
    )


def current_version() -> str:
    try:
        return package_version(PACKAGE_NAME)
    except PackageNotFoundError:
        return "0.0.0"


def reports_errors(func: Callable) -> Callable:
    """Turn domain errors into a message on stderr and exit status 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DraftsError as exc:
            err_console.print(f"[red]Error:[/red] {escape(str(exc))}", highlight=False, soft_wrap=True)
            raise typer.Exit(1) from exc

    return wrapper


def _text_or_stdin(text: Optional[str]) -> str:
    """Use the positional text, or everything on stdin minus one trailing newline."""
    if text is not None:
        return text
    data = typer.get_text_stream("stdin").read()
    return data[:-1] if data.endswith("\n") else data


def _uuid_or_active(drafts: DraftsClient, uuid: Optional[str]) -> str:
    return uuid if uuid else drafts.active()


def _first_line(content: str) -> str:
    first = _LINEBREAKS.split(content, maxsplit=1)[0]
    if len(first) > LIST_WIDTH:
        first = first[: LIST_WIDTH - 3] + "..."
    return first


def _selector_line(uuid: str, content: str) -> str:
    return f"{uuid} {SELECT_SEPARATOR} {_LINEBREAKS.sub(LINEBREAK_MARKER, content)}"


def _ctx(ctx: typer.Context) -> AppContext:
    return ctx.obj


@app.callback()
def main_callback(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug logging (shows generated scripts)",
    ),
):
    """Drafts CLI."""
    try:
        settings = Settings()
    except ValidationError as exc:
        err_console.print(
            f"[red]Invalid configuration:[/red] {escape(str(exc))}",
            highlight=False,
            soft_wrap=True,
        )
        raise typer.Exit(1) from exc
    level = "DEBUG" if debug else settings.log_level
    if level:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(name)s %(levelname)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    ctx.obj = build_context(settings)


# ---- Writing ---------------------------------------------------------------


@app.command("new")
@reports_errors
def new_draft(
    ctx: typer.Context,
    text: Optional[str] = typer.Argument(None, help="Draft content (omit to use stdin)"),
    tag: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Tag (repeatable)"),
    archive: bool = typer.Option(False, "--archive", "-a", help="Create draft in archive"),
    flagged: bool = typer.Option(False, "--flagged", "-f", help="Create flagged draft"),
    action: Optional[str] = typer.Option(None, "--action", help="Run this action afterwards"),
):
    """Create a new draft and print its UUID."""
    app_ctx = _ctx(ctx)
    options = CreateOptions(
        tags=tag or [],
        folder=Folder.ARCHIVE if archive else Folder.INBOX,
        flagged=flagged,
        action=action,
    )
    typer.echo(app_ctx.drafts.create(_text_or_stdin(text), options))


@app.command()
@reports_errors
def prepend(
    ctx: typer.Context,
    text: Optional[str] = typer.Argument(None, help="Text to prepend (omit to use stdin)"),
    uuid: Optional[str] = typer.Option(None, "--uuid", "-u", help="UUID (omit to use active draft)"),
    tag: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Tag to add (repeatable)"),
    action: Optional[str] = typer.Option(None, "--action", help="Run this action afterwards"),
):
    """Prepend to a draft and print its new content."""
    drafts = _ctx(ctx).drafts
    body = _text_or_stdin(text)
    target = _uuid_or_active(drafts, uuid)
    drafts.prepend(target, body, ModifyOptions(tags=tag or [], action=action))
    typer.echo(drafts.get(target).content)


@app.command()
@reports_errors
def append(
    ctx: typer.Context,
    text: Optional[str] = typer.Argument(None, help="Text to append (omit to use stdin)"),
    uuid: Optional[str] = typer.Option(None, "--uuid", "-u", help="UUID (omit to use active draft)"),
    tag: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Tag to add (repeatable)"),
    action: Optional[str] = typer.Option(None, "--action", help="Run this action afterwards"),
):
    """Append to a draft and print its new content."""
    drafts = _ctx(ctx).drafts
    body = _text_or_stdin(text)
    target = _uuid_or_active(drafts, uuid)
    drafts.append(target, body, ModifyOptions(tags=tag or [], action=action))
    typer.echo(drafts.get(target).content)


@app.command()
@reports_errors
def replace(
    ctx: typer.Context,
    text: Optional[str] = typer.Argument(None, help="New content (omit to use stdin)"),
    uuid: Optional[str] = typer.Option(None, "--uuid", "-u", help="UUID (omit to use active draft)"),
):
    """Replace the content of a draft and print it."""
    drafts = _ctx(ctx).drafts
    body = _text_or_stdin(text)
    target = _uuid_or_active(drafts, uuid)
    drafts.replace(target, body)
    typer.echo(drafts.get(target).content)


@app.command()
@reports_errors
def edit(
    ctx: typer.Context,
    uuid: Optional[str] = typer.Argument(None, help="UUID (omit to use active draft)"),
):
    """Edit a draft in $EDITOR."""
    drafts = _ctx(ctx).drafts
    target = _uuid_or_active(drafts, uuid)
    content = drafts.get(target).content
    edited = click.edit(content)
    if edited is None:
        # editor closed without saving
        typer.echo(content)
        return
    if edited.endswith("\n"):
        edited = edited[:-1]
    drafts.replace(target, edited)
    typer.echo(edited)


@app.command()
@reports_errors
def trash(
    ctx: typer.Context,
    uuid: Optional[str] = typer.Argument(None, help="UUID (omit to use active draft)"),
):
    """Move a draft to the trash."""
    drafts = _ctx(ctx).drafts
    target = _uuid_or_active(drafts, uuid)
    drafts.trash(target)
    typer.echo(target)


@app.command()
@reports_errors
def archive(
    ctx: typer.Context,
    uuid: Optional[str] = typer.Argument(None, help="UUID (omit to use active draft)"),
):
    """Move a draft to the archive."""
    drafts = _ctx(ctx).drafts
    target = _uuid_or_active(drafts, uuid)
    drafts.archive(target)
    typer.echo(target)


@app.command("tag")
@reports_errors
def tag_draft(
    ctx: typer.Context,
    tags: List[str] = typer.Argument(..., help="Tags to add"),
    uuid: Optional[str] = typer.Option(None, "--uuid", "-u", help="UUID (omit to use active draft)"),
):
    """Add tags to a draft and print its tags."""
    drafts = _ctx(ctx).drafts
    target = _uuid_or_active(drafts, uuid)
    for t in drafts.tag(target, tags):
        typer.echo(t)


# ---- Reading ---------------------------------------------------------------


@app.command()
@reports_errors
def get(
    ctx: typer.Context,
    uuid: Optional[str] = typer.Argument(None, help="UUID (omit to use active draft)"),
    as_json: bool = typer.Option(False, "--json", help="Print the whole draft as JSON"),
):
    """Print the content of a draft."""
    drafts = _ctx(ctx).drafts
    draft = drafts.get(_uuid_or_active(drafts, uuid))
    if as_json:
        typer.echo(draft.model_dump_json(by_alias=True))
    else:
        typer.echo(draft.content)


@app.command("select")
@reports_errors
def select_draft(ctx: typer.Context):
    """Select the active draft with fzf."""
    app_ctx = _ctx(ctx)
    candidates = "".join(
        _selector_line(d.uuid, d.content) + "\n" for d in app_ctx.drafts.query(Filter.INBOX)
    )
    choice = app_ctx.selector.choose(candidates)
    uuid = choice.split(f" {SELECT_SEPARATOR} ", 1)[0].strip()
    app_ctx.drafts.select(uuid)
    typer.echo(app_ctx.drafts.get(uuid).content)


@app.command("list")
@reports_errors
def list_drafts(
    ctx: typer.Context,
    filter: Filter = typer.Option(
        Filter.INBOX,
        "--filter",
        "-f",
        case_sensitive=False,
        help="Which drafts to list",
    ),
    tag: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Only drafts with this tag"),
    omit_tag: Optional[List[str]] = typer.Option(
        None, "--omit-tag", "-x", help="Skip drafts with this tag"
    ),
):
    """List drafts as UUID and first line."""
    drafts = _ctx(ctx).drafts.query(filter, QueryOptions(tags=tag or [], omit_tags=omit_tag or []))
    for d in drafts:
        typer.echo(f"{d.uuid}\t{_first_line(d.content)}")


# ---- Actions ---------------------------------------------------------------


@app.command("run")
@reports_errors
def run_action(
    ctx: typer.Context,
    action: str = typer.Argument(..., help="Name of the Drafts action"),
    text: Optional[str] = typer.Argument(None, help="Draft content (omit to use stdin)"),
):
    """Run an action on a new draft and print the draft's UUID."""
    drafts = _ctx(ctx).drafts
    typer.echo(drafts.run_action(action, _text_or_stdin(text)))


# ---- Meta ------------------------------------------------------------------


@app.command("version")
def show_version():
    """Show version information."""
    console.print_json(
        data={
            "name": "drafts",
            "version": current_version(),
            "os": platform.system().lower(),
            "arch": platform.machine(),
        }
    )


@app.command()
@reports_errors
def upgrade(ctx: typer.Context):
    """Check for a newer release."""
    settings = _ctx(ctx).settings
    version = current_version()

    async def _check():
        checker = build_release_checker(settings, version)
        try:
            return await checker.check()
        finally:
            await checker.aclose()

    console.print(f"Current version: {version}", highlight=False)
    with console.status("[bold blue]Checking for updates...[/bold blue]"):
        info = asyncio.run(_check())

    if info.latest_version is None:
        console.print("[dim]No releases found[/dim]")
    elif not info.update_available:
        console.print(
            f"[green]Already up to date (latest: {escape(info.latest_version)})[/green]",
            highlight=False,
        )
    else:
        console.print(
            f"[yellow]New version available: {escape(info.latest_version)}[/yellow]",
            highlight=False,
        )
        if info.url:
            # plain echo: the URL must stay on one line to be copyable
            typer.echo(f"Release: {info.url}")
