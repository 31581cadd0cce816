"""Options and helpers shared by the forge subcommands."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from typing import Annotated, Optional

import typer
from pydantic import BaseModel, ValidationError

from git_forge.core.errors import ArgumentError, GitForgeError
from git_forge.core.logging import get_logger
from git_forge.infra.remote import ForgeType

logger = get_logger("commands")

CLIENT_SIDE_FILTER_NOTE = (
    "API implementation varies across forges. All filtering options work. Most "
    "filters are supported server-side. But not all, so we filter client-side for "
    "those that aren't supported. Client-side filtering means results are filtered "
    "after fetching from the API, which may affect pagination accuracy."
)


class IssueStateOption(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    ALL = "all"


class PrStateOption(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    MERGED = "merged"
    ALL = "all"


# ── Reusable option declarations ──────────────────────────────────────
RemoteOpt = Annotated[str, typer.Option("--remote", help="Git remote to use.")]
ForgeTypeOpt = Annotated[
    Optional[ForgeType],
    typer.Option(
        "--forge-type",
        case_sensitive=False,
        help="Explicitly specify the forge type instead of detecting it from the remote host.",
    ),
]
AuthOpt = Annotated[
    bool,
    typer.Option(
        "--auth",
        help="Use authentication from environment variables (GITHUB_TOKEN, GITLAB_TOKEN, GITEA_TOKEN).",
    ),
]
ApiUrlOpt = Annotated[
    Optional[str],
    typer.Option(
        "--api-url",
        help="API base URL, e.g. https://git.example.com/api/v4. Overrides the one derived from the remote host.",
    ),
]
AuthorOpt = Annotated[Optional[str], typer.Option("--author", help="Filter by author username.")]
LabelsOpt = Annotated[Optional[str], typer.Option("--labels", help="Filter by labels (comma-separated).")]
PageOpt = Annotated[int, typer.Option("--page", help="Page number to fetch.")]
PerPageOpt = Annotated[int, typer.Option("--per-page", help="Number of results per page (1-100).")]
JsonOpt = Annotated[bool, typer.Option("--json", help="Output as JSON instead of TSV.")]
IssueStateOpt = Annotated[
    IssueStateOption,
    typer.Option("--state", case_sensitive=False, help="Filter by state."),
]
PrStateOpt = Annotated[
    PrStateOption,
    typer.Option("--state", case_sensitive=False, help="Filter by state."),
]
DraftOpt = Annotated[
    Optional[bool],
    typer.Option("--draft/--no-draft", help="Only draft (or only non-draft) pull requests."),
]

_FIELD_FLAGS = {"page": "page", "per_page": "per-page", "state": "state", "labels": "labels"}
_FIELD_MESSAGES = {
    "page": "Page must be >= 1, got: {got}",
    "per_page": "Per-page must be between 1 and 100, got: {got}",
}


def parse_list(value: str | None) -> list[str]:
    """Split a comma-separated flag value into trimmed, non-empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def build_model(model: type[BaseModel], **values):
    """Instantiate a filter/params model, turning validation errors into ArgumentError."""
    try:
        return model(**values)
    except ValidationError as exc:
        error = exc.errors()[0]
        field = str(error["loc"][0]) if error.get("loc") else None
        got = values.get(field) if field else None
        template = _FIELD_MESSAGES.get(field or "", "{msg}, got: {got}")
        raise ArgumentError(
            template.format(msg=error["msg"], got=got),
            flag=_FIELD_FLAGS.get(field or "", field),
            cause=exc,
        ) from exc


def report_error(exc: GitForgeError, verbose: bool = False) -> None:
    """Print *exc* (message, hint, debug fields on --verbose) to stderr."""
    typer.secho(exc.message, fg=typer.colors.RED, err=True)
    if exc.hint:
        typer.echo(exc.hint, err=True)
    if verbose:
        for key, value in exc.debug_info().items():
            typer.echo(f"{key}: {value}", err=True)


@contextmanager
def handle_errors(ctx: typer.Context | None = None) -> Iterator[None]:
    """Turn a :class:`GitForgeError` into a printed message and exit code."""
    try:
        yield
    except GitForgeError as exc:
        verbose = bool(ctx and ctx.obj and ctx.obj.get("verbose"))
        logger.debug("command failed", exc_info=verbose)
        report_error(exc, verbose=verbose)
        raise typer.Exit(code=exc.exit_code) from exc
