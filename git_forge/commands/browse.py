"""git-forge browse - open a repository page in the web browser.

Targets, in priority order: a file path (optionally ``PATH:LINE``, at
``--commit`` when given), a commit, a single issue or the issue list, a
single pull request or the pull-request list, and finally the repository
home page.
"""

from __future__ import annotations

import webbrowser
from pathlib import Path
from typing import Annotated, Optional

import typer

from git_forge.commands._common import ForgeTypeOpt, RemoteOpt, handle_errors
from git_forge.core.errors import ArgumentError
from git_forge.core.logging import get_logger
from git_forge.infra import git
from git_forge.infra.factory import create_forge
from git_forge.infra.forge import ForgeClient

logger = get_logger("commands.browse")


def split_path_line(value: str) -> tuple[str, int | None]:
    """Split ``PATH[:LINE]``; a suffix that is not a number stays in the path."""
    path, sep, line = value.rpartition(":")
    if sep and path and line.isdigit():
        return path, int(line)
    return value, None


def repo_relative_path(value: str, repo_root: Path, cwd: Path | None = None) -> str:
    """Resolve *value* against *cwd* and return it relative to *repo_root*, with forward slashes."""
    candidate = Path(value)
    if not candidate.is_absolute():
        candidate = (cwd or Path.cwd()) / candidate
    resolved = candidate.resolve()
    if not resolved.exists():
        raise ArgumentError(f"Path does not exist: {value}", flag="path")
    try:
        relative = resolved.relative_to(repo_root.resolve())
    except ValueError as exc:
        raise ArgumentError(f"Path is outside the repository: {value}", flag="path", cause=exc) from exc
    return relative.as_posix()


def resolve_target_url(
    forge: ForgeClient,
    path: str | None = None,
    commit: str | None = None,
    issues: bool = False,
    issue: int | None = None,
    prs: bool = False,
    pr: int | None = None,
    cwd: Path | None = None,
) -> str:
    """Pick the URL for the requested target (see module docstring)."""
    # PATH and --commit combine; the issue and PR targets stand alone.
    groups = (
        path is not None or commit is not None,
        issues or issue is not None,
        prs or pr is not None,
    )
    if sum(groups) > 1:
        raise ArgumentError("Only one of PATH/--commit, --issues/--issue and --prs/--pr may be given.")

    if path is not None:
        file_path, line = split_path_line(path)
        relative = repo_relative_path(file_path, git.get_repo_root(cwd=cwd), cwd=cwd)
        revision = git.rev_parse(commit, cwd=cwd) if commit else "HEAD"
        return forge.get_path_url(relative, revision, line)
    if commit is not None:
        return forge.get_commit_url(git.rev_parse(commit, cwd=cwd))
    if issue is not None:
        return forge.get_issue_url(issue)
    if issues:
        return forge.get_web_url("issues")
    if pr is not None:
        return forge.get_pr_url(pr)
    if prs:
        return forge.get_web_url("prs")
    return forge.get_web_url("repository")


def browse(
    ctx: typer.Context,
    path: Annotated[
        Optional[str],
        typer.Argument(metavar="[PATH[:LINE]]", help="File or directory to open."),
    ] = None,
    commit: Annotated[
        Optional[str],
        typer.Option("--commit", "-c", help="Open this commit-ish, or PATH at this commit-ish."),
    ] = None,
    issues: Annotated[bool, typer.Option("--issues", "-i", help="Open the issue list.")] = False,
    issue: Annotated[Optional[int], typer.Option("--issue", help="Open issue NUMBER.", min=1)] = None,
    prs: Annotated[
        bool,
        typer.Option("--prs", "--mrs", "-p", help="Open the pull request list."),
    ] = False,
    pr: Annotated[Optional[int], typer.Option("--pr", "--mr", help="Open pull request NUMBER.", min=1)] = None,
    no_browser: Annotated[
        bool,
        typer.Option("--no-browser", "-n", help="Print the URL instead of opening it."),
    ] = False,
    remote: RemoteOpt = "origin",
    forge_type: ForgeTypeOpt = None,
) -> None:
    """Open a repository page in the web browser."""
    with handle_errors(ctx):
        with create_forge(remote, forge_type=forge_type) as forge:
            url = resolve_target_url(forge, path=path, commit=commit, issues=issues, issue=issue, prs=prs, pr=pr)

    if no_browser:
        typer.echo(url)
        return
    logger.debug("opening %s", url)
    if not webbrowser.open(url):
        # No usable browser; fall back to printing.
        typer.echo(url)
