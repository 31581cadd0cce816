"""git-forge pr - list, open and check out pull requests."""

from __future__ import annotations

from typing import Annotated, Optional

import typer

from git_forge.commands._common import (
    CLIENT_SIDE_FILTER_NOTE,
    ApiUrlOpt,
    AuthOpt,
    AuthorOpt,
    DraftOpt,
    ForgeTypeOpt,
    JsonOpt,
    LabelsOpt,
    PageOpt,
    PerPageOpt,
    PrStateOpt,
    PrStateOption,
    RemoteOpt,
    build_model,
    handle_errors,
    parse_list,
)
from git_forge.commands.output import PR_COLUMNS, format_json, format_tsv, parse_columns
from git_forge.core.errors import ArgumentError
from git_forge.core.logging import get_logger
from git_forge.infra import git
from git_forge.infra.factory import create_forge
from git_forge.infra.forge import DEFAULT_PAGE, DEFAULT_PER_PAGE, CreatePrParams, PrFilters

logger = get_logger("commands.pr")

pr_app = typer.Typer(
    name="pr",
    help="Manage pull requests (merge requests on GitLab).",
)


PrColumnsOpt = Annotated[
    Optional[str],
    typer.Option(
        "--columns",
        help=f"Columns to include in TSV output (comma-separated). Available: {', '.join(PR_COLUMNS)}.",
    ),
]


@pr_app.callback(invoke_without_command=True, epilog=CLIENT_SIDE_FILTER_NOTE)
def pr_main(
    ctx: typer.Context,
    state: PrStateOpt = PrStateOption.OPEN,
    author: AuthorOpt = None,
    labels: LabelsOpt = None,
    draft: DraftOpt = None,
    page: PageOpt = DEFAULT_PAGE,
    per_page: PerPageOpt = DEFAULT_PER_PAGE,
    columns: PrColumnsOpt = None,
    json_output: JsonOpt = False,
    remote: RemoteOpt = "origin",
    forge_type: ForgeTypeOpt = None,
    auth: AuthOpt = False,
    api_url: ApiUrlOpt = None,
) -> None:
    """List pull requests (default), open one, or check one out."""
    if ctx.invoked_subcommand is None:
        pr_list(
            ctx,
            state=state,
            author=author,
            labels=labels,
            draft=draft,
            page=page,
            per_page=per_page,
            columns=columns,
            json_output=json_output,
            remote=remote,
            forge_type=forge_type,
            auth=auth,
            api_url=api_url,
        )


@pr_app.command("list", epilog=CLIENT_SIDE_FILTER_NOTE)
def pr_list(
    ctx: typer.Context,
    state: PrStateOpt = PrStateOption.OPEN,
    author: AuthorOpt = None,
    labels: LabelsOpt = None,
    draft: DraftOpt = None,
    page: PageOpt = DEFAULT_PAGE,
    per_page: PerPageOpt = DEFAULT_PER_PAGE,
    columns: PrColumnsOpt = None,
    json_output: JsonOpt = False,
    remote: RemoteOpt = "origin",
    forge_type: ForgeTypeOpt = None,
    auth: AuthOpt = False,
    api_url: ApiUrlOpt = None,
) -> None:
    """List pull requests as TSV."""
    with handle_errors(ctx):
        filters = build_model(
            PrFilters,
            state=state.value,
            author=author or None,
            labels=parse_list(labels),
            draft=draft,
            page=page,
            per_page=per_page,
        )
        selected = parse_columns(columns, PR_COLUMNS)
        with create_forge(remote, use_auth=auth, forge_type=forge_type, api_url=api_url) as forge:
            prs = forge.list_prs(filters)

    if json_output:
        typer.echo(format_json(prs))
    elif prs:
        typer.echo(format_tsv(prs, selected))


@pr_app.command("open")
def pr_open(
    ctx: typer.Context,
    title: Annotated[
        Optional[str],
        typer.Option("--title", help="PR title (defaults to the branch name)."),
    ] = None,
    body: Annotated[str, typer.Option("--body", help="PR description.")] = "",
    target: Annotated[
        Optional[str],
        typer.Option("--target", help="Target branch (defaults to the remote's default branch)."),
    ] = None,
    draft: Annotated[bool, typer.Option("--draft", help="Create as a draft.")] = False,
    push: Annotated[
        bool,
        typer.Option("--push/--no-push", help="Push the current branch to the remote first."),
    ] = True,
    remote: RemoteOpt = "origin",
    forge_type: ForgeTypeOpt = None,
    api_url: ApiUrlOpt = None,
) -> None:
    """Create a pull request from the current branch and print its URL."""
    with handle_errors(ctx):
        source = git.get_current_branch()
        if not source:
            raise ArgumentError("Cannot create PR: you are in detached HEAD state. Check out a branch first.")

        target_branch = target or git.get_default_branch(remote)
        if source == target_branch:
            raise ArgumentError(f'Cannot create PR: current branch "{source}" is the same as target branch.')

        params = build_model(
            CreatePrParams,
            title=title or source,
            source_branch=source,
            target_branch=target_branch,
            body=body,
            draft=draft,
        )
        # A missing token must fail before anything is pushed.
        with create_forge(remote, use_auth=True, forge_type=forge_type, api_url=api_url) as forge:
            if push:
                git.push_branch(source, remote)
            pr = forge.create_pr(params)

    logger.info("Opened %s → %s: %s", source, target_branch, pr.url)
    typer.echo(pr.url)


pr_app.command("create", hidden=True, help="Alias for 'open'.")(pr_open)


@pr_app.command("checkout")
def pr_checkout(
    ctx: typer.Context,
    number: Annotated[int, typer.Argument(help="Pull request number.", min=1)],
    remote: RemoteOpt = "origin",
    forge_type: ForgeTypeOpt = None,
    auth: AuthOpt = False,
) -> None:
    """Fetch a pull request into ``pr-<number>`` and check it out."""
    branch = f"pr-{number}"
    with handle_errors(ctx):
        with create_forge(remote, use_auth=auth, forge_type=forge_type) as forge:
            ref = forge.get_pr_ref(number)
        git.fetch_ref(ref, branch, remote)
        git.checkout_branch(branch)

    typer.echo(f'Successfully checked out PR "{number}" to branch "{branch}"', err=True)
