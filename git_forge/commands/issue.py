"""git-forge issue - list and open issues on the remote's forge."""

from __future__ import annotations

from typing import Annotated, Optional

import typer

from git_forge.commands._common import (
    CLIENT_SIDE_FILTER_NOTE,
    ApiUrlOpt,
    AuthOpt,
    AuthorOpt,
    ForgeTypeOpt,
    IssueStateOpt,
    IssueStateOption,
    JsonOpt,
    LabelsOpt,
    PageOpt,
    PerPageOpt,
    RemoteOpt,
    build_model,
    handle_errors,
    parse_list,
)
from git_forge.commands.output import ISSUE_COLUMNS, format_json, format_tsv, parse_columns
from git_forge.infra.factory import create_forge
from git_forge.infra.forge import DEFAULT_PAGE, DEFAULT_PER_PAGE, CreateIssueParams, IssueFilters

issue_app = typer.Typer(
    name="issue",
    help="List issues from the remote repository.",
)

IssueColumnsOpt = Annotated[
    Optional[str],
    typer.Option(
        "--columns",
        help=f"Columns to include in TSV output (comma-separated). Available: {', '.join(ISSUE_COLUMNS)}.",
    ),
]


@issue_app.callback(invoke_without_command=True, epilog=CLIENT_SIDE_FILTER_NOTE)
def issue_main(
    ctx: typer.Context,
    state: IssueStateOpt = IssueStateOption.OPEN,
    author: AuthorOpt = None,
    labels: LabelsOpt = None,
    page: PageOpt = DEFAULT_PAGE,
    per_page: PerPageOpt = DEFAULT_PER_PAGE,
    columns: IssueColumnsOpt = None,
    json_output: JsonOpt = False,
    remote: RemoteOpt = "origin",
    forge_type: ForgeTypeOpt = None,
    auth: AuthOpt = False,
    api_url: ApiUrlOpt = None,
) -> None:
    """List issues (default) or open a new one.

    Without a subcommand the options above apply to the listing, so
    ``git-forge issue --state closed`` and ``git-forge issue list --state
    closed`` are the same.
    """
    if ctx.invoked_subcommand is None:
        issue_list(
            ctx,
            state=state,
            author=author,
            labels=labels,
            page=page,
            per_page=per_page,
            columns=columns,
            json_output=json_output,
            remote=remote,
            forge_type=forge_type,
            auth=auth,
            api_url=api_url,
        )


@issue_app.command("list", epilog=CLIENT_SIDE_FILTER_NOTE)
def issue_list(
    ctx: typer.Context,
    state: IssueStateOpt = IssueStateOption.OPEN,
    author: AuthorOpt = None,
    labels: LabelsOpt = None,
    page: PageOpt = DEFAULT_PAGE,
    per_page: PerPageOpt = DEFAULT_PER_PAGE,
    columns: IssueColumnsOpt = None,
    json_output: JsonOpt = False,
    remote: RemoteOpt = "origin",
    forge_type: ForgeTypeOpt = None,
    auth: AuthOpt = False,
    api_url: ApiUrlOpt = None,
) -> None:
    """List issues as TSV.

    Default row format is ``<id> <title>\\t<url>``; ``--columns`` selects
    the cells instead.
    """
    with handle_errors(ctx):
        filters = build_model(
            IssueFilters,
            state=state.value,
            author=author or None,
            labels=parse_list(labels),
            page=page,
            per_page=per_page,
        )
        selected = parse_columns(columns, ISSUE_COLUMNS)
        with create_forge(remote, use_auth=auth, forge_type=forge_type, api_url=api_url) as forge:
            issues = forge.list_issues(filters)

    if json_output:
        typer.echo(format_json(issues))
    elif issues:
        typer.echo(format_tsv(issues, selected))


@issue_app.command("create")
def issue_create(
    ctx: typer.Context,
    title: Annotated[str, typer.Option("--title", help="Issue title.")],
    body: Annotated[str, typer.Option("--body", help="Issue description.")] = "",
    labels: Annotated[
        Optional[str],
        typer.Option("--labels", help="Labels to apply (comma-separated)."),
    ] = None,
    remote: RemoteOpt = "origin",
    forge_type: ForgeTypeOpt = None,
    api_url: ApiUrlOpt = None,
) -> None:
    """Open an issue and print its URL. Always authenticated."""
    with handle_errors(ctx):
        params = build_model(CreateIssueParams, title=title, body=body, labels=parse_list(labels))
        with create_forge(remote, use_auth=True, forge_type=forge_type, api_url=api_url) as forge:
            issue = forge.create_issue(params)

    typer.echo(issue.url)
