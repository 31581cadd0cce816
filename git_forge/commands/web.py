"""git-forge web - print the repository's web URL."""

from __future__ import annotations

from enum import Enum
from typing import Annotated

import typer

from git_forge.commands._common import AuthOpt, ForgeTypeOpt, RemoteOpt, handle_errors
from git_forge.infra.factory import create_forge


class WebType(str, Enum):
    REPOSITORY = "repository"
    ISSUES = "issues"
    PRS = "prs"
    MRS = "mrs"


def web(
    ctx: typer.Context,
    type: Annotated[
        WebType,
        typer.Option("--type", "-t", case_sensitive=False, help="Which page to link to."),
    ] = WebType.REPOSITORY,
    remote: RemoteOpt = "origin",
    forge_type: ForgeTypeOpt = None,
    auth: AuthOpt = False,
) -> None:
    """Print the web URL of the repository, its issues or its pull requests."""
    with handle_errors(ctx):
        with create_forge(remote, use_auth=auth, forge_type=forge_type) as forge:
            url = forge.get_web_url(type.value)

    typer.echo(url)
