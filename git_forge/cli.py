"""Main CLI entry point for git-forge."""

from typing import Annotated

import typer

from git_forge import __version__
from git_forge.commands.browse import browse
from git_forge.commands.issue import issue_app
from git_forge.commands.pr import pr_app
from git_forge.commands.web import web
from git_forge.core.logging import setup_logging

app = typer.Typer(
    name="git-forge",
    help="Work with issues and pull requests on GitHub, GitLab, Gitea and Forgejo.",
    epilog=(
        "Forge HTTP requests time out after GIT_FORGE_HTTP_TIMEOUT seconds (default 30). "
        "Tokens are read from GITHUB_TOKEN, GITLAB_TOKEN and GITEA_TOKEN."
    ),
)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging and detailed error output."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option("--version", is_eager=True, help="Show version and exit."),
    ] = False,
) -> None:
    """git-forge: one CLI for every forge."""
    if version:
        typer.echo(f"git-forge {__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    setup_logging(verbose=verbose)

    # Store global options in context for commands to access
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


# Subcommand groups, each with a one-letter alias
app.add_typer(issue_app, name="issue")
app.add_typer(issue_app, name="i", hidden=True)
app.add_typer(pr_app, name="pr")
app.add_typer(pr_app, name="p", hidden=True)

app.command(name="web")(web)
app.command(name="w", hidden=True)(web)
app.command(name="browse")(browse)


if __name__ == "__main__":
    app()
