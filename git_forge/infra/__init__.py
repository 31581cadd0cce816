"""git-forge infrastructure layer: forge API clients and git plumbing.

All forge communication (GitHub, GitLab, Gitea/Forgejo) goes through this
package.  Use :func:`~git_forge.infra.factory.create_forge` to obtain a client
instance.

Quick start::

    from git_forge.infra import PrFilters, create_forge

    with create_forge("origin") as forge:
        drafts = forge.list_prs(PrFilters(state="open", draft=True))
        print(forge.get_web_url("prs"))
"""

from git_forge.infra.factory import build_forge, create_forge
from git_forge.infra.forge import (
    CreateIssueParams,
    CreatePrParams,
    ForgeClient,
    Issue,
    IssueFilters,
    Pr,
    PrFilters,
)
from git_forge.infra.gitea_client import GiteaClient
from git_forge.infra.github_client import GitHubClient
from git_forge.infra.gitlab_client import GitLabClient
from git_forge.infra.remote import ForgeType, RemoteInfo, detect_forge_type, parse_remote_url

__all__ = [
    # Protocol & models
    "ForgeClient",
    "Issue",
    "Pr",
    "IssueFilters",
    "PrFilters",
    "CreatePrParams",
    "CreateIssueParams",
    # Clients
    "GitHubClient",
    "GitLabClient",
    "GiteaClient",
    # Remote resolution
    "ForgeType",
    "RemoteInfo",
    "parse_remote_url",
    "detect_forge_type",
    # Factory
    "build_forge",
    "create_forge",
]
