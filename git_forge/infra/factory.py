"""Forge client factory.

:func:`create_forge` is the single entry-point for obtaining a
``ForgeClient``.  It resolves the remote URL, parses it, detects the forge
type from the host (unless one is given explicitly) and reads the matching
token from the application settings.

Usage::

    from git_forge.infra.factory import create_forge

    # Auto-detected from `git remote get-url origin`
    forge = create_forge()

    # Explicit remote, authenticated, self-hosted Forgejo
    forge = create_forge("upstream", use_auth=True, forge_type=ForgeType.FORGEJO)
"""

from __future__ import annotations

from pathlib import Path

from git_forge.core.config import Settings, get_settings
from git_forge.core.errors import RemoteDetectionError
from git_forge.core.logging import get_logger
from git_forge.infra import git
from git_forge.infra.forge import ForgeClient
from git_forge.infra.gitea_client import GiteaClient
from git_forge.infra.github_client import GitHubClient
from git_forge.infra.gitlab_client import GitLabClient
from git_forge.infra.remote import ForgeType, RemoteInfo, detect_forge_type, parse_remote_url

logger = get_logger("infra.factory")


def build_forge(
    remote: RemoteInfo,
    forge_type: ForgeType,
    use_auth: bool = False,
    settings: Settings | None = None,
    api_url: str | None = None,
) -> ForgeClient:
    """Instantiate the adapter for *forge_type* bound to *remote*.

    *api_url* replaces the API base derived from the remote host, e.g. for a
    GitHub Enterprise or GitLab instance served behind a different hostname.

    Raises:
        AuthenticationError: If *use_auth* is set and the token is missing.
    """
    settings = settings or get_settings()
    common = {
        "use_auth": use_auth,
        "timeout": settings.http_timeout,
        "port": remote.port,
        "api_url": api_url,
    }

    if forge_type is ForgeType.GITHUB:
        return GitHubClient(remote.host, remote.path, token=settings.github_token, **common)
    if forge_type is ForgeType.GITLAB:
        return GitLabClient(remote.host, remote.path, token=settings.gitlab_token, **common)
    if forge_type in (ForgeType.GITEA, ForgeType.FORGEJO):
        return GiteaClient(
            remote.host,
            remote.path,
            token=settings.gitea_token,
            forge_name="Gitea" if forge_type is ForgeType.GITEA else "Forgejo",
            **common,
        )
    raise RemoteDetectionError(f"Unknown forge type {forge_type!r}", remote.host)


def create_forge(
    remote_name: str = "origin",
    use_auth: bool = False,
    forge_type: ForgeType | None = None,
    settings: Settings | None = None,
    cwd: Path | None = None,
    api_url: str | None = None,
) -> ForgeClient:
    """Return a :class:`~git_forge.infra.forge.ForgeClient` for *remote_name*.

    Args:
        remote_name: Git remote whose URL identifies the repository.
        use_auth:    Send the forge token; fails fast if it is not set.
        forge_type:  Explicit forge type; skips host-based detection.
        settings:    Settings override (tests).
        cwd:         Repository directory (defaults to the process cwd).
        api_url:     API base URL override (``--api-url``).

    Raises:
        GitError:             If the remote does not exist.
        RemoteDetectionError: If the URL cannot be parsed or the forge type
                              cannot be detected.
        AuthenticationError:  If *use_auth* is set and the token is missing.
    """
    remote_url = git.get_remote_url(remote_name, cwd=cwd)
    remote = parse_remote_url(remote_url)
    resolved_type = forge_type or detect_forge_type(remote.host)
    logger.debug("remote %s → %s/%s (%s)", remote_name, remote.host, remote.path, resolved_type.value)
    return build_forge(remote, resolved_type, use_auth=use_auth, settings=settings, api_url=api_url)
