"""Remote URL parsing and forge-type detection."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlparse

from git_forge.core.errors import RemoteDetectionError


class ForgeType(str, Enum):
    """Forge flavours accepted by ``--forge-type``."""

    GITHUB = "github"
    GITLAB = "gitlab"
    GITEA = "gitea"
    FORGEJO = "forgejo"


@dataclass(frozen=True)
class RemoteInfo:
    """Host and repository path of a git remote."""

    host: str
    path: str
    # HTTP(S) port of the forge when the remote spells one out. SSH ports are
    # transport-only and never land here.
    port: int | None = None


# https://docs.github.com/en/get-started/git-basics/about-remote-repositories
# scp-style ``git@host:path``. With an ``ssh://`` prefix a numeric first
# segment is a port (``ssh://git@host:2222/owner/repo``) and belongs to urlparse.
_SCP_RE = re.compile(r"^git@([^:/]+):(.+?)(?:\.git)?/?$")
_SSH_SCP_RE = re.compile(r"^ssh://git@([^:/]+):(?!\d+/)(.+?)(?:\.git)?/?$")

_DETECTION_ORDER: list[tuple[ForgeType, tuple[str, ...]]] = [
    (ForgeType.GITHUB, ("github",)),
    (ForgeType.GITLAB, ("gitlab",)),
    (ForgeType.GITEA, ("gitea", "forgejo", "codeberg")),
]


def parse_remote_url(remote_url: str) -> RemoteInfo:
    """Split a git remote URL into a :class:`RemoteInfo`.

    Accepted shapes:

    - SSH: ``git@host:owner/repo.git``, optionally prefixed with ``ssh://``
    - SSH URL: ``ssh://git@host[:port]/owner/repo.git``
    - HTTP(S): ``https://host[:port]/owner/repo.git``

    The trailing ``.git`` is dropped in every case.  Only an HTTP(S) port is
    kept on the result; an SSH port says nothing about where the web UI or
    the API listen.

    Raises:
        RemoteDetectionError: If *remote_url* matches none of these shapes.
    """
    url = remote_url.strip()
    match = _SCP_RE.match(url) or _SSH_SCP_RE.match(url)
    if match:
        return RemoteInfo(host=match.group(1), path=match.group(2))

    try:
        parsed = urlparse(url)
        host = parsed.hostname
        port = parsed.port
    except ValueError as exc:
        raise RemoteDetectionError("Could not parse remote URL", remote_url, cause=exc) from exc

    path = parsed.path.strip("/")
    if path.endswith(".git"):
        path = path[:-4]
    if not parsed.scheme or not host or not path:
        raise RemoteDetectionError("Could not parse remote URL", remote_url)
    if parsed.scheme not in ("http", "https"):
        port = None
    return RemoteInfo(host=host, path=path, port=port)


def detect_forge_type(host: str) -> ForgeType:
    """Guess the forge type from a hostname (first match wins).

    Raises:
        RemoteDetectionError: If no known forge name occurs in *host*.
    """
    lowered = host.lower()
    for forge_type, needles in _DETECTION_ORDER:
        if any(needle in lowered for needle in needles):
            return forge_type
    raise RemoteDetectionError(
        "Unable to detect forge type from hostname. "
        "Supported: github, gitlab, gitea, forgejo. "
        "Use --forge-type flag to specify explicitly",
        host,
    )
