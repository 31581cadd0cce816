"""Local git plumbing used by the pr-create / checkout / browse flows.

All operations shell out to ``git`` via ``subprocess`` in the current working
directory.  The forge layer never calls these itself; the command layer
decides when to push, fetch or check out.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from git_forge.core.errors import GitError
from git_forge.core.logging import get_logger

logger = get_logger("infra.git")


def _run_git(args: list[str], cwd: Path | None = None, timeout: int = 120) -> str:
    """Run a git sub-command and return its stripped stdout.

    Raises
    ------
    GitError
        If git exits with a non-zero return code, times out or is missing.
    """
    cmd = ["git"] + args
    command = " ".join(cmd)
    logger.debug("git | cwd=%s | %s", cwd, command)
    try:
        result = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        raise GitError(f"timed out after {timeout}s", command=command, cause=exc) from exc
    except FileNotFoundError as exc:
        raise GitError("git executable not found on PATH", command=command, cause=exc) from exc

    if result.returncode != 0:
        stderr = result.stderr.strip()
        raise GitError(stderr[:400] or "(no output)", command=command, git_exit_code=result.returncode)
    return result.stdout.strip()


def _try_git(args: list[str], cwd: Path | None = None) -> str | None:
    """Like :func:`_run_git` but returns ``None`` instead of raising."""
    try:
        return _run_git(args, cwd=cwd)
    except GitError as exc:
        logger.debug("optional git command failed: %s", exc)
        return None


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def get_remote_url(remote: str = "origin", cwd: Path | None = None) -> str:
    """Return the URL configured for *remote*."""
    return _run_git(["remote", "get-url", remote], cwd=cwd)


def get_current_branch(cwd: Path | None = None) -> str:
    """Return the checked-out branch name, or ``""`` on a detached HEAD."""
    return _run_git(["branch", "--show-current"], cwd=cwd)


def get_repo_root(cwd: Path | None = None) -> Path:
    return Path(_run_git(["rev-parse", "--show-toplevel"], cwd=cwd))


def rev_parse(commit_ish: str, cwd: Path | None = None) -> str:
    """Resolve *commit_ish* to a full commit hash."""
    return _run_git(["rev-parse", "--verify", f"{commit_ish}^{{commit}}"], cwd=cwd)


def branch_exists(branch: str, cwd: Path | None = None) -> bool:
    return _try_git(["rev-parse", "--verify", "--quiet", f"refs/heads/{branch}"], cwd=cwd) is not None


def _remote_head_branch(remote: str, cwd: Path | None = None) -> str | None:
    # Local lookup first; ``git remote show`` needs the network.
    ref = _try_git(["symbolic-ref", "--short", f"refs/remotes/{remote}/HEAD"], cwd=cwd)
    if ref and ref.startswith(f"{remote}/"):
        return ref[len(remote) + 1:]

    output = _try_git(["remote", "show", remote], cwd=cwd)
    for line in (output or "").splitlines():
        line = line.strip()
        if line.startswith("HEAD branch:"):
            branch = line.split(":", 1)[1].strip()
            if branch and branch != "(unknown)":
                return branch
    return None


def get_default_branch(remote: str = "origin", cwd: Path | None = None) -> str:
    """Determine the repository's default branch.

    Detection order: the remote's HEAD branch, then a local ``main``, then a
    local ``master``.

    Raises:
        GitError: If none of them can be found.
    """
    branch = _remote_head_branch(remote, cwd=cwd)
    if branch:
        return branch
    for candidate in ("main", "master"):
        if branch_exists(candidate, cwd=cwd):
            return candidate
    raise GitError("Failed to determine default branch.", command=f"git remote show {remote}")


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


def push_branch(branch: str, remote: str = "origin", set_upstream: bool = True, cwd: Path | None = None) -> None:
    args = ["push"]
    if set_upstream:
        args.append("-u")
    args += [remote, branch]
    logger.info("Pushing %s to %s", branch, remote)
    _run_git(args, cwd=cwd, timeout=300)


def fetch_ref(ref: str, branch: str, remote: str = "origin", cwd: Path | None = None) -> None:
    """Fetch *ref* from *remote* into the local branch *branch*."""
    logger.info("Fetching %s from %s into %s", ref, remote, branch)
    _run_git(["fetch", remote, f"{ref}:{branch}"], cwd=cwd, timeout=300)


def checkout_branch(branch: str, cwd: Path | None = None) -> None:
    _run_git(["checkout", branch], cwd=cwd)
