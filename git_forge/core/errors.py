"""Exception taxonomy for git-forge.

Every error a command can end with derives from :class:`GitForgeError`.  Each
carries a one-line message, an optional remediation ``hint`` and structured
fields returned by :meth:`GitForgeError.debug_info` so the CLI can print them
on ``--verbose``.
"""

from __future__ import annotations

from typing import Any

TOKEN_HINT = (
    "Please ensure you have set the appropriate token:\n"
    "  GitHub: GITHUB_TOKEN environment variable\n"
    "  GitLab: GITLAB_TOKEN environment variable\n"
    "  Gitea/Forgejo: GITEA_TOKEN environment variable"
)

FORGE_TYPE_HINT = (
    "Use --forge-type to explicitly specify the forge type:\n"
    "  github, gitlab, gitea, forgejo"
)


class GitForgeError(Exception):
    """Base exception for git-forge errors."""

    exit_code: int = 1
    hint: str | None = None

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause

    @property
    def message(self) -> str:
        return str(self.args[0])

    def debug_info(self) -> dict[str, Any]:
        """Machine-inspectable context for this error."""
        info: dict[str, Any] = {}
        if self.cause is not None:
            info["cause"] = repr(self.cause)
        return info


class RemoteDetectionError(GitForgeError):
    """The remote URL cannot be parsed or its forge type cannot be detected."""

    hint = FORGE_TYPE_HINT

    def __init__(self, message: str, remote_url: str, cause: BaseException | None = None) -> None:
        super().__init__(f"{message}: {remote_url}", cause=cause)
        self.remote_url = remote_url

    def debug_info(self) -> dict[str, Any]:
        return {"remote_url": self.remote_url, **super().debug_info()}


class AuthenticationError(GitForgeError):
    """Authentication is missing or was rejected by the forge."""

    hint = TOKEN_HINT

    def __init__(
        self,
        message: str,
        forge_name: str,
        status_code: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(f"[{forge_name}] {message}", cause=cause)
        self.forge_name = forge_name
        self.status_code = status_code

    def debug_info(self) -> dict[str, Any]:
        info: dict[str, Any] = {"forge_name": self.forge_name}
        if self.status_code is not None:
            info["status_code"] = self.status_code
        return {**info, **super().debug_info()}


class ForgeError(GitForgeError):
    """Raised for any forge API error (HTTP errors, network failures, bad JSON)."""

    def __init__(
        self,
        message: str,
        forge_name: str,
        status_code: int | None = None,
        url: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(f"[{forge_name}] {message}", cause=cause)
        self.forge_name = forge_name
        self.status_code = status_code
        self.url = url

    def debug_info(self) -> dict[str, Any]:
        info: dict[str, Any] = {"forge_name": self.forge_name}
        if self.status_code is not None:
            info["status_code"] = self.status_code
        if self.url:
            info["url"] = self.url
        return {**info, **super().debug_info()}

    def __repr__(self) -> str:  # pragma: no cover
        return f"ForgeError({self.args[0]!r}, status_code={self.status_code})"


class ArgumentError(GitForgeError):
    """Invalid command-line value or filter."""

    exit_code: int = 2

    def __init__(self, message: str, flag: str | None = None, cause: BaseException | None = None) -> None:
        if flag:
            prefix = f"-{flag}" if len(flag) == 1 else f"--{flag}"
            message = f"Invalid argument {prefix}: {message}"
        super().__init__(message, cause=cause)
        self.flag = flag

    def debug_info(self) -> dict[str, Any]:
        info: dict[str, Any] = {"flag": self.flag} if self.flag else {}
        return {**info, **super().debug_info()}


class GitError(GitForgeError):
    """A local git command failed."""

    hint = "Make sure you are in a git repository with a configured remote."

    def __init__(
        self,
        message: str,
        command: str,
        git_exit_code: int = 1,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(f"Git command failed: {command}\n{message}", cause=cause)
        self.command = command
        self.git_exit_code = git_exit_code

    def debug_info(self) -> dict[str, Any]:
        info: dict[str, Any] = {"command": self.command, "exit_code": self.git_exit_code}
        return {**info, **super().debug_info()}
