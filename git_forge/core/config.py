"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration for git-forge. Reads from the process environment."""

    model_config = {"extra": "ignore", "populate_by_name": True}

    # ── Forge API credentials ─────────────────────────────────────────
    # Only consulted when a command runs with --auth (or creates something).
    # GitHub personal access token.
    github_token: str = ""

    # GitLab personal access token.
    gitlab_token: str = ""

    # Gitea / Forgejo access token.
    gitea_token: str = ""

    # ── HTTP ──────────────────────────────────────────────────────────
    http_timeout: float = Field(30.0, validation_alias="GIT_FORGE_HTTP_TIMEOUT")

    # Logging
    log_level: str = Field("WARNING", validation_alias="GIT_FORGE_LOG_LEVEL")
    # Empty means console only.
    log_file: str = Field("", validation_alias="GIT_FORGE_LOG_FILE")


_settings: Settings | None = None


def get_settings() -> Settings:
    """Singleton accessor."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings
    _settings = None
