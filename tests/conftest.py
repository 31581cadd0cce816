"""Shared fixtures: isolate every test from the caller's tokens and settings."""

from __future__ import annotations

import logging

import pytest

import git_forge.core.logging as forge_logging
from git_forge.core.config import reset_settings

_ENV_VARS = (
    "GITHUB_TOKEN",
    "GITLAB_TOKEN",
    "GITEA_TOKEN",
    "GIT_FORGE_LOG_LEVEL",
    "GIT_FORGE_LOG_FILE",
    "GIT_FORGE_HTTP_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by setup_logging() so each test starts unconfigured."""
    yield
    logger = logging.getLogger("git_forge")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    forge_logging._configured = False
