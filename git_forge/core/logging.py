"""Centralized logging configuration for git-forge."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from git_forge.core.config import get_settings

_configured = False


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure the ``git_forge`` logger with a stderr handler. Idempotent.

    Stdout is reserved for command output, so the console handler writes to
    stderr.  A rotating file handler is added when ``GIT_FORGE_LOG_FILE`` is
    set.
    """
    global _configured
    logger = logging.getLogger("git_forge")
    if _configured:
        if verbose:
            logger.setLevel(logging.DEBUG)
        return logger

    settings = get_settings()
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.WARNING)
    logger.setLevel(level)
    logger.propagate = False

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(fmt)
    logger.addHandler(console)

    if settings.log_file:
        # Rotating, 1 MB × 3 backups
        log_path = Path(settings.log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path, maxBytes=1024 * 1024, backupCount=3, encoding="utf-8"
        )
        file_handler.setFormatter(fmt)
        logger.addHandler(file_handler)

    _configured = True
    logger.debug("Logging initialised (level=%s, file=%s)", logging.getLevelName(level), settings.log_file or "-")
    return logger


def get_logger(name: str = "git_forge") -> logging.Logger:
    """Get a child logger of ``git_forge``."""
    if name != "git_forge" and not name.startswith("git_forge."):
        name = f"git_forge.{name}"
    return logging.getLogger(name)
