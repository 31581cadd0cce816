"""TSV / JSON rendering of issues and pull requests."""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence

from git_forge.core.errors import ArgumentError
from git_forge.infra.forge import Issue, Pr

ISSUE_COLUMNS: tuple[str, ...] = ("id", "title", "state", "labels", "author", "created", "updated", "url")
PR_COLUMNS: tuple[str, ...] = ISSUE_COLUMNS + ("source", "target", "draft")


def escape_tsv(value: object) -> str:
    """Flatten tabs and newlines so a value stays inside one TSV cell."""
    return " ".join(str(value).replace("\t", " ").splitlines()).strip()


def _iso(value) -> str:
    return value.isoformat() if value is not None else ""


_CELL: dict[str, Callable[[Issue], str]] = {
    "id": lambda item: item.id,
    "title": lambda item: escape_tsv(item.title),
    "state": lambda item: item.state,
    "labels": lambda item: escape_tsv(",".join(item.labels)),
    "author": lambda item: escape_tsv(item.author),
    "created": lambda item: _iso(item.created_at),
    "updated": lambda item: _iso(item.updated_at),
    "url": lambda item: item.url,
    "source": lambda item: item.source_branch,  # type: ignore[attr-defined]
    "target": lambda item: item.target_branch,  # type: ignore[attr-defined]
    "draft": lambda item: "true" if item.draft else "false",  # type: ignore[attr-defined]
}


def parse_columns(value: str | None, allowed: Sequence[str]) -> list[str] | None:
    """Split ``--columns`` and validate each name against *allowed*."""
    if value is None:
        return None
    columns = [c.strip() for c in value.split(",") if c.strip()]
    for column in columns:
        if column not in allowed:
            raise ArgumentError(
                f"Invalid column name: {column}. Allowed: {', '.join(allowed)}",
                flag="columns",
            )
    return columns or None


def format_tsv(items: Sequence[Issue], columns: list[str] | None = None) -> str:
    """Render *items* one per line.

    Default row: ``<id> <title>\\t<url>``; with *columns*, the named cells
    separated by tabs.
    """
    if not columns:
        return "\n".join(f"{item.id} {escape_tsv(item.title)}\t{item.url}" for item in items)
    return "\n".join("\t".join(_CELL[column](item) for column in columns) for item in items)


def format_json(items: Sequence[Issue | Pr]) -> str:
    return json.dumps([item.model_dump(mode="json") for item in items], indent=2)
