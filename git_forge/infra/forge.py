"""Unified forge interface: abstract protocol and shared data models.

All code that needs to talk to a forge (GitHub, GitLab, Gitea/Forgejo) goes
through a ``ForgeClient`` implementation.  Command code never branches on the
forge type; only :func:`~git_forge.infra.factory.create_forge` does.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from typing import Any, Literal, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 100
MAX_PER_PAGE = 100

WebUrlType = Literal["repository", "issues", "prs", "mrs"]
WEB_URL_TYPES: tuple[str, ...] = ("repository", "issues", "prs", "mrs")

IssueState = Literal["open", "closed", "all"]
PrState = Literal["open", "closed", "merged", "all"]


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


class Issue(BaseModel):
    """A forge issue, normalized across forges."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    state: str
    author: str = ""
    url: str = ""
    labels: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Pr(Issue):
    """A pull request (GitHub/Gitea) or merge request (GitLab)."""

    source_branch: str = ""
    target_branch: str = ""
    draft: bool = False
    mergeable: bool = False


class IssueFilters(BaseModel):
    """Filter criteria for :meth:`ForgeClient.list_issues`."""

    model_config = ConfigDict(frozen=True)

    state: IssueState = "open"
    labels: list[str] = Field(default_factory=list)
    author: str | None = None
    page: int = Field(DEFAULT_PAGE, ge=1)
    per_page: int = Field(DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE)


class PrFilters(BaseModel):
    """Filter criteria for :meth:`ForgeClient.list_prs`."""

    model_config = ConfigDict(frozen=True)

    state: PrState = "open"
    labels: list[str] = Field(default_factory=list)
    author: str | None = None
    draft: bool | None = None
    page: int = Field(DEFAULT_PAGE, ge=1)
    per_page: int = Field(DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE)


class CreatePrParams(BaseModel):
    """Payload for creating a pull / merge request."""

    title: str
    source_branch: str
    target_branch: str
    body: str = ""
    draft: bool = False


class CreateIssueParams(BaseModel):
    """Payload for creating an issue."""

    title: str
    body: str = ""
    labels: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class ForgeClient(Protocol):
    """Operations every forge adapter supports.

    ``GitHubClient``, ``GitLabClient`` and ``GiteaClient`` implement this
    protocol.  Callers should type-hint against ``ForgeClient``, not against a
    concrete implementation class.

    Listing methods send the requested page size to the API.  Filters the
    forge cannot apply server-side are applied to the fetched page afterwards,
    so a page may hold fewer than ``per_page`` results even when later pages
    contain more matches.
    """

    name: str

    def list_issues(self, filters: IssueFilters | None = None) -> list[Issue]:
        """List issues (never pull requests) matching *filters*.

        Raises:
            ForgeError: on any HTTP or parsing error.
            AuthenticationError: if the forge rejects the credentials.
        """
        ...

    def list_prs(self, filters: PrFilters | None = None) -> list[Pr]:
        """List pull requests matching *filters*."""
        ...

    def create_pr(self, params: CreatePrParams) -> Pr:
        """Open a pull request; the source branch must already be pushed."""
        ...

    def create_issue(self, params: CreateIssueParams) -> Issue:
        """Open an issue."""
        ...

    def get_web_url(self, type: WebUrlType = "repository") -> str:
        """Return the web URL of the repository or one of its list pages.

        ``"prs"`` and ``"mrs"`` are aliases.  No network call is made.
        """
        ...

    def get_pr_ref(self, pr_number: str | int) -> str:
        """Return the git ref that holds the head of pull request *pr_number*."""
        ...

    def get_issue_url(self, number: str | int) -> str:
        ...

    def get_pr_url(self, number: str | int) -> str:
        ...

    def get_commit_url(self, commit: str) -> str:
        ...

    def get_path_url(self, path: str, commit: str, line: int | None = None) -> str:
        ...

    def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        ...

    def __enter__(self) -> ForgeClient:
        ...

    def __exit__(self, *exc_info: object) -> None:
        ...


# ---------------------------------------------------------------------------
# Client-side filtering helpers
# ---------------------------------------------------------------------------

Row = dict[str, Any]
RowPredicate = Callable[[Row], bool]


def apply_predicates(rows: Iterable[Row], predicates: list[RowPredicate]) -> list[Row]:
    """Keep the raw API rows that satisfy every predicate.

    Filtering only removes rows, so adding a predicate can never grow the
    result.
    """
    return [row for row in rows if all(predicate(row) for predicate in predicates)]


def has_all_labels(wanted: Iterable[str], label_names: Callable[[Row], list[str]]) -> RowPredicate:
    """Predicate: every label in *wanted* is present on the row."""
    wanted_set = set(wanted)

    def _predicate(row: Row) -> bool:
        return wanted_set.issubset(label_names(row))

    return _predicate


def parse_dt(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp returned by a forge (``2024-01-02T03:04:05Z``)."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def has_title_prefix(title: str, prefixes: Iterable[str]) -> bool:
    """True when *title* starts with one of *prefixes* (case-insensitive)."""
    lowered = title.lstrip().lower()
    return any(lowered.startswith(prefix.lower()) for prefix in prefixes)
