"""GitHub forge client.

Implements :class:`~git_forge.infra.forge.ForgeClient` against the GitHub REST
API v3 (``api.github.com`` or ``https://<host>/api/v3`` for GitHub
Enterprise).  Authentication uses a personal access token from the
``GITHUB_TOKEN`` environment variable.

Filter placement:

=========  ===================  ======================================
Filter     Issues               Pull requests
=========  ===================  ======================================
state      ``state``            ``state``; ``merged``/``closed`` split
                                client-side on ``merged_at``
author     ``creator``          client-side
labels     ``labels`` (AND)     client-side (AND)
draft      n/a                  client-side
=========  ===================  ======================================
"""

from __future__ import annotations

from typing import Any

from git_forge.infra.base_client import BaseForgeClient
from git_forge.infra.forge import (
    CreateIssueParams,
    CreatePrParams,
    Issue,
    IssueFilters,
    Pr,
    PrFilters,
    RowPredicate,
    WebUrlType,
    apply_predicates,
    has_all_labels,
    parse_dt,
)

_GITHUB_API = "https://api.github.com"

# ``mergeable_state`` values GitHub reports for a PR that can be merged.
_MERGEABLE_STATES = {"clean", "unstable", "has_hooks"}


def _label_names(data: dict[str, Any]) -> list[str]:
    return [lbl["name"] for lbl in data.get("labels") or []]


def _login(data: dict[str, Any]) -> str:
    return (data.get("user") or {}).get("login", "")


class GitHubClient(BaseForgeClient):
    """GitHub REST API v3 client bound to one repository."""

    name = "GitHub"
    token_env = "GITHUB_TOKEN"
    auth_scheme = "Bearer"

    def _api_base(self) -> str:
        if self.host == "github.com" and not self.port:
            return _GITHUB_API
        return f"https://{self.authority}/api/v3"

    def _default_headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _repo_path(self) -> str:
        return f"/repos/{self.path}"

    # ------------------------------------------------------------------
    # Query building (server-side filters)
    # ------------------------------------------------------------------

    def _issue_query(self, filters: IssueFilters) -> dict[str, Any]:
        params: dict[str, Any] = {
            "state": filters.state,
            "per_page": filters.per_page,
            "page": filters.page,
        }
        if filters.author:
            params["creator"] = filters.author
        if filters.labels:
            params["labels"] = ",".join(filters.labels)
        return params

    def _pr_query(self, filters: PrFilters) -> dict[str, Any]:
        # The pulls endpoint knows open/closed/all only; merged PRs are closed ones.
        state = "closed" if filters.state == "merged" else filters.state
        return {
            "state": state,
            "per_page": filters.per_page,
            "page": filters.page,
        }

    # ------------------------------------------------------------------
    # Client-side filters (no server-side parameter exists)
    # ------------------------------------------------------------------

    def _pr_predicates(self, filters: PrFilters) -> list[RowPredicate]:
        predicates: list[RowPredicate] = []
        if filters.state == "merged":
            predicates.append(lambda pr: pr.get("merged_at") is not None)
        elif filters.state == "closed":
            predicates.append(lambda pr: pr.get("merged_at") is None)
        if filters.author:
            author = filters.author
            predicates.append(lambda pr: _login(pr) == author)
        if filters.labels:
            predicates.append(has_all_labels(filters.labels, _label_names))
        if filters.draft is not None:
            draft = filters.draft
            predicates.append(lambda pr: bool(pr.get("draft")) is draft)
        return predicates

    # ------------------------------------------------------------------
    # Response mapping
    # ------------------------------------------------------------------

    def _issue_from_dict(self, data: dict[str, Any]) -> Issue:
        return Issue(
            id=str(data["number"]),
            title=data.get("title", ""),
            state=data.get("state", ""),
            author=_login(data),
            url=data.get("html_url", ""),
            labels=_label_names(data),
            created_at=parse_dt(data.get("created_at")),
            updated_at=parse_dt(data.get("updated_at")),
        )

    def _pr_from_dict(self, data: dict[str, Any]) -> Pr:
        merged = data.get("merged_at") is not None
        state = "merged" if merged else data.get("state", "")
        # The list endpoint omits ``mergeable``; only single-PR payloads carry it.
        mergeable = data.get("mergeable")
        if not isinstance(mergeable, bool):
            mergeable = data.get("mergeable_state") in _MERGEABLE_STATES
        return Pr(
            id=str(data["number"]),
            title=data.get("title", ""),
            state=state,
            author=_login(data),
            url=data.get("html_url", ""),
            labels=_label_names(data),
            created_at=parse_dt(data.get("created_at")),
            updated_at=parse_dt(data.get("updated_at")),
            source_branch=(data.get("head") or {}).get("ref", ""),
            target_branch=(data.get("base") or {}).get("ref", ""),
            draft=bool(data.get("draft")),
            mergeable=mergeable and state == "open",
        )

    # ------------------------------------------------------------------
    # ForgeClient implementation
    # ------------------------------------------------------------------

    def list_issues(self, filters: IssueFilters | None = None) -> list[Issue]:
        """List GitHub issues.

        See https://docs.github.com/en/rest/issues/issues#list-repository-issues
        """
        filters = filters or IssueFilters()
        data = self._http.get_json(f"{self._repo_path()}/issues", params=self._issue_query(filters))
        # GitHub returns PRs in the issues list; filter them out
        return [self._issue_from_dict(item) for item in data if "pull_request" not in item]

    def list_prs(self, filters: PrFilters | None = None) -> list[Pr]:
        """List GitHub pull requests.

        See https://docs.github.com/en/rest/pulls/pulls#list-pull-requests
        """
        filters = filters or PrFilters()
        data = self._http.get_json(f"{self._repo_path()}/pulls", params=self._pr_query(filters))
        return [self._pr_from_dict(item) for item in apply_predicates(data, self._pr_predicates(filters))]

    def create_pr(self, params: CreatePrParams) -> Pr:
        """Open a GitHub pull request; draftness is a native boolean field."""
        self._require_auth("Creating a pull request")
        data = self._http.post_json(
            f"{self._repo_path()}/pulls",
            json={
                "title": params.title,
                "head": params.source_branch,
                "base": params.target_branch,
                "body": params.body,
                "draft": params.draft,
            },
        )
        return self._pr_from_dict(data)

    def create_issue(self, params: CreateIssueParams) -> Issue:
        self._require_auth("Creating an issue")
        payload: dict[str, Any] = {"title": params.title, "body": params.body}
        if params.labels:
            payload["labels"] = params.labels
        data = self._http.post_json(f"{self._repo_path()}/issues", json=payload)
        return self._issue_from_dict(data)

    def get_web_url(self, type: WebUrlType = "repository") -> str:
        if type == "issues":
            return f"{self.repo_web_url}/issues"
        if type in ("prs", "mrs"):
            return f"{self.repo_web_url}/pulls"
        return self.repo_web_url

    def get_pr_ref(self, pr_number: str | int) -> str:
        return f"pull/{pr_number}/head"

    def get_issue_url(self, number: str | int) -> str:
        return f"{self.repo_web_url}/issues/{number}"

    def get_pr_url(self, number: str | int) -> str:
        return f"{self.repo_web_url}/pull/{number}"

    def get_commit_url(self, commit: str) -> str:
        return f"{self.repo_web_url}/commit/{commit}"

    def get_path_url(self, path: str, commit: str, line: int | None = None) -> str:
        url = f"{self.repo_web_url}/blob/{commit}/{path}"
        return f"{url}#L{line}" if line is not None else url
