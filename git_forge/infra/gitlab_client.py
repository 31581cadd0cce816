"""GitLab forge client.

Implements :class:`~git_forge.infra.forge.ForgeClient` against the GitLab REST
API v4.  Works with both gitlab.com and self-hosted GitLab instances; the
project path is URL-encoded into ``/projects/<id>``.

Every filter GitLab needs has a server-side parameter, so this adapter applies
no client-side predicates.  Draft merge requests are created with a
``"Draft: "`` title prefix, which GitLab itself interprets as draft status.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from git_forge.infra.base_client import BaseForgeClient
from git_forge.infra.forge import (
    CreateIssueParams,
    CreatePrParams,
    Issue,
    IssueFilters,
    Pr,
    PrFilters,
    WebUrlType,
    has_title_prefix,
    parse_dt,
)

DRAFT_PREFIX = "Draft: "

# Title prefixes GitLab treats as draft markers.
_DRAFT_TITLE_PREFIXES = ("draft:", "[draft]", "(draft)", "wip:", "[wip]")

# GitLab spells the open state "opened".
_STATE_TO_API = {"open": "opened", "closed": "closed", "merged": "merged", "all": "all"}


def _encode_project(project_path: str) -> str:
    """URL-encode a project path (``group/subgroup/project`` → ``group%2Fsubgroup%2Fproject``)."""
    return quote(project_path, safe="")


def _normalise_state(state: str) -> str:
    return "open" if state == "opened" else state


def _username(data: dict[str, Any]) -> str:
    return (data.get("author") or {}).get("username", "")


class GitLabClient(BaseForgeClient):
    """GitLab REST API v4 client bound to one project."""

    name = "GitLab"
    token_env = "GITLAB_TOKEN"
    auth_scheme = "Bearer"

    def _api_base(self) -> str:
        return f"https://{self.authority}/api/v4"

    def _project_path(self) -> str:
        """Return ``/projects/encoded-path``."""
        return f"/projects/{_encode_project(self.path)}"

    # ------------------------------------------------------------------
    # Query building (server-side filters)
    # ------------------------------------------------------------------

    def _common_query(self, state: str, filters: IssueFilters | PrFilters) -> dict[str, Any]:
        params: dict[str, Any] = {
            "state": _STATE_TO_API[state],
            "per_page": filters.per_page,
            "page": filters.page,
        }
        if filters.author:
            params["author_username"] = filters.author
        if filters.labels:
            params["labels"] = ",".join(filters.labels)
        return params

    def _issue_query(self, filters: IssueFilters) -> dict[str, Any]:
        return self._common_query(filters.state, filters)

    def _mr_query(self, filters: PrFilters) -> dict[str, Any]:
        params = self._common_query(filters.state, filters)
        if filters.draft is not None:
            params["wip"] = "yes" if filters.draft else "no"
        return params

    # ------------------------------------------------------------------
    # Response mapping
    # ------------------------------------------------------------------

    def _issue_from_dict(self, data: dict[str, Any]) -> Issue:
        return Issue(
            id=str(data.get("iid", data.get("id", 0))),
            title=data.get("title", ""),
            state=_normalise_state(data.get("state", "")),
            author=_username(data),
            url=data.get("web_url", ""),
            labels=list(data.get("labels") or []),
            created_at=parse_dt(data.get("created_at")),
            updated_at=parse_dt(data.get("updated_at")),
        )

    def _mr_from_dict(self, data: dict[str, Any]) -> Pr:
        title = data.get("title", "")
        draft = bool(
            data.get("draft")
            or data.get("work_in_progress")
            or has_title_prefix(title, _DRAFT_TITLE_PREFIXES)
        )
        mergeable = (
            data.get("merge_status") == "can_be_merged"
            or data.get("detailed_merge_status") == "mergeable"
        )
        return Pr(
            id=str(data.get("iid", data.get("id", 0))),
            title=title,
            state=_normalise_state(data.get("state", "")),
            author=_username(data),
            url=data.get("web_url", ""),
            labels=list(data.get("labels") or []),
            created_at=parse_dt(data.get("created_at")),
            updated_at=parse_dt(data.get("updated_at")),
            source_branch=data.get("source_branch", ""),
            target_branch=data.get("target_branch", ""),
            draft=draft,
            mergeable=mergeable,
        )

    # ------------------------------------------------------------------
    # ForgeClient implementation
    # ------------------------------------------------------------------

    def list_issues(self, filters: IssueFilters | None = None) -> list[Issue]:
        """List GitLab issues for the project.

        GitLab has a dedicated issues endpoint, so no merge requests appear
        here.  See https://docs.gitlab.com/api/issues/#list-project-issues
        """
        filters = filters or IssueFilters()
        data = self._http.get_json(f"{self._project_path()}/issues", params=self._issue_query(filters))
        return [self._issue_from_dict(item) for item in data]

    def list_prs(self, filters: PrFilters | None = None) -> list[Pr]:
        """List GitLab merge requests.

        See https://docs.gitlab.com/api/merge_requests/#list-project-merge-requests
        """
        filters = filters or PrFilters()
        data = self._http.get_json(f"{self._project_path()}/merge_requests", params=self._mr_query(filters))
        return [self._mr_from_dict(item) for item in data]

    def create_pr(self, params: CreatePrParams) -> Pr:
        """Open a GitLab merge request.

        The API has no draft field; draftness is encoded as a title prefix.
        """
        self._require_auth("Creating a merge request")
        title = f"{DRAFT_PREFIX}{params.title}" if params.draft else params.title
        data = self._http.post_json(
            f"{self._project_path()}/merge_requests",
            json={
                "source_branch": params.source_branch,
                "target_branch": params.target_branch,
                "title": title,
                "description": params.body,
            },
        )
        return self._mr_from_dict(data)

    def create_issue(self, params: CreateIssueParams) -> Issue:
        self._require_auth("Creating an issue")
        payload: dict[str, Any] = {"title": params.title, "description": params.body}
        if params.labels:
            payload["labels"] = ",".join(params.labels)
        data = self._http.post_json(f"{self._project_path()}/issues", json=payload)
        return self._issue_from_dict(data)

    def get_web_url(self, type: WebUrlType = "repository") -> str:
        if type == "issues":
            return f"{self.repo_web_url}/-/issues"
        if type in ("prs", "mrs"):
            return f"{self.repo_web_url}/-/merge_requests"
        return self.repo_web_url

    def get_pr_ref(self, pr_number: str | int) -> str:
        return f"merge-requests/{pr_number}/head"

    def get_issue_url(self, number: str | int) -> str:
        return f"{self.repo_web_url}/-/issues/{number}"

    def get_pr_url(self, number: str | int) -> str:
        return f"{self.repo_web_url}/-/merge_requests/{number}"

    def get_commit_url(self, commit: str) -> str:
        return f"{self.repo_web_url}/-/commit/{commit}"

    def get_path_url(self, path: str, commit: str, line: int | None = None) -> str:
        url = f"{self.repo_web_url}/-/blob/{commit}/{path}"
        return f"{url}#L{line}" if line is not None else url
