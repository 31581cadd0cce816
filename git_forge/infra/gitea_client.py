"""Gitea / Forgejo forge client.

Implements :class:`~git_forge.infra.forge.ForgeClient` against the Gitea REST
API v1, which Forgejo (and Codeberg) serve unchanged.  Authentication uses the
``GITEA_TOKEN`` environment variable with Gitea's ``token`` scheme.

Filter placement:

=========  =====================  ======================================
Filter     Issues                 Pull requests
=========  =====================  ======================================
state      ``state``              ``state``; ``merged``/``closed`` split
                                  client-side on ``merged``
author     ``created_by``         client-side
labels     ``labels``             client-side (AND)
draft      n/a                    client-side
paging     ``page``, ``limit``    ``page``, ``limit``
=========  =====================  ======================================
"""

from __future__ import annotations

from typing import Any, Literal

from git_forge.core.logging import get_logger
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
    has_title_prefix,
    parse_dt,
)

logger = get_logger("infra.gitea")

DRAFT_PREFIX = "WIP: "

# Gitea's default WORK_IN_PROGRESS_PREFIXES.
_DRAFT_TITLE_PREFIXES = ("wip:", "[wip]")


def _label_names(data: dict[str, Any]) -> list[str]:
    return [lbl["name"] for lbl in data.get("labels") or []]


def _login(data: dict[str, Any]) -> str:
    return (data.get("user") or {}).get("login", "")


def _is_draft(data: dict[str, Any]) -> bool:
    return bool(data.get("draft")) or has_title_prefix(data.get("title", ""), _DRAFT_TITLE_PREFIXES)


class GiteaClient(BaseForgeClient):
    """Gitea / Forgejo REST API v1 client bound to one repository.

    Args:
        forge_name: ``"Gitea"`` or ``"Forgejo"``; only affects messages.
        **kwargs:   See :class:`~git_forge.infra.base_client.BaseForgeClient`.
    """

    token_env = "GITEA_TOKEN"
    auth_scheme = "token"

    def __init__(
        self,
        host: str,
        path: str,
        use_auth: bool = False,
        token: str = "",
        timeout: float = 30.0,
        forge_name: Literal["Gitea", "Forgejo"] = "Gitea",
        port: int | None = None,
        api_url: str | None = None,
    ) -> None:
        self.name = forge_name
        super().__init__(
            host, path, use_auth=use_auth, token=token, timeout=timeout, port=port, api_url=api_url
        )

    def _api_base(self) -> str:
        return f"https://{self.authority}/api/v1"

    def _repo_path(self) -> str:
        return f"/repos/{self.path}"

    # ------------------------------------------------------------------
    # Query building (server-side filters)
    # ------------------------------------------------------------------

    def _issue_query(self, filters: IssueFilters) -> dict[str, Any]:
        params: dict[str, Any] = {
            "state": filters.state,
            "page": filters.page,
            "limit": filters.per_page,
            "type": "issues",
        }
        if filters.author:
            params["created_by"] = filters.author
        if filters.labels:
            params["labels"] = ",".join(filters.labels)
        return params

    def _pr_query(self, filters: PrFilters) -> dict[str, Any]:
        state = "closed" if filters.state == "merged" else filters.state
        return {
            "state": state,
            "page": filters.page,
            "limit": filters.per_page,
        }

    # ------------------------------------------------------------------
    # Client-side filters (no server-side parameter exists)
    # ------------------------------------------------------------------

    def _pr_predicates(self, filters: PrFilters) -> list[RowPredicate]:
        predicates: list[RowPredicate] = []
        if filters.state == "merged":
            predicates.append(lambda pr: pr.get("merged") is True)
        elif filters.state == "closed":
            predicates.append(lambda pr: not pr.get("merged"))
        if filters.author:
            author = filters.author
            predicates.append(lambda pr: _login(pr) == author)
        if filters.labels:
            predicates.append(has_all_labels(filters.labels, _label_names))
        if filters.draft is not None:
            draft = filters.draft
            predicates.append(lambda pr: _is_draft(pr) is draft)
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
        return Pr(
            id=str(data["number"]),
            title=data.get("title", ""),
            state="merged" if data.get("merged") else data.get("state", ""),
            author=_login(data),
            url=data.get("html_url", ""),
            labels=_label_names(data),
            created_at=parse_dt(data.get("created_at")),
            updated_at=parse_dt(data.get("updated_at")),
            source_branch=(data.get("head") or {}).get("ref", ""),
            target_branch=(data.get("base") or {}).get("ref", ""),
            draft=_is_draft(data),
            mergeable=bool(data.get("mergeable")),
        )

    # ------------------------------------------------------------------
    # ForgeClient implementation
    # ------------------------------------------------------------------

    def list_issues(self, filters: IssueFilters | None = None) -> list[Issue]:
        """List issues.

        ``type=issues`` asks the server to leave out pull requests; rows that
        still carry a ``pull_request`` field are dropped as well.
        """
        filters = filters or IssueFilters()
        data = self._http.get_json(f"{self._repo_path()}/issues", params=self._issue_query(filters))
        return [self._issue_from_dict(item) for item in data if not item.get("pull_request")]

    def list_prs(self, filters: PrFilters | None = None) -> list[Pr]:
        filters = filters or PrFilters()
        data = self._http.get_json(f"{self._repo_path()}/pulls", params=self._pr_query(filters))
        return [self._pr_from_dict(item) for item in apply_predicates(data, self._pr_predicates(filters))]

    def create_pr(self, params: CreatePrParams) -> Pr:
        """Open a pull request; draftness is encoded as a ``"WIP: "`` title prefix."""
        self._require_auth("Creating a pull request")
        title = f"{DRAFT_PREFIX}{params.title}" if params.draft else params.title
        data = self._http.post_json(
            f"{self._repo_path()}/pulls",
            json={
                "title": title,
                "head": params.source_branch,
                "base": params.target_branch,
                "body": params.body,
            },
        )
        return self._pr_from_dict(data)

    def create_issue(self, params: CreateIssueParams) -> Issue:
        self._require_auth("Creating an issue")
        if params.labels:
            # The create endpoint takes label IDs, not names.
            logger.warning("%s: labels are not applied when creating issues: %s", self.name, ", ".join(params.labels))
        data = self._http.post_json(
            f"{self._repo_path()}/issues",
            json={"title": params.title, "body": params.body},
        )
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
        return f"{self.repo_web_url}/pulls/{number}"

    def get_commit_url(self, commit: str) -> str:
        return f"{self.repo_web_url}/commit/{commit}"

    def get_path_url(self, path: str, commit: str, line: int | None = None) -> str:
        url = f"{self.repo_web_url}/src/commit/{commit}/{path}"
        return f"{url}#L{line}" if line is not None else url
