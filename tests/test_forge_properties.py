"""Cross-forge behaviour that must hold for every adapter.

- a draft created through ``create_pr`` is listed by ``list_prs(draft=True)``
- client-side filtering only ever removes results
- ``get_web_url`` never touches the network
- a repository with 7 open issues and 2 open PRs lists exactly 7 issues
"""

from __future__ import annotations

import itertools
import json

import httpx
import pytest

from git_forge.infra.forge import CreatePrParams, IssueFilters, PrFilters
from git_forge.infra.gitea_client import GiteaClient
from git_forge.infra.github_client import GitHubClient
from git_forge.infra.gitlab_client import GitLabClient


# ═══════════════════════════════════════════════════════════════════════════
# Fake forge servers
# ═══════════════════════════════════════════════════════════════════════════

class _FakeGitHub:
    """Keeps created pull requests and serves them back, like the real API."""

    api = "https://api.github.com/repos/owner/repo/pulls"

    def __init__(self):
        self.prs: list[dict] = []

    def create(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        pr = {
            "number": len(self.prs) + 1,
            "title": body["title"],
            "state": "open",
            "draft": body.get("draft", False),
            "merged_at": None,
            "html_url": f"https://github.com/owner/repo/pull/{len(self.prs) + 1}",
            "head": {"ref": body["head"]},
            "base": {"ref": body["base"]},
            "user": {"login": "me"},
            "labels": [],
        }
        self.prs.append(pr)
        return httpx.Response(201, json=pr)

    def list(self, request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=self.prs)


class _FakeGitLab:
    """Stores merge requests; honours ``wip`` the way GitLab does (title prefix)."""

    api = "https://gitlab.com/api/v4/projects/owner%2Frepo/merge_requests"

    def __init__(self):
        self.mrs: list[dict] = []

    def create(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        mr = {
            "iid": len(self.mrs) + 1,
            "title": body["title"],
            "state": "opened",
            "web_url": f"https://gitlab.com/owner/repo/-/merge_requests/{len(self.mrs) + 1}",
            "source_branch": body["source_branch"],
            "target_branch": body["target_branch"],
            "author": {"username": "me"},
            "labels": [],
        }
        self.mrs.append(mr)
        return httpx.Response(201, json=mr)

    def list(self, request: httpx.Request) -> httpx.Response:
        wip = request.url.params.get("wip")
        rows = self.mrs
        if wip is not None:
            want = wip == "yes"
            rows = [mr for mr in rows if mr["title"].lower().startswith("draft:") is want]
        return httpx.Response(200, json=rows)


class _FakeGitea:
    """Stores pull requests; has no draft field at all."""

    api = "https://gitea.com/api/v1/repos/owner/repo/pulls"

    def __init__(self):
        self.prs: list[dict] = []

    def create(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        pr = {
            "number": len(self.prs) + 1,
            "title": body["title"],
            "state": "open",
            "merged": False,
            "html_url": f"https://gitea.com/owner/repo/pulls/{len(self.prs) + 1}",
            "head": {"ref": body["head"]},
            "base": {"ref": body["base"]},
            "user": {"login": "me"},
            "labels": [],
        }
        self.prs.append(pr)
        return httpx.Response(201, json=pr)

    def list(self, request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=self.prs)


_FORGES = [
    pytest.param(GitHubClient, "github.com", _FakeGitHub, id="github"),
    pytest.param(GitLabClient, "gitlab.com", _FakeGitLab, id="gitlab"),
    pytest.param(GiteaClient, "gitea.com", _FakeGitea, id="gitea"),
]


# ═══════════════════════════════════════════════════════════════════════════
# 1. Draft round trip
# ═══════════════════════════════════════════════════════════════════════════

class TestDraftRoundTrip:

    @pytest.mark.parametrize("client_cls, host, fake_cls", _FORGES)
    def test_created_draft_is_listed_as_draft(self, respx_mock, client_cls, host, fake_cls):
        fake = fake_cls()
        respx_mock.post(fake.api).mock(side_effect=fake.create)
        respx_mock.get(fake.api).mock(side_effect=fake.list)

        with client_cls(host, "owner/repo", use_auth=True, token="tok") as forge:
            forge.create_pr(CreatePrParams(title="ready", source_branch="a", target_branch="main"))
            created = forge.create_pr(
                CreatePrParams(title="draft work", source_branch="b", target_branch="main", draft=True)
            )
            drafts = forge.list_prs(PrFilters(draft=True))
            ready = forge.list_prs(PrFilters(draft=False))

        assert created.draft is True
        assert created.id in [pr.id for pr in drafts]
        assert all(pr.draft for pr in drafts)
        assert created.id not in [pr.id for pr in ready]


# ═══════════════════════════════════════════════════════════════════════════
# 2. Client-side filtering is monotonic
# ═══════════════════════════════════════════════════════════════════════════

_GITHUB_PRS = [
    {"number": n, "title": f"PR {n}", "state": state, "merged_at": merged_at, "draft": draft,
     "user": {"login": user}, "labels": [{"name": name} for name in labels]}
    for n, state, merged_at, draft, user, labels in [
        (1, "open", None, False, "alice", ["bug"]),
        (2, "open", None, True, "alice", ["bug", "ui"]),
        (3, "open", None, False, "bob", ["ui"]),
        (4, "open", None, True, "bob", []),
        (5, "open", None, False, "alice", ["bug", "ui", "p1"]),
    ]
]


class TestMonotonicFiltering:

    _base = dict(state="open", author=None, labels=[], draft=None)
    _extra = [("author", "alice"), ("labels", ["bug"]), ("draft", True), ("labels", ["bug", "ui"])]

    def _ids(self, forge, **filters) -> set[str]:
        return {pr.id for pr in forge.list_prs(PrFilters(**filters))}

    @pytest.mark.parametrize("field, value", _extra)
    def test_adding_a_filter_never_adds_results(self, respx_mock, field, value):
        respx_mock.get("https://api.github.com/repos/owner/repo/pulls").mock(
            return_value=httpx.Response(200, json=_GITHUB_PRS)
        )
        forge = GitHubClient("github.com", "owner/repo")
        unfiltered = self._ids(forge, **self._base)
        narrowed = self._ids(forge, **{**self._base, field: value})
        assert narrowed <= unfiltered

    def test_filter_combinations_are_nested(self, respx_mock):
        respx_mock.get("https://gitea.com/api/v1/repos/owner/repo/pulls").mock(
            return_value=httpx.Response(200, json=_GITHUB_PRS)
        )
        forge = GiteaClient("gitea.com", "owner/repo")
        for size in range(len(self._extra)):
            for combo in itertools.combinations(self._extra[:3], size):
                fewer = {**self._base, **dict(combo)}
                for field, value in self._extra[:3]:
                    if field in dict(combo):
                        continue
                    more = {**fewer, field: value}
                    assert self._ids(forge, **more) <= self._ids(forge, **fewer)


# ═══════════════════════════════════════════════════════════════════════════
# 3. Web URLs are pure
# ═══════════════════════════════════════════════════════════════════════════

class TestWebUrlPurity:

    @pytest.mark.parametrize("client_cls, host, fake_cls", _FORGES)
    def test_no_http_and_prs_equals_mrs(self, respx_mock, client_cls, host, fake_cls):
        forge = client_cls(host, "owner/repo")
        for kind in ("repository", "issues", "prs", "mrs"):
            assert forge.get_web_url(kind).startswith(f"https://{host}/owner/repo")
        assert forge.get_web_url("prs") == forge.get_web_url("mrs")
        assert forge.get_web_url() == f"https://{host}/owner/repo"
        assert not respx_mock.calls


# ═══════════════════════════════════════════════════════════════════════════
# 4. End-to-end: 7 open issues, 2 open PRs
# ═══════════════════════════════════════════════════════════════════════════

def _issue_rows(with_prs: bool) -> list[dict]:
    rows = [
        {"number": n, "title": f"Issue {n}", "state": "open", "user": {"login": "u"},
         "html_url": f"https://github.com/owner/repo/issues/{n}", "labels": []}
        for n in range(1, 8)
    ]
    if with_prs:
        rows += [
            {"number": n, "title": f"PR {n}", "state": "open", "user": {"login": "u"},
             "html_url": f"https://github.com/owner/repo/pull/{n}", "labels": [],
             "pull_request": {"url": f"https://api.github.com/repos/owner/repo/pulls/{n}"}}
            for n in (8, 9)
        ]
    return rows


def _github_pr_rows() -> list[dict]:
    return [
        {"number": n, "title": f"PR {n}", "state": "open", "draft": False, "merged_at": None,
         "html_url": f"https://github.com/owner/repo/pull/{n}", "user": {"login": "u"},
         "head": {"ref": f"feature-{n}"}, "base": {"ref": "main"}, "labels": []}
        for n in (8, 9)
    ]


class TestSevenOpenIssues:

    def test_github_lists_exactly_the_issues(self, respx_mock):
        issues_route = respx_mock.get("https://api.github.com/repos/owner/repo/issues").mock(
            return_value=httpx.Response(200, json=_issue_rows(with_prs=True))
        )
        respx_mock.get("https://api.github.com/repos/owner/repo/pulls").mock(
            return_value=httpx.Response(200, json=_github_pr_rows())
        )
        forge = GitHubClient("github.com", "owner/repo")

        issues = forge.list_issues(IssueFilters(state="all", per_page=100))
        params = issues_route.calls.last.request.url.params
        assert params["state"] == "all"
        assert params["per_page"] == "100"
        assert len(issues) == 7
        assert {issue.id for issue in issues} == {str(n) for n in range(1, 8)}
        assert all(issue.title.startswith("Issue") for issue in issues)
        assert all(issue.state == "open" for issue in issues)

        prs = forge.list_prs(PrFilters(state="all"))
        assert {pr.id for pr in prs} == {"8", "9"}
        assert not {issue.id for issue in issues} & {pr.id for pr in prs}

    def test_gitea_lists_exactly_the_issues(self, respx_mock):
        respx_mock.get("https://gitea.com/api/v1/repos/owner/repo/issues").mock(
            return_value=httpx.Response(200, json=_issue_rows(with_prs=True))
        )
        issues = GiteaClient("gitea.com", "owner/repo").list_issues()
        assert len(issues) == 7
