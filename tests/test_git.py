"""Tests for the local git plumbing (real repositories in tmp_path)."""

import subprocess
from unittest.mock import patch

import pytest

from git_forge.core.errors import GitError
from git_forge.infra import git


def _git(cwd, *args):
    return subprocess.run(["git", *args], cwd=str(cwd), capture_output=True, text=True, check=True).stdout.strip()


def _init_repo(path, branch="main"):
    path.mkdir(parents=True, exist_ok=True)
    _git(path, "init")
    _git(path, "symbolic-ref", "HEAD", f"refs/heads/{branch}")
    _git(path, "config", "user.email", "test@test")
    _git(path, "config", "user.name", "test")
    _git(path, "config", "commit.gpgsign", "false")
    (path / "README.md").write_text("# Test Repo")
    _git(path, "add", "-A")
    _git(path, "commit", "-m", "init")
    return path


@pytest.fixture
def git_repo(tmp_path):
    """Create a minimal git repo on ``main`` for testing."""
    return _init_repo(tmp_path / "repo")


@pytest.fixture
def cloned_repo(tmp_path):
    """A clone of an upstream repo that carries a ``refs/pull/1/head`` ref."""
    upstream = _init_repo(tmp_path / "upstream")
    _git(upstream, "checkout", "-b", "feature")
    (upstream / "feature.txt").write_text("feature")
    _git(upstream, "add", "-A")
    _git(upstream, "commit", "-m", "feature")
    _git(upstream, "update-ref", "refs/pull/1/head", "HEAD")
    _git(upstream, "checkout", "main")
    clone = tmp_path / "clone"
    _git(tmp_path, "clone", str(upstream), str(clone))
    return clone


class TestQueries:
    def test_current_branch(self, git_repo):
        assert git.get_current_branch(cwd=git_repo) == "main"

    def test_detached_head_is_empty(self, git_repo):
        _git(git_repo, "checkout", "--detach")
        assert git.get_current_branch(cwd=git_repo) == ""

    def test_repo_root_from_subdirectory(self, git_repo):
        sub = git_repo / "src" / "pkg"
        sub.mkdir(parents=True)
        assert git.get_repo_root(cwd=sub).resolve() == git_repo.resolve()

    def test_rev_parse_head(self, git_repo):
        sha = git.rev_parse("HEAD", cwd=git_repo)
        assert sha == _git(git_repo, "rev-parse", "HEAD")
        assert len(sha) == 40

    def test_rev_parse_unknown_raises(self, git_repo):
        with pytest.raises(GitError) as exc_info:
            git.rev_parse("no-such-ref", cwd=git_repo)
        assert "rev-parse" in exc_info.value.command

    def test_missing_remote_raises(self, git_repo):
        with pytest.raises(GitError) as exc_info:
            git.get_remote_url("origin", cwd=git_repo)
        assert exc_info.value.command == "git remote get-url origin"
        assert exc_info.value.git_exit_code != 0

    def test_remote_url(self, git_repo):
        _git(git_repo, "remote", "add", "upstream", "git@github.com:owner/repo.git")
        assert git.get_remote_url("upstream", cwd=git_repo) == "git@github.com:owner/repo.git"

    def test_branch_exists(self, git_repo):
        assert git.branch_exists("main", cwd=git_repo)
        assert not git.branch_exists("nope", cwd=git_repo)


class TestDefaultBranch:
    def test_remote_head_wins(self, tmp_path):
        upstream = _init_repo(tmp_path / "upstream", branch="trunk")
        clone = tmp_path / "clone"
        _git(tmp_path, "clone", str(upstream), str(clone))
        assert git.get_default_branch("origin", cwd=clone) == "trunk"

    def test_falls_back_to_main(self, git_repo):
        assert git.get_default_branch("origin", cwd=git_repo) == "main"

    def test_falls_back_to_master(self, tmp_path):
        repo = _init_repo(tmp_path / "repo", branch="master")
        assert git.get_default_branch("origin", cwd=repo) == "master"

    def test_nothing_found_raises(self, tmp_path):
        repo = _init_repo(tmp_path / "repo", branch="develop")
        with pytest.raises(GitError, match="Failed to determine default branch"):
            git.get_default_branch("origin", cwd=repo)


class TestMutations:
    def test_fetch_pr_ref_and_checkout(self, cloned_repo):
        git.fetch_ref("pull/1/head", "pr-1", "origin", cwd=cloned_repo)
        git.checkout_branch("pr-1", cwd=cloned_repo)
        assert git.get_current_branch(cwd=cloned_repo) == "pr-1"
        assert (cloned_repo / "feature.txt").exists()

    def test_fetch_unknown_ref_raises(self, cloned_repo):
        with pytest.raises(GitError):
            git.fetch_ref("pull/99/head", "pr-99", "origin", cwd=cloned_repo)

    def test_push_sets_upstream(self, tmp_path, git_repo):
        bare = tmp_path / "remote.git"
        _git(tmp_path, "init", "--bare", str(bare))
        _git(git_repo, "remote", "add", "origin", str(bare))
        _git(git_repo, "checkout", "-b", "feature/x")
        git.push_branch("feature/x", "origin", cwd=git_repo)
        assert "refs/heads/feature/x" in _git(git_repo, "ls-remote", "origin")
        assert _git(git_repo, "rev-parse", "--abbrev-ref", "feature/x@{upstream}") == "origin/feature/x"


class TestRunGit:
    def test_timeout_is_git_error(self):
        with patch("git_forge.infra.git.subprocess.run", side_effect=subprocess.TimeoutExpired("git", 1)):
            with pytest.raises(GitError, match="timed out"):
                git._run_git(["status"])

    def test_missing_executable_is_git_error(self):
        with patch("git_forge.infra.git.subprocess.run", side_effect=FileNotFoundError("git")):
            with pytest.raises(GitError, match="not found on PATH") as exc_info:
                git._run_git(["status"])
        assert isinstance(exc_info.value.cause, FileNotFoundError)

    def test_failure_message_includes_stderr(self, tmp_path):
        with pytest.raises(GitError) as exc_info:
            git._run_git(["log"], cwd=tmp_path)
        assert exc_info.value.message.startswith("Git command failed: git log")
        assert exc_info.value.hint
