"""Tests for remote URL parsing and forge-type detection."""

from __future__ import annotations

import pytest

from git_forge.core.errors import RemoteDetectionError
from git_forge.infra.remote import ForgeType, RemoteInfo, detect_forge_type, parse_remote_url


class TestParseRemoteUrl:

    @pytest.mark.parametrize(
        "url",
        [
            "git@github.com:owner/repo.git",
            "https://github.com/owner/repo.git",
            "https://github.com/owner/repo",
        ],
    )
    def test_three_spellings_agree(self, url):
        assert parse_remote_url(url) == RemoteInfo(host="github.com", path="owner/repo")

    def test_ssh_scheme_prefix(self):
        info = parse_remote_url("ssh://git@gitlab.com:group/project.git")
        assert info == RemoteInfo("gitlab.com", "group/project")

    def test_ssh_url_with_slash_separator(self):
        info = parse_remote_url("ssh://git@codeberg.org/owner/repo.git")
        assert info == RemoteInfo("codeberg.org", "owner/repo")

    def test_nested_group_path_kept(self):
        info = parse_remote_url("https://gitlab.com/group/sub/project.git")
        assert info.path == "group/sub/project"

    def test_trailing_slash_ignored(self):
        assert parse_remote_url("https://gitea.com/owner/repo/").path == "owner/repo"

    def test_http_port_kept_apart_from_host(self):
        info = parse_remote_url("https://gitea.local:3000/owner/repo.git")
        assert info == RemoteInfo("gitea.local", "owner/repo", port=3000)

    def test_ssh_url_with_port(self):
        info = parse_remote_url("ssh://git@gitea.example.com:2222/owner/repo.git")
        assert info.host == "gitea.example.com"
        assert info.path == "owner/repo"
        # the SSH daemon port is not the web port
        assert info.port is None

    def test_scp_style_never_has_a_port(self):
        assert parse_remote_url("git@gitea.example.com:owner/repo.git").port is None

    @pytest.mark.parametrize("url", ["not a url", "https://github.com", "", "/local/path/repo"])
    def test_unparseable_raises(self, url):
        with pytest.raises(RemoteDetectionError) as exc_info:
            parse_remote_url(url)
        assert exc_info.value.remote_url == url


class TestDetectForgeType:

    @pytest.mark.parametrize(
        "host, expected",
        [
            ("github.com", ForgeType.GITHUB),
            ("github.mycompany.com", ForgeType.GITHUB),
            ("gitlab.com", ForgeType.GITLAB),
            ("gitlab.example.com", ForgeType.GITLAB),
            ("gitea.io", ForgeType.GITEA),
            ("gitea.example.com", ForgeType.GITEA),
            ("codeberg.org", ForgeType.GITEA),
            ("forgejo.example.com", ForgeType.GITEA),
            ("GitHub.com", ForgeType.GITHUB),
        ],
    )
    def test_detection(self, host, expected):
        assert detect_forge_type(host) is expected

    def test_github_checked_before_gitlab(self):
        assert detect_forge_type("github-to-gitlab-mirror.example") is ForgeType.GITHUB

    def test_unknown_host_raises(self):
        with pytest.raises(RemoteDetectionError) as exc_info:
            detect_forge_type("example.com")
        assert "Unable to detect forge type" in str(exc_info.value)
        assert "--forge-type" in exc_info.value.hint
