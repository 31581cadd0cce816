"""git-forge: one command surface for GitHub, GitLab and Gitea/Forgejo."""

__version__ = "0.4.0"
