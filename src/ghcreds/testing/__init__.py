"""Test helpers for code that obtains GitHub App installation tokens."""

from ._github import MockGitHubApp, mock_github_app

__all__ = ["MockGitHubApp", "mock_github_app"]
