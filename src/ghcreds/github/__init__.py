"""GitHub App authentication client and Pydantic models."""

from ._client import DEFAULT_GITHUB_URL, GitHubAppClient

__all__ = ["DEFAULT_GITHUB_URL", "GitHubAppClient"]
