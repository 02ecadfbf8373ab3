"""Pydantic models for GitHub v3 REST API resources used by ghcreds."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

from ..pydantic import UtcDatetime

__all__ = [
    "GitHubInstallationTokenModel",
    "GitHubRepositorySelection",
]


class GitHubRepositorySelection(StrEnum):
    """Which repositories an installation access token can reach."""

    all = "all"
    selected = "selected"


class GitHubInstallationTokenModel(BaseModel):
    """A Pydantic model for the response to creating an installation access
    token.

    https://docs.github.com/en/rest/apps/apps#create-an-installation-access-token-for-an-app
    """

    token: str = Field(
        title="Installation access token",
        min_length=1,
        repr=False,
    )

    expires_at: UtcDatetime = Field(
        title="Expiration", description="When the token stops working."
    )

    permissions: dict[str, str] = Field(
        default_factory=dict,
        title="Permissions",
        description="Permissions granted to the token.",
        examples=[{"contents": "write", "metadata": "read"}],
    )

    repository_selection: GitHubRepositorySelection | None = Field(
        None, title="Repository selection"
    )
