"""Configuration for ghcreds."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_DESTINATION,
    DEFAULT_EXCHANGE_TIMEOUT,
    DEFAULT_SAFETY_MARGIN,
    DEFAULT_USER_AGENT,
)
from .github import DEFAULT_GITHUB_URL
from .logging import LogLevel, Profile
from .pydantic import HumanTimedelta
from .sink import CredentialFormat

__all__ = ["CredentialsConfig"]


class CredentialsConfig(BaseSettings):
    """Settings for obtaining and installing a GitHub credential.

    Every setting may be given as an environment variable with the prefix
    ``GHCREDS_``, such as ``GHCREDS_INSTALLATION`` or ``GHCREDS_SECRETS``.
    Command-line options take precedence.
    """

    model_config = SettingsConfigDict(
        env_prefix="GHCREDS_", case_sensitive=False
    )

    installation: int | None = Field(
        None,
        title="Installation ID",
        description="The GitHub App installation ID.",
        gt=0,
    )

    github_token: SecretStr | None = Field(
        None,
        title="GitHub token",
        description=(
            "Short-lived GitHub token. If set, it is installed as-is and the"
            " GitHub App secrets are not used."
        ),
    )

    secrets: SecretStr | None = Field(
        None,
        title="GitHub App secrets",
        description=(
            "JSON object with the GitHub App ID (``appId``) and private key"
            " (``privateKey``)."
        ),
    )

    destination: Path = Field(
        DEFAULT_DESTINATION,
        title="Credential destination",
        description="File to which the credential is written.",
    )

    credential_format: CredentialFormat = Field(
        CredentialFormat.token,
        title="Credential format",
        description="Either the bare token or a git-credential-store line.",
    )

    github_url: str = Field(
        DEFAULT_GITHUB_URL,
        title="GitHub API URL",
        description="Base URL of the GitHub REST API.",
    )

    repositories: list[str] = Field(
        default_factory=list,
        title="Repositories",
        description=(
            "Restrict minted tokens to these repositories. Empty means every"
            " repository of the installation."
        ),
    )

    permissions: dict[str, str] = Field(
        default_factory=dict,
        title="Permissions",
        description=(
            "Restrict minted tokens to these permissions, such as"
            ' ``{"contents": "read"}``. Empty means every permission granted'
            " to the installation."
        ),
    )

    safety_margin: HumanTimedelta = Field(
        DEFAULT_SAFETY_MARGIN,
        title="Refresh safety margin",
        description=(
            "A cached token is refreshed once it is this close to expiring."
        ),
        ge=timedelta(0),
    )

    timeout: HumanTimedelta = Field(
        DEFAULT_EXCHANGE_TIMEOUT,
        title="Token request timeout",
        description="Upper bound on the token exchange with GitHub.",
        gt=timedelta(0),
    )

    user_agent: str = Field(
        DEFAULT_USER_AGENT,
        title="User agent",
        description="User agent sent to GitHub.",
        min_length=1,
    )

    log_level: LogLevel = Field(
        LogLevel.INFO, title="Log level of the ghcreds logger"
    )

    log_profile: Profile = Field(
        Profile.development, title="Logging profile"
    )
