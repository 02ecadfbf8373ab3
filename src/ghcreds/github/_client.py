from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import gidgethub
import gidgethub.apps
import httpx
import jwt
from gidgethub.httpx import GitHubAPI
from pydantic import ValidationError

from ..exceptions import CredentialExchangeError
from .models import GitHubInstallationTokenModel

DEFAULT_GITHUB_URL = "https://api.github.com"
"""Base URL of the GitHub REST API."""

__all__ = ["DEFAULT_GITHUB_URL", "GitHubAppClient"]


class GitHubAppClient:
    """Client for the GitHub App authentication endpoints.

    Performs the HTTPS exchange of a signed app JWT for an installation
    access token. Transport concerns (TLS, connection pooling, per-request
    timeouts) belong to the provided httpx client. No retries are done here.

    Parameters
    ----------
    http_client
        The httpx client.
    user_agent
        Identifies the caller in the user agent string, as GitHub requires.
    base_url
        Base URL of the GitHub REST API.

    Notes
    -----
    Gidgethub treats the application ID and installation ID as strings, but
    GitHub's API returns them as integers. This class expects installation
    IDs to be integers and converts them to strings when calling Gidgethub.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        user_agent: str,
        base_url: str = DEFAULT_GITHUB_URL,
    ) -> None:
        self._http_client = http_client
        self._user_agent = user_agent
        self._base_url = base_url.rstrip("/")

    def get_app_jwt(
        self,
        *,
        app_id: str,
        private_key: str,
        installation_id: int | None = None,
    ) -> str:
        """Create the GitHub App's JWT.

        This token is for authenticating as the GitHub App itself, as opposed
        to an installation of the app. It is valid for ten minutes.

        Parameters
        ----------
        app_id
            The GitHub App ID, used as the JWT issuer.
        private_key
            PEM-encoded private key of the GitHub App.
        installation_id
            Installation the JWT will be exchanged for, if known. Only used
            to identify the installation in any raised error.

        Returns
        -------
        str
            The JWT.

        Raises
        ------
        CredentialExchangeError
            Raised if the private key cannot be used to sign the JWT.
        """
        try:
            return gidgethub.apps.get_jwt(
                app_id=app_id, private_key=private_key
            )
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            msg = (
                f"Cannot sign JWT for GitHub App {app_id}:"
                f" {type(e).__name__}"
            )
            raise CredentialExchangeError(msg, installation_id) from e

    def _create_client(self) -> GitHubAPI:
        return GitHubAPI(
            self._http_client, self._user_agent, base_url=self._base_url
        )

    async def create_installation_token(
        self,
        installation_id: int,
        *,
        app_jwt: str,
        repositories: Sequence[str] | None = None,
        permissions: Mapping[str, str] | None = None,
    ) -> GitHubInstallationTokenModel:
        """Exchange the app JWT for an installation access token.

        Parameters
        ----------
        installation_id
            The installation ID. This can be retrieved from the
            ``installation.id`` field of a webhook payload or from the
            ``id`` field of the ``GET "/repos/{owner}/{repo}/installation"``
            GitHub endpoint.
        app_jwt
            JWT from `get_app_jwt`.
        repositories
            If given, restrict the token to these repositories (names without
            the owner prefix).
        permissions
            If given, restrict the token to these permissions, as a mapping
            of permission name to ``read`` or ``write``.

        Returns
        -------
        GitHubInstallationTokenModel
            The token and its expiration.

        Raises
        ------
        CredentialExchangeError
            Raised on network failure, a non-success response from GitHub, or
            a response that doesn't contain a token and expiration.
        """
        body: dict[str, Any] = {}
        if repositories:
            body["repositories"] = list(repositories)
        if permissions:
            body["permissions"] = dict(permissions)

        client = self._create_client()
        try:
            data = await client.post(
                "/app/installations/{installation_id}/access_tokens",
                url_vars={"installation_id": str(installation_id)},
                data=body or b"",
                jwt=app_jwt,
            )
        except gidgethub.HTTPException as e:
            msg = (
                f"GitHub returned status {int(e.status_code)} creating token"
                f" for installation {installation_id}"
            )
            if str(e):
                msg += f": {e!s}"
            raise CredentialExchangeError(msg, installation_id) from e
        except gidgethub.GitHubException as e:
            msg = f"GitHub token request for installation {installation_id}"
            raise CredentialExchangeError(
                f"{msg} failed: {e!s}", installation_id
            ) from e
        except httpx.HTTPError as e:
            msg = (
                "Cannot reach GitHub to create token for installation"
                f" {installation_id}: {type(e).__name__}"
            )
            if str(e):
                msg += f": {e!s}"
            raise CredentialExchangeError(msg, installation_id) from e
        except ValueError as e:
            msg = (
                "GitHub returned invalid JSON for installation"
                f" {installation_id}"
            )
            raise CredentialExchangeError(msg, installation_id) from e

        try:
            return GitHubInstallationTokenModel.model_validate(data)
        except ValidationError as e:
            msg = (
                "GitHub returned a malformed token response for installation"
                f" {installation_id}"
            )
            raise CredentialExchangeError(msg, installation_id) from e
