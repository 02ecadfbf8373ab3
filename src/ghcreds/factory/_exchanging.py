from __future__ import annotations

import asyncio
from datetime import timedelta

import structlog
from structlog.stdlib import BoundLogger

from ..constants import DEFAULT_EXCHANGE_TIMEOUT, DEFAULT_SAFETY_MARGIN
from ..datetime import current_datetime, format_datetime_for_logging
from ..exceptions import CredentialExchangeError
from ..github import GitHubAppClient
from ._models import BearerToken, InstallationIdentity, TokenScope

__all__ = ["ExchangingTokenFactory"]


class ExchangingTokenFactory:
    """Token factory that mints installation access tokens on demand.

    A JWT signed with the GitHub App private key is exchanged for an
    installation access token, which is cached until it comes within
    ``safety_margin`` of its expiration. Calls are serialized with a lock, so
    concurrent callers that find the cache stale share a single exchange.

    Parameters
    ----------
    identity
        The installation to mint tokens for.
    client
        Client for the GitHub App authentication endpoints.
    scope
        Optional restriction of the repositories and permissions of each
        minted token.
    safety_margin
        A cached token is never returned once the current time is within
        this interval of its expiration.
    timeout
        Upper bound on signing plus the token request. The request is
        abandoned when it is exceeded.
    logger
        Logger to use. If not given, the ``ghcreds`` logger is used.
    """

    def __init__(
        self,
        identity: InstallationIdentity,
        client: GitHubAppClient,
        *,
        scope: TokenScope | None = None,
        safety_margin: timedelta = DEFAULT_SAFETY_MARGIN,
        timeout: timedelta = DEFAULT_EXCHANGE_TIMEOUT,
        logger: BoundLogger | None = None,
    ) -> None:
        self._identity = identity
        self._client = client
        self._scope = scope or TokenScope()
        self._safety_margin = safety_margin
        self._timeout = timeout
        if not logger:
            logger = structlog.get_logger("ghcreds")
        self._logger = logger.bind(
            installation_id=identity.installation_id, app_id=identity.app_id
        )
        self._token: BearerToken | None = None
        self._lock = asyncio.Lock()

    @property
    def identity(self) -> InstallationIdentity:
        """The installation for which tokens are minted."""
        return self._identity

    async def get_access_token(self) -> BearerToken:
        """Return a valid installation access token.

        Returns the cached token if it is not within the safety margin of its
        expiration, and otherwise mints and caches a new one.

        Returns
        -------
        BearerToken
            Installation access token with its expiration.

        Raises
        ------
        CredentialExchangeError
            Raised if a new token was needed and could not be obtained. The
            cache is left empty.
        """
        async with self._lock:
            now = current_datetime(microseconds=True)
            if self._token and self._token.is_fresh(now, self._safety_margin):
                self._logger.debug("Using cached installation token")
                return self._token
            self._token = None
            token = await self._exchange()
            self._token = token
            return token

    def invalidate(self) -> None:
        """Discard the cached token so that the next request mints anew."""
        self._token = None

    async def _exchange(self) -> BearerToken:
        """Sign a JWT and exchange it for an installation access token."""
        installation_id = self._identity.installation_id
        try:
            async with asyncio.timeout(self._timeout.total_seconds()):
                app_jwt = self._client.get_app_jwt(
                    app_id=self._identity.app_id,
                    private_key=self._identity.private_key,
                    installation_id=installation_id,
                )
                result = await self._client.create_installation_token(
                    installation_id,
                    app_jwt=app_jwt,
                    repositories=self._scope.repositories,
                    permissions=self._scope.permissions,
                )
        except TimeoutError as e:
            seconds = self._timeout.total_seconds()
            msg = (
                f"Token request for installation {installation_id} timed out"
                f" after {seconds:g}s"
            )
            raise CredentialExchangeError(msg, installation_id) from e

        now = current_datetime(microseconds=True)
        expires = format_datetime_for_logging(result.expires_at)
        if result.expires_at <= now:
            msg = (
                f"GitHub returned a token for installation {installation_id}"
                f" that expired at {expires}"
            )
            raise CredentialExchangeError(msg, installation_id)
        self._logger.info(
            "Minted installation token",
            expires_at=expires,
            repository_selection=result.repository_selection,
        )
        return BearerToken(value=result.token, expires_at=result.expires_at)
