from __future__ import annotations

from typing import TypeAlias

import httpx
import structlog
from structlog.stdlib import BoundLogger

from ..config import CredentialsConfig
from ..exceptions import ConfigurationError
from ..github import GitHubAppClient
from ..secrets import decode_secrets
from ._exchanging import ExchangingTokenFactory
from ._fixed import FixedTokenFactory
from ._models import InstallationIdentity, TokenScope

__all__ = ["TokenFactory", "resolve_token_factory"]

TokenFactory: TypeAlias = FixedTokenFactory | ExchangingTokenFactory
"""Any source of GitHub access tokens.

Both variants provide ``get_access_token`` and ``invalidate``.
"""


def resolve_token_factory(
    config: CredentialsConfig,
    http_client: httpx.AsyncClient,
    logger: BoundLogger | None = None,
) -> TokenFactory:
    """Choose and construct the token factory for a configuration.

    A pre-issued GitHub token wins if one is configured. Otherwise the GitHub
    App secrets are decoded and paired with the installation ID. No request
    is sent to GitHub.

    Parameters
    ----------
    config
        The ghcreds configuration.
    http_client
        The httpx client used for any later token exchange.
    logger
        Logger to use. If not given, the ``ghcreds`` logger is used.

    Returns
    -------
    TokenFactory
        A `FixedTokenFactory` or an `ExchangingTokenFactory`.

    Raises
    ------
    ConfigurationError
        Raised if neither a token nor GitHub App secrets are configured, or
        if App secrets are configured without an installation ID.
    DecodeError
        Raised if the GitHub App secrets are malformed.
    """
    if not logger:
        logger = structlog.get_logger("ghcreds")

    github_token = config.github_token
    if github_token and github_token.get_secret_value():
        logger.debug("Using pre-issued GitHub token")
        return FixedTokenFactory(github_token.get_secret_value())

    if not config.secrets or not config.secrets.get_secret_value():
        msg = "Neither a GitHub token nor GitHub App secrets were provided"
        raise ConfigurationError(msg)
    secrets = decode_secrets(config.secrets.get_secret_value())
    if config.installation is None:
        msg = "A GitHub App installation ID is required to mint a token"
        raise ConfigurationError(msg)

    identity = InstallationIdentity(
        installation_id=config.installation,
        app_id=secrets.app_id,
        private_key=secrets.private_key,
    )
    client = GitHubAppClient(
        http_client, user_agent=config.user_agent, base_url=config.github_url
    )
    scope = TokenScope(
        repositories=tuple(config.repositories),
        permissions=dict(config.permissions),
    )
    logger.debug(
        "Using GitHub App identity",
        app_id=identity.app_id,
        installation_id=identity.installation_id,
    )
    return ExchangingTokenFactory(
        identity,
        client,
        scope=scope,
        safety_margin=config.safety_margin,
        timeout=config.timeout,
        logger=logger,
    )
