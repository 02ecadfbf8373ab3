"""Sources of GitHub access tokens."""

from ._exchanging import ExchangingTokenFactory
from ._fixed import FixedTokenFactory
from ._models import BearerToken, InstallationIdentity, TokenScope
from ._resolver import TokenFactory, resolve_token_factory

__all__ = [
    "BearerToken",
    "ExchangingTokenFactory",
    "FixedTokenFactory",
    "InstallationIdentity",
    "TokenFactory",
    "TokenScope",
    "resolve_token_factory",
]
