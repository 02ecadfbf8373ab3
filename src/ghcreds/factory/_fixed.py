from __future__ import annotations

from ..exceptions import ConfigurationError
from ._models import BearerToken

__all__ = ["FixedTokenFactory"]


class FixedTokenFactory:
    """Token factory that hands out a token supplied from outside.

    No request is ever made to GitHub and no expiration is tracked.

    Parameters
    ----------
    token
        The pre-issued GitHub token.

    Raises
    ------
    ConfigurationError
        Raised if the token is empty.
    """

    def __init__(self, token: str) -> None:
        if not token:
            raise ConfigurationError("GitHub token is empty")
        self._token = BearerToken(value=token)

    async def get_access_token(self) -> BearerToken:
        """Return the wrapped token."""
        return self._token

    def invalidate(self) -> None:
        """Do nothing, since there is no way to obtain another token."""
