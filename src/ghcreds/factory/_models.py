"""Data types shared by the token factories."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta

__all__ = [
    "BearerToken",
    "InstallationIdentity",
    "TokenScope",
]


@dataclass(frozen=True, slots=True)
class BearerToken:
    """A bearer credential for GitHub.

    Attributes
    ----------
    value
        The token itself. Excluded from the ``repr`` so that it cannot leak
        into logs or tracebacks.
    expires_at
        When the token expires, or `None` for a token supplied from outside
        whose expiration is unknown. Such a token is treated as valid for the
        lifetime of the process.
    """

    value: str = field(repr=False)
    expires_at: datetime | None = None

    def is_fresh(self, now: datetime, safety_margin: timedelta) -> bool:
        """Whether the token can still be handed out at time ``now``."""
        if self.expires_at is None:
            return True
        return now < self.expires_at - safety_margin


@dataclass(frozen=True, slots=True)
class InstallationIdentity:
    """Everything needed to mint tokens for one GitHub App installation.

    Never sent to GitHub as a credential itself; only the JWT signed with
    ``private_key`` is.
    """

    installation_id: int
    """Numeric ID of the installation."""

    app_id: str
    """GitHub App ID, used as the JWT issuer."""

    private_key: str = field(repr=False)
    """PEM-encoded private key of the GitHub App."""


@dataclass(frozen=True, slots=True)
class TokenScope:
    """Optional narrowing of an installation access token.

    An empty scope requests the full set of repositories and permissions
    granted to the installation.
    """

    repositories: Sequence[str] = ()
    """Repository names (without owner) the token may access."""

    permissions: Mapping[str, str] = field(default_factory=dict)
    """Permission name to access level (``read`` or ``write``)."""

    def __bool__(self) -> bool:
        return bool(self.repositories or self.permissions)
