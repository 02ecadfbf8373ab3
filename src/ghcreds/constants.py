"""Constants for ghcreds."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

__all__ = [
    "DEFAULT_DESTINATION",
    "DEFAULT_EXCHANGE_TIMEOUT",
    "DEFAULT_HTTP_TIMEOUT",
    "DEFAULT_SAFETY_MARGIN",
    "DEFAULT_USER_AGENT",
    "GIT_CREDENTIAL_USERNAME",
]

DEFAULT_DESTINATION = Path("/workspace/.git-credentials")
"""Where credentials are installed if no destination is given."""

DEFAULT_EXCHANGE_TIMEOUT = timedelta(seconds=30)
"""Upper bound on signing plus the installation token request."""

DEFAULT_HTTP_TIMEOUT = 20.0
"""Default timeout (in seconds) for each outbound HTTP operation."""

DEFAULT_SAFETY_MARGIN = timedelta(seconds=60)
"""How long before its expiration a cached token is considered stale."""

DEFAULT_USER_AGENT = "ghcreds"
"""User agent sent to GitHub, which rejects requests without one."""

GIT_CREDENTIAL_USERNAME = "x-access-token"
"""Username git must present along with an installation access token."""
