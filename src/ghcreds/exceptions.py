"""Exceptions raised while obtaining and installing GitHub credentials."""

from __future__ import annotations

__all__ = [
    "ConfigurationError",
    "CredentialExchangeError",
    "CredentialWriteError",
    "DecodeError",
    "GitHubCredentialsError",
]


class GitHubCredentialsError(Exception):
    """Base class for all errors raised by ghcreds.

    The command-line interface converts any exception derived from this class
    into an error message and a non-zero exit status.
    """


class ConfigurationError(GitHubCredentialsError):
    """The configuration is missing or invalid.

    Always raised before any request is sent to GitHub.
    """


class DecodeError(ConfigurationError):
    """The serialized GitHub App secrets could not be decoded."""


class CredentialExchangeError(GitHubCredentialsError):
    """Exchanging the GitHub App identity for an access token failed.

    The underlying cause (signing failure, network failure, error response
    from GitHub, or malformed response) is available as ``__cause__``.

    Parameters
    ----------
    message
        Human-readable error message.
    installation_id
        GitHub App installation for which a token was requested.
    """

    def __init__(self, message: str, installation_id: int | None) -> None:
        super().__init__(message)
        self._installation_id = installation_id

    @property
    def installation_id(self) -> int | None:
        """The installation ID, or `None` if not known in this context."""
        return self._installation_id


class CredentialWriteError(GitHubCredentialsError):
    """The access token could not be written to its destination."""
