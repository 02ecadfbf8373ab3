"""Write access tokens where git can find them."""

from __future__ import annotations

import os
import tempfile
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

from .constants import GIT_CREDENTIAL_USERNAME
from .exceptions import CredentialWriteError

if TYPE_CHECKING:
    from .factory import BearerToken

__all__ = [
    "CredentialFormat",
    "format_credentials",
    "write_credentials",
]


class CredentialFormat(StrEnum):
    """How the token is written to its destination."""

    token = "token"
    """Only the token itself."""

    git = "git"
    """A line in the format read by ``git credential-store``."""


def format_credentials(
    token: BearerToken,
    credential_format: CredentialFormat = CredentialFormat.token,
    *,
    host: str = "github.com",
) -> str:
    """Render a token in the requested format.

    Parameters
    ----------
    token
        The token to render.
    credential_format
        The output format.
    host
        Host the credential is for, used by the ``git`` format.

    Returns
    -------
    str
        The contents to write.

    Raises
    ------
    CredentialWriteError
        Raised if the token is empty.
    """
    if not token.value:
        raise CredentialWriteError("Refusing to write an empty token")
    match credential_format:
        case CredentialFormat.token:
            return token.value
        case CredentialFormat.git:
            user = GIT_CREDENTIAL_USERNAME
            return f"https://{user}:{token.value}@{host}\n"


def write_credentials(
    token: BearerToken,
    destination: Path,
    *,
    credential_format: CredentialFormat = CredentialFormat.token,
    host: str = "github.com",
) -> None:
    """Write a token to a file readable only by the current user.

    The file is replaced atomically, so readers see either the old contents
    or the complete new credential.

    Parameters
    ----------
    token
        The token to write.
    destination
        Path of the file. Its parent directory must exist.
    credential_format
        The output format.
    host
        Host the credential is for, used by the ``git`` format.

    Raises
    ------
    CredentialWriteError
        Raised if the token is empty or the file cannot be written.
    """
    contents = format_credentials(token, credential_format, host=host)
    directory = destination.parent
    try:
        fd, tmp_name = tempfile.mkstemp(
            dir=directory, prefix=f".{destination.name}."
        )
    except OSError as e:
        msg = f"Cannot write credentials to {destination}: {e.strerror}"
        raise CredentialWriteError(msg) from e
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w") as f:
            f.write(contents)
        tmp_path.chmod(0o600)
        tmp_path.replace(destination)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        msg = f"Cannot write credentials to {destination}: {e.strerror}"
        raise CredentialWriteError(msg) from e
