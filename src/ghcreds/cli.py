"""Command-line interface for ghcreds."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import click
import httpx
import structlog
from pydantic import ValidationError
from pydantic_settings import SettingsError

from . import __version__
from .asyncio import run_with_asyncio
from .config import CredentialsConfig
from .constants import DEFAULT_HTTP_TIMEOUT
from .exceptions import GitHubCredentialsError
from .factory import resolve_token_factory
from .logging import configure_logging
from .sink import CredentialFormat, write_credentials

__all__ = ["help", "install", "main"]


def _parse_permissions(
    ctx: click.Context, param: click.Parameter, value: tuple[str, ...]
) -> dict[str, str]:
    """Parse repeated ``NAME=ACCESS`` options into a mapping."""
    permissions = {}
    for permission in value:
        name, sep, access = permission.partition("=")
        if not sep or not name or not access:
            msg = f"{permission!r} is not of the form NAME=ACCESS"
            raise click.BadParameter(msg, ctx, param)
        permissions[name] = access
    return permissions


def _describe_validation_error(exc: ValidationError) -> str:
    errors = exc.errors(include_input=False, include_url=False)
    details = "; ".join(
        ".".join(str(p) for p in e["loc"]) + f": {e['msg']}" for e in errors
    )
    return f"Invalid configuration: {details}"


def _git_host(github_url: str) -> str:
    """Determine the git host corresponding to a GitHub API URL."""
    host = urlparse(github_url).hostname or "github.com"
    return host.removeprefix("api.")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, message="%(version)s")
def main() -> None:
    """Mint GitHub App installation tokens and install them for git."""


@main.command()
@click.argument("topic", default=None, required=False, nargs=1)
@click.pass_context
def help(ctx: click.Context, topic: str | None) -> None:
    """Show help for any command."""
    if not topic:
        if not ctx.parent:
            raise RuntimeError("help called without topic or parent")
        click.echo(ctx.parent.get_help())
        return
    if topic not in main.commands:
        raise click.UsageError(f"Unknown help topic {topic}", ctx)
    ctx.info_name = topic
    click.echo(main.commands[topic].get_help(ctx))


@main.command()
@click.option(
    "--installation",
    type=int,
    default=None,
    help="The GitHub App installation ID.",
)
@click.option(
    "--destination",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=(
        "The location to install git credentials.  Example:"
        " /workspace/.git-credentials"
    ),
)
@click.option(
    "--github-token",
    default=None,
    help="Short-lived GitHub token to install instead of minting one.",
)
@click.option(
    "--repository",
    "repositories",
    multiple=True,
    help="Restrict the token to this repository. May be repeated.",
)
@click.option(
    "--permission",
    "permissions",
    multiple=True,
    callback=_parse_permissions,
    help="Restrict the token to NAME=ACCESS. May be repeated.",
)
@click.option(
    "--format",
    "credential_format",
    type=click.Choice([f.value for f in CredentialFormat]),
    default=None,
    help="Write the bare token or a git-credential-store line.",
)
@run_with_asyncio
async def install(
    *,
    installation: int | None,
    destination: Path | None,
    github_token: str | None,
    repositories: tuple[str, ...],
    permissions: dict[str, str],
    credential_format: str | None,
) -> None:
    """Install a short-lived GitHub credential.

    Uses the GitHub token if one is given. Otherwise mints an installation
    access token from the GitHub App secrets in GHCREDS_SECRETS.
    """
    overrides: dict[str, Any] = {}
    if installation is not None:
        overrides["installation"] = installation
    if destination is not None:
        overrides["destination"] = destination
    if github_token is not None:
        overrides["github_token"] = github_token
    if repositories:
        overrides["repositories"] = list(repositories)
    if permissions:
        overrides["permissions"] = permissions
    if credential_format is not None:
        overrides["credential_format"] = credential_format
    try:
        config = CredentialsConfig(**overrides)
    except ValidationError as e:
        raise click.ClickException(_describe_validation_error(e)) from e
    except SettingsError as e:
        raise click.ClickException(f"Invalid configuration: {e!s}") from e

    configure_logging(
        name="ghcreds",
        profile=config.log_profile,
        log_level=config.log_level,
    )
    logger = structlog.get_logger("ghcreds")

    try:
        async with httpx.AsyncClient(
            timeout=DEFAULT_HTTP_TIMEOUT, follow_redirects=True
        ) as http_client:
            factory = resolve_token_factory(config, http_client, logger)
            token = await factory.get_access_token()
        write_credentials(
            token,
            config.destination,
            credential_format=config.credential_format,
            host=_git_host(config.github_url),
        )
    except GitHubCredentialsError as e:
        raise click.ClickException(str(e)) from e
    logger.info(
        "Installed GitHub credentials",
        destination=str(config.destination),
        credential_format=config.credential_format.value,
    )
