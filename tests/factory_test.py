"""Tests for the token factories."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Mapping, Sequence
from datetime import timedelta

import httpx
import jwt
import pytest
import respx

from ghcreds.datetime import current_datetime
from ghcreds.exceptions import ConfigurationError, CredentialExchangeError
from ghcreds.factory import (
    BearerToken,
    ExchangingTokenFactory,
    FixedTokenFactory,
    InstallationIdentity,
    TokenScope,
)
from ghcreds.github import GitHubAppClient
from ghcreds.github.models import GitHubInstallationTokenModel
from ghcreds.testing import MockGitHubApp, mock_github_app

from .constants import APP_ID, INSTALLATION_ID

TOKEN_URL = (
    f"https://api.github.com/app/installations/{INSTALLATION_ID}"
    "/access_tokens"
)


def build_factory(
    http_client: httpx.AsyncClient,
    private_key: str,
    *,
    client_class: type[GitHubAppClient] = GitHubAppClient,
    scope: TokenScope | None = None,
    safety_margin: timedelta = timedelta(seconds=60),
    timeout: timedelta = timedelta(seconds=30),
) -> ExchangingTokenFactory:
    identity = InstallationIdentity(
        installation_id=INSTALLATION_ID, app_id=APP_ID, private_key=private_key
    )
    client = client_class(http_client, user_agent="ghcreds-test")
    return ExchangingTokenFactory(
        identity,
        client,
        scope=scope,
        safety_margin=safety_margin,
        timeout=timeout,
    )


@pytest.mark.asyncio
async def test_fixed() -> None:
    factory = FixedTokenFactory("ghp_xyz")
    for _ in range(5):
        token = await factory.get_access_token()
        assert token.value == "ghp_xyz"
        assert token.expires_at is None
    factory.invalidate()
    assert (await factory.get_access_token()).value == "ghp_xyz"

    with pytest.raises(ConfigurationError):
        FixedTokenFactory("")


@pytest.mark.asyncio
async def test_exchange(
    http_client: httpx.AsyncClient,
    private_key: str,
    public_key: str,
    respx_mock: respx.Router,
) -> None:
    mock = mock_github_app(respx_mock, INSTALLATION_ID, tokens=["ghs_abc"])
    factory = build_factory(http_client, private_key)

    token = await factory.get_access_token()
    assert token.value == "ghs_abc"
    assert token.expires_at
    assert token.expires_at > current_datetime(microseconds=True)
    assert "ghs_abc" not in repr(token)

    # Second call is served from the cache.
    assert await factory.get_access_token() == token
    assert mock.call_count == 1

    # The assertion is a JWT signed by the app key and issued by the app.
    claims = jwt.decode(mock.jwts[0], public_key, algorithms=["RS256"])
    assert claims["iss"] == APP_ID
    assert claims["exp"] <= time.time() + 600
    assert mock.issuers == [APP_ID]
    assert mock.bodies == [None]


@pytest.mark.asyncio
async def test_refresh(
    http_client: httpx.AsyncClient,
    private_key: str,
    mock_github: MockGitHubApp,
) -> None:
    mock_github.lifetime = timedelta(seconds=30)
    factory = build_factory(
        http_client, private_key, safety_margin=timedelta(seconds=60)
    )

    # Tokens that expire within the safety margin are never reused.
    first = await factory.get_access_token()
    second = await factory.get_access_token()
    assert first.value != second.value
    assert mock_github.call_count == 2

    # Once tokens live longer than the margin, caching resumes.
    mock_github.lifetime = timedelta(hours=1)
    third = await factory.get_access_token()
    assert await factory.get_access_token() == third
    assert mock_github.call_count == 3
    assert mock_github.minted == [first.value, second.value, third.value]


@pytest.mark.asyncio
async def test_invalidate(
    http_client: httpx.AsyncClient,
    private_key: str,
    mock_github: MockGitHubApp,
) -> None:
    factory = build_factory(http_client, private_key)
    first = await factory.get_access_token()
    factory.invalidate()
    second = await factory.get_access_token()
    assert first.value != second.value
    assert mock_github.call_count == 2


@pytest.mark.asyncio
async def test_concurrent(
    http_client: httpx.AsyncClient,
    private_key: str,
    mock_github: MockGitHubApp,
) -> None:
    factory = build_factory(http_client, private_key)
    tokens = await asyncio.gather(
        *(factory.get_access_token() for _ in range(10))
    )
    assert {t.value for t in tokens} == {"ghs_token1"}
    assert mock_github.call_count == 1


@pytest.mark.asyncio
async def test_scope(
    http_client: httpx.AsyncClient,
    private_key: str,
    mock_github: MockGitHubApp,
) -> None:
    scope = TokenScope(
        repositories=["googleapis"], permissions={"contents": "write"}
    )
    factory = build_factory(http_client, private_key, scope=scope)
    await factory.get_access_token()
    assert mock_github.bodies == [
        {"repositories": ["googleapis"], "permissions": {"contents": "write"}}
    ]


@pytest.mark.asyncio
@pytest.mark.respx(assert_all_called=False)
async def test_bad_private_key(
    http_client: httpx.AsyncClient, mock_github: MockGitHubApp
) -> None:
    factory = build_factory(http_client, "not a private key")
    with pytest.raises(CredentialExchangeError, match="sign") as excinfo:
        await factory.get_access_token()
    assert excinfo.value.installation_id == INSTALLATION_ID
    assert mock_github.call_count == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(401, json={"message": "Bad credentials"}),
        httpx.Response(404, json={"message": "Not Found"}),
        httpx.Response(500, text="Internal error"),
        httpx.Response(201, json={"expires_at": "2030-01-01T00:00:00Z"}),
        httpx.Response(201, json={"token": "ghs_abc", "expires_at": "soon"}),
        httpx.Response(201, json=["ghs_abc"]),
    ],
)
async def test_exchange_failure(
    http_client: httpx.AsyncClient,
    private_key: str,
    respx_mock: respx.Router,
    response: httpx.Response,
) -> None:
    route = respx_mock.post(TOKEN_URL)
    route.side_effect = [
        response,
        httpx.Response(
            201,
            json={"token": "ghs_abc", "expires_at": "2100-01-01T00:00:00Z"},
        ),
    ]
    factory = build_factory(http_client, private_key)

    with pytest.raises(CredentialExchangeError) as excinfo:
        await factory.get_access_token()
    assert excinfo.value.installation_id == INSTALLATION_ID
    assert excinfo.value.__cause__ is not None

    # Nothing was cached, so the next call tries again and succeeds.
    token = await factory.get_access_token()
    assert token.value == "ghs_abc"
    assert route.call_count == 2


@pytest.mark.asyncio
async def test_network_failure(
    http_client: httpx.AsyncClient,
    private_key: str,
    respx_mock: respx.Router,
) -> None:
    respx_mock.post(TOKEN_URL).mock(
        side_effect=httpx.ConnectError("Connection refused")
    )
    factory = build_factory(http_client, private_key)
    with pytest.raises(CredentialExchangeError) as excinfo:
        await factory.get_access_token()
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
    assert "Connection refused" in str(excinfo.value)


@pytest.mark.asyncio
async def test_expired_response(
    http_client: httpx.AsyncClient,
    private_key: str,
    mock_github: MockGitHubApp,
) -> None:
    mock_github.lifetime = timedelta(seconds=-10)
    factory = build_factory(http_client, private_key)
    with pytest.raises(CredentialExchangeError, match="expired"):
        await factory.get_access_token()


class SlowGitHubAppClient(GitHubAppClient):
    async def create_installation_token(
        self,
        installation_id: int,
        *,
        app_jwt: str,
        repositories: Sequence[str] | None = None,
        permissions: Mapping[str, str] | None = None,
    ) -> GitHubInstallationTokenModel:
        await asyncio.sleep(5)
        raise AssertionError("token request was not abandoned")


@pytest.mark.asyncio
async def test_timeout(
    http_client: httpx.AsyncClient, private_key: str
) -> None:
    factory = build_factory(
        http_client,
        private_key,
        client_class=SlowGitHubAppClient,
        timeout=timedelta(seconds=0.1),
    )
    with pytest.raises(CredentialExchangeError, match="timed out") as excinfo:
        await factory.get_access_token()
    assert isinstance(excinfo.value.__cause__, TimeoutError)


class HangOnceGitHubAppClient(GitHubAppClient):
    hung = False

    async def create_installation_token(
        self,
        installation_id: int,
        *,
        app_jwt: str,
        repositories: Sequence[str] | None = None,
        permissions: Mapping[str, str] | None = None,
    ) -> GitHubInstallationTokenModel:
        if not self.hung:
            self.hung = True
            await asyncio.sleep(60)
        return await super().create_installation_token(
            installation_id,
            app_jwt=app_jwt,
            repositories=repositories,
            permissions=permissions,
        )


@pytest.mark.asyncio
async def test_cancel(
    http_client: httpx.AsyncClient,
    private_key: str,
    mock_github: MockGitHubApp,
) -> None:
    factory = build_factory(
        http_client, private_key, client_class=HangOnceGitHubAppClient
    )
    task = asyncio.create_task(factory.get_access_token())
    await asyncio.sleep(0.1)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    # The cancelled request left nothing behind and the next call succeeds.
    token = await factory.get_access_token()
    assert token.value == "ghs_token1"
    assert mock_github.call_count == 1


def test_bearer_token_freshness() -> None:
    now = current_datetime()
    margin = timedelta(seconds=60)
    assert BearerToken(value="ghp_xyz").is_fresh(now, margin)
    token = BearerToken(value="ghs_abc", expires_at=now + timedelta(hours=1))
    assert token.is_fresh(now, margin)
    assert not token.is_fresh(now + timedelta(minutes=59), margin)
    assert not token.is_fresh(now + timedelta(hours=2), margin)
