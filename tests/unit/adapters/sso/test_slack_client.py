"""Tests for the Slack Web API client."""

from collections.abc import Callable
from typing import Any
from urllib.parse import parse_qs

import httpx
import pytest

from teamauth.adapters.sso.slack_client import SlackClient
from teamauth.core.exceptions import AuthenticationFailure, ProviderUnavailable

REDIRECT_URI = "http://auth.example.com/sso/auth"

GRANT = {"ok": True, "authed_user": {"id": "U0DAVE", "access_token": "xoxp-dave"}}
IDENTITY = {
    "ok": True,
    "user": {
        "id": "U0DAVE",
        "name": "Dave Dorsey",
        "email": "dave@example.org",
        "image_192": "https://avatars.example.org/dave_192.png",
    },
    "team": {"id": "T0OTHER", "name": "Other"},
}


def slack_api(responses: dict[str, Any], seen: list[httpx.Request] | None = None) -> SlackClient:
    """Client whose Slack methods answer from ``responses``."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        method = request.url.path.rsplit("/", 1)[-1]
        answer = responses[method]
        if isinstance(answer, httpx.Response):
            return answer
        if callable(answer):
            return answer(request)
        return httpx.Response(200, json=answer)

    return SlackClient(
        client_id="slack-client-id",
        client_secret="slack-client-secret",  # pragma: allowlist secret
        api_url="https://slack.example.com/api",
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )


def raising(exc: Exception) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc

    return handler


class TestExchangeCode:
    """Tests for exchange_code."""

    async def test_returns_identity(self) -> None:
        seen: list[httpx.Request] = []
        client = slack_api({"oauth.v2.access": GRANT, "users.identity": IDENTITY}, seen)

        identity = await client.exchange_code("code-1", REDIRECT_URI)

        assert identity.slack_id == "U0DAVE"
        assert identity.team_id == "T0OTHER"
        assert identity.access_token == "xoxp-dave"
        assert identity.team_name == "Other"
        assert identity.avatar_url == "https://avatars.example.org/dave_192.png"

        form = parse_qs(seen[0].content.decode())
        assert form["code"] == ["code-1"]
        assert form["redirect_uri"] == [REDIRECT_URI]
        assert form["client_id"] == ["slack-client-id"]
        assert seen[1].headers["authorization"] == "Bearer xoxp-dave"

    async def test_rejected_code(self) -> None:
        client = slack_api({"oauth.v2.access": {"ok": False, "error": "invalid_code"}})

        with pytest.raises(AuthenticationFailure, match="invalid_code"):
            await client.exchange_code("bad", REDIRECT_URI)

    async def test_identity_refused(self) -> None:
        client = slack_api(
            {
                "oauth.v2.access": GRANT,
                "users.identity": {"ok": False, "error": "missing_scope"},
            }
        )

        with pytest.raises(AuthenticationFailure):
            await client.exchange_code("code-1", REDIRECT_URI)

    async def test_incomplete_identity(self) -> None:
        client = slack_api(
            {"oauth.v2.access": GRANT, "users.identity": {"ok": True, "user": {"id": "U0DAVE"}}}
        )

        with pytest.raises(ProviderUnavailable):
            await client.exchange_code("code-1", REDIRECT_URI)

    async def test_timeout(self) -> None:
        client = slack_api({"oauth.v2.access": raising(httpx.ReadTimeout("timed out"))})

        with pytest.raises(ProviderUnavailable, match="timed out"):
            await client.exchange_code("code-1", REDIRECT_URI)

    async def test_server_error(self) -> None:
        client = slack_api({"oauth.v2.access": httpx.Response(503)})

        with pytest.raises(ProviderUnavailable):
            await client.exchange_code("code-1", REDIRECT_URI)

    async def test_malformed_json(self) -> None:
        client = slack_api({"oauth.v2.access": httpx.Response(200, content=b"<html>")})

        with pytest.raises(ProviderUnavailable):
            await client.exchange_code("code-1", REDIRECT_URI)


class TestValidAccessToken:
    """Tests for valid_access_token."""

    async def test_valid(self) -> None:
        seen: list[httpx.Request] = []
        client = slack_api({"auth.test": {"ok": True}}, seen)

        assert await client.valid_access_token("xoxp-dave") is True
        assert seen[0].headers["authorization"] == "Bearer xoxp-dave"

    async def test_revoked(self) -> None:
        client = slack_api({"auth.test": {"ok": False, "error": "token_revoked"}})

        assert await client.valid_access_token("xoxp-dave") is False

    async def test_unreachable(self) -> None:
        client = slack_api({"auth.test": raising(httpx.ConnectError("refused"))})

        with pytest.raises(ProviderUnavailable):
            await client.valid_access_token("xoxp-dave")
