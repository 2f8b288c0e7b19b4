"""Slack Web API client for sign-in with Slack."""

import logging
from typing import Any

import httpx

from teamauth.core.auth.providers import SlackIdentity
from teamauth.core.exceptions import AuthenticationFailure, ProviderUnavailable

logger = logging.getLogger(__name__)


class SlackClient:
    """Slack OAuth and identity calls.

    Handles the user sign-in flow:
    1. Exchange the OAuth code for a user access token
    2. Resolve the user's identity with that token
    3. Later, confirm the token is still honoured before reissuing a session

    Every call is bounded by ``timeout``; transport failures, timeouts and
    non-2xx responses surface as ProviderUnavailable and are not retried.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        api_url: str = "https://slack.com/api",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            client_id: Slack app client id.
            client_secret: Slack app client secret.
            api_url: Base URL of the Slack Web API.
            timeout: Seconds before a call is abandoned.
            transport: Optional transport override (tests).
        """
        self._client_id = client_id
        self._client_secret = client_secret
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def _call(
        self,
        method: str,
        *,
        data: dict[str, str] | None = None,
        token: str | None = None,
    ) -> dict[str, Any]:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(f"{self._api_url}/{method}", data=data, headers=headers)
                response.raise_for_status()
                payload: dict[str, Any] = response.json()
        except httpx.TimeoutException:
            logger.warning(f"slack_timeout: method={method}")
            raise ProviderUnavailable(f"Slack {method} timed out") from None
        except httpx.HTTPError as e:
            logger.warning(f"slack_call_failed: method={method}, error={e}")
            raise ProviderUnavailable(f"Slack {method} failed") from None
        except ValueError:
            raise ProviderUnavailable(f"Slack {method} returned malformed JSON") from None
        return payload

    async def exchange_code(self, code: str, redirect_uri: str) -> SlackIdentity:
        """Exchange an OAuth code for the signed-in user's identity.

        Args:
            code: Authorization code from the Slack callback.
            redirect_uri: Redirect URI used when the code was requested.

        Returns:
            The user's identity and access token.

        Raises:
            AuthenticationFailure: If Slack rejects the code.
            ProviderUnavailable: If Slack can't be reached.
        """
        grant = await self._call(
            "oauth.v2.access",
            data={
                "code": code,
                "redirect_uri": redirect_uri,
                "client_id": self._client_id,
                "client_secret": self._client_secret,
            },
        )
        authed_user = grant.get("authed_user") or {}
        access_token = authed_user.get("access_token")
        if not grant.get("ok") or not access_token:
            logger.info(f"slack_code_rejected: error={grant.get('error')}")
            raise AuthenticationFailure(grant.get("error") or "invalid_code")

        identity = await self._call("users.identity", token=access_token)
        if not identity.get("ok"):
            raise AuthenticationFailure(identity.get("error") or "identity_unavailable")

        user = identity.get("user") or {}
        team = identity.get("team") or {}
        if "id" not in user or "id" not in team:
            raise ProviderUnavailable("Slack users.identity response lacks user or team id")
        return SlackIdentity(
            slack_id=user["id"],
            team_id=team["id"],
            access_token=access_token,
            team_name=team.get("name"),
            name=user.get("name"),
            email=user.get("email"),
            avatar_url=user.get("image_192"),
        )

    async def valid_access_token(self, access_token: str) -> bool:
        """Whether Slack still honours the access token.

        Raises:
            ProviderUnavailable: If Slack can't be reached.
        """
        result = await self._call("auth.test", token=access_token)
        return bool(result.get("ok"))
