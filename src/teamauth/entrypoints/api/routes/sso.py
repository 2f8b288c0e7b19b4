"""Sign-in with Slack endpoints."""

import logging
from typing import Any
from urllib.parse import urlencode

from fastapi import APIRouter, Request, status
from fastapi.responses import PlainTextResponse, RedirectResponse

from teamauth.core.auth.types import AuthSource
from teamauth.core.config import AuthConfig
from teamauth.core.exceptions import AuthenticationFailure, ProviderUnavailable
from teamauth.entrypoints.api.deps import ConfigDep, GatewayDep, ProvidersDep
from teamauth.entrypoints.api.representations import token_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sso", tags=["sso"])


def _login_redirect(config: AuthConfig, **params: str) -> RedirectResponse:
    """Send the browser back to the UI login page."""
    url = f"{config.ui_server_url.rstrip('/')}/login?{urlencode(params)}"
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


@router.get("/auth", response_model=None)
async def sso_callback(
    config: ConfigDep,
    providers: ProvidersDep,
    gateway: GatewayDep,
    code: str | None = None,
    error: str | None = None,
    test: str | None = None,
) -> RedirectResponse | dict[str, Any]:
    """Handle the OAuth callback from Slack.

    Exchanges the authorization code for the user's identity, creates or
    updates the user, and redirects to the UI with a new token. Failures
    redirect to the UI with the reason instead.

    Args:
        config: Service configuration.
        providers: Identity providers.
        gateway: Auth gateway that signs the token.
        code: Authorization code from Slack.
        error: Error reported by Slack (e.g. ``access_denied``).
        test: Any value short-circuits with a liveness document.
    """
    if test:
        return {"test": True, "ok": True}

    if error or not code:
        logger.info(f"Slack sign-in declined: {error or 'missing code'}")
        return _login_redirect(config, access=error or "denied")

    try:
        user, access_token = await providers.slack.authenticate(code)
    except AuthenticationFailure as e:
        logger.info(f"Slack sign-in rejected: {e}")
        return _login_redirect(config, access="denied")
    except ProviderUnavailable as e:
        logger.error(f"Slack sign-in failed: {e}")
        return _login_redirect(config, access="failed")

    token = gateway.issue(user, AuthSource.SLACK, user_token=access_token)
    logger.info(f"Slack sign-in for user: {user.user_id}")
    return _login_redirect(config, jwt=token)


@router.get("/refresh-token", response_class=PlainTextResponse)
async def refresh_token(request: Request, gateway: GatewayDep) -> PlainTextResponse:
    """Reissue a Slack session token after confirming Slack still honours it."""
    token = await gateway.refresh(request.headers, AuthSource.SLACK)
    return token_response(token)
