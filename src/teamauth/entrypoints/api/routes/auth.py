"""Auth settings, uptime and debug token routes."""

from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from teamauth.entrypoints.api.deps import GatewayDep

router = APIRouter(tags=["auth"])


@router.get("/")
async def auth_settings(request: Request, gateway: GatewayDep) -> dict[str, Any]:
    """Provider settings for the caller.

    Anonymous callers (no token, or one that can't be trusted) get the public
    settings of every provider. Signed-in callers get the settings of the
    provider that issued their token.
    """
    return gateway.auth_settings(request.headers)


@router.get("/ping", response_class=PlainTextResponse)
async def ping() -> str:
    """Uptime check."""
    return "OK"


@router.get("/test-token")
async def test_token(gateway: GatewayDep) -> dict[str, Any]:
    """A short-lived debug token, with its verification and decoded claims."""
    return gateway.debug_token()
