"""Bearer token authentication dependency."""

from typing import Annotated

import structlog
from fastapi import Depends, Request

from teamauth.core.auth.gateway import AuthGateway
from teamauth.core.auth.types import TokenClaims
from teamauth.entrypoints.api.deps import get_gateway

logger = structlog.get_logger()


async def verify_jwt(
    request: Request,
    gateway: Annotated[AuthGateway, Depends(get_gateway)],
) -> TokenClaims:
    """Verify the bearer token and return its claims.

    Args:
        request: The current request.
        gateway: Auth gateway holding the signing passphrase.

    Returns:
        Trusted claims of the caller.

    Raises:
        AuthenticationFailure: If the token is missing, forged or expired.
    """
    claims = gateway.identify(request.headers)

    # Store in request state for downstream use
    request.state.user = claims

    logger.debug("jwt_verified", user_id=claims.user_id, org_id=claims.org_id)
    return claims


AuthDep = Annotated[TokenClaims, Depends(verify_jwt)]
