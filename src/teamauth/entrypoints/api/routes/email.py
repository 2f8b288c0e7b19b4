"""Email/password sign-in, registration and token refresh."""

from typing import Annotated

from fastapi import APIRouter, Request, Security, status
from fastapi.responses import PlainTextResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from pydantic import EmailStr, Field

from teamauth.core import links
from teamauth.core.auth.types import AuthSource, WireModel
from teamauth.core.exceptions import AuthenticationFailure, CredentialsRejected
from teamauth.entrypoints.api.deps import GatewayDep, ProvidersDep
from teamauth.entrypoints.api.representations import token_response

router = APIRouter(prefix="/email", tags=["email"])

basic_scheme = HTTPBasic(auto_error=False, realm="teamauth")


class CreateUserRequest(WireModel):
    """Registration request body."""

    email: EmailStr
    password: str = Field(..., min_length=1)
    first_name: str | None = None
    last_name: str | None = None
    avatar_url: str | None = None


@router.get("/auth", response_class=PlainTextResponse)
async def email_auth(
    providers: ProvidersDep,
    gateway: GatewayDep,
    credentials: Annotated[HTTPBasicCredentials | None, Security(basic_scheme)],
) -> PlainTextResponse:
    """Exchange HTTP Basic email/password credentials for a token.

    Raises:
        CredentialsRejected: If credentials are missing or wrong.
    """
    if credentials is None:
        raise CredentialsRejected("Missing credentials")

    try:
        user = await providers.email.authenticate(credentials.username, credentials.password)
    except AuthenticationFailure as e:
        raise CredentialsRejected(str(e)) from None

    return token_response(gateway.issue(user, AuthSource.EMAIL))


@router.get("/refresh-token", response_class=PlainTextResponse)
async def refresh_token(request: Request, gateway: GatewayDep) -> PlainTextResponse:
    """Reissue an email session token after re-checking the user."""
    token = await gateway.refresh(request.headers, AuthSource.EMAIL)
    return token_response(token)


@router.post("/users", status_code=status.HTTP_201_CREATED, response_class=PlainTextResponse)
async def create_user(
    body: CreateUserRequest,
    providers: ProvidersDep,
    gateway: GatewayDep,
) -> PlainTextResponse:
    """Register an email user in a new organization and sign them in.

    Returns:
        201 with the new user's location and a token.
    """
    user = await providers.email.register(
        email=body.email,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
        avatar_url=body.avatar_url,
    )
    return token_response(
        gateway.issue(user, AuthSource.EMAIL),
        status_code=status.HTTP_201_CREATED,
        location=links.user_url(user.org_id, user.user_id),
    )
