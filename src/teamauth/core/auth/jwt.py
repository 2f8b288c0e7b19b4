"""JWT token creation, inspection and validation."""

from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any

import jwt
from pydantic import ValidationError

from teamauth.core.auth.types import AuthSource, TokenClaims, User, utc_now

ALGORITHM = "HS256"
MEDIA_TYPE = "application/jwt"


class TokenError(Exception):
    """Raised when token validation fails."""

    pass


class DecodeFailure(TokenError):
    """Raised when a token is not structurally a token."""

    pass


def expiry(ttl: timedelta, now: datetime | None = None) -> int:
    """Expiration timestamp ``ttl`` from now."""
    return int(((now or utc_now()) + ttl).timestamp())


def claims_for(
    user: User,
    source: AuthSource,
    ttl: timedelta,
    user_token: str | None = None,
) -> TokenClaims:
    """Project a user record into token claims.

    Args:
        user: User the token is issued to.
        source: Provider that authenticated the user.
        ttl: Token lifetime.
        user_token: Upstream provider access token, for SSO sessions.

    Returns:
        Claims expiring ``ttl`` from now.
    """
    return TokenClaims(
        user_id=user.user_id,
        org_id=user.org_id,
        auth_source=source,
        teams=list(user.teams),
        name=user.name,
        email=user.email,
        user_token=user_token,
        exp=expiry(ttl),
    )


def generate(claims: TokenClaims, secret: str) -> str:
    """Sign claims into a token.

    Args:
        claims: Claims to sign, including their expiry.
        secret: Signing passphrase.

    Returns:
        Encoded JWT string
    """
    payload = claims.model_dump(mode="json", by_alias=True, exclude_none=True)
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def _claims(payload: dict[str, Any]) -> TokenClaims:
    try:
        return TokenClaims.model_validate(payload)
    except ValidationError as e:
        raise DecodeFailure(f"Token is missing required claims: {e.error_count()} errors") from None


def decode(token: str) -> TokenClaims:
    """Decode a token WITHOUT checking its signature or expiry.

    Only for inspection; a successful decode is not proof of authenticity.

    Raises:
        DecodeFailure: If the token is malformed.
    """
    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as e:
        raise DecodeFailure(f"Malformed token: {e}") from None
    return _claims(payload)


def validate(token: str, secret: str, *, allow_expired: bool = False) -> TokenClaims:
    """Decode and validate a token.

    Args:
        token: Encoded JWT string
        secret: Signing passphrase.
        allow_expired: Accept an authentic token past its expiry (refresh).

    Returns:
        Decoded token claims

    Raises:
        DecodeFailure: If token is malformed
        TokenError: If signature is invalid or token expired
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            options={"require": ["exp"], "verify_exp": not allow_expired},
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired") from None
    except jwt.InvalidSignatureError:
        raise TokenError("Token signature mismatch") from None
    except jwt.DecodeError as e:
        raise DecodeFailure(f"Malformed token: {e}") from None
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}") from None
    return _claims(payload)


def verify(token: str, secret: str) -> bool:
    """Whether the token is authentic and unexpired."""
    try:
        validate(token, secret)
    except TokenError:
        return False
    return True


def read_token(headers: Mapping[str, str]) -> str | None:
    """Extract a bearer token from request headers.

    Args:
        headers: Request headers; lookups are tried case-insensitively.

    Returns:
        The token, or None when no bearer authorization was sent.
    """
    value = headers.get("authorization") or headers.get("Authorization")
    if not value:
        return None
    scheme, _, token = value.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
