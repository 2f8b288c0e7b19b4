"""Auth domain types and utilities."""

from teamauth.core.auth.gateway import AuthGateway
from teamauth.core.auth.invites import InviteService
from teamauth.core.auth.jwt import DecodeFailure, TokenError, decode, generate, validate, verify
from teamauth.core.auth.password import hash_password, verify_password
from teamauth.core.auth.providers import (
    EmailProvider,
    IdentityProvider,
    Providers,
    SlackApi,
    SlackIdentity,
    SlackProvider,
)
from teamauth.core.auth.repository import AuthRepository
from teamauth.core.auth.types import (
    AuthSource,
    Team,
    TokenClaims,
    User,
    UserStatus,
)
from teamauth.core.auth.users import UserService

__all__ = [
    "AuthGateway",
    "AuthRepository",
    "AuthSource",
    "DecodeFailure",
    "EmailProvider",
    "IdentityProvider",
    "InviteService",
    "Providers",
    "SlackApi",
    "SlackIdentity",
    "SlackProvider",
    "Team",
    "TokenClaims",
    "TokenError",
    "User",
    "UserService",
    "UserStatus",
    "decode",
    "generate",
    "hash_password",
    "validate",
    "verify",
    "verify_password",
]
