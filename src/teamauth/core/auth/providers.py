"""Identity providers: local email/password and Slack SSO.

Both providers turn credentials into a canonical User, advertise the links a
client needs before and after signing in, and revalidate token claims on
refresh. The set of providers is closed; ``Providers.for_source`` picks one
from a token's ``auth-source`` claim.
"""

from dataclasses import dataclass
from typing import Any, Protocol, assert_never
from urllib.parse import urlencode

import structlog
from pydantic import EmailStr, TypeAdapter, ValidationError

from teamauth.core.auth.jwt import expiry
from teamauth.core.auth.password import hash_password, password_fits, verify_password
from teamauth.core.auth.repository import AuthRepository
from teamauth.core.auth.tokens import new_org_id, new_user_id, slack_user_id
from teamauth.core.auth.types import AuthSource, Team, TokenClaims, User, UserStatus
from teamauth.core.config import SLACK_USER_SCOPES, AuthConfig
from teamauth.core.exceptions import AuthenticationFailure, Conflict, StaleIdentity, ValidationFailure
from teamauth.core.links import (
    GET,
    JWT_MEDIA_TYPE,
    POST,
    USER_MEDIA_TYPE,
    invite_link,
    link_map,
    refresh_link,
    teams_link,
    user_link,
    users_link,
)

logger = structlog.get_logger()

EMAIL_REFRESH_URL = "/email/refresh-token"
SLACK_REFRESH_URL = "/sso/refresh-token"


def normalize_email(email: str) -> str:
    """Canonical form used for storage and lookup."""
    return email.strip().lower()


class IdentityProvider(Protocol):
    """Capabilities shared by every identity provider."""

    source: AuthSource

    def auth_settings(self) -> dict[str, Any]:
        """Public settings for clients that have not signed in."""
        ...

    def authed_settings(self, org_id: str, user_id: str) -> dict[str, Any]:
        """User-scoped settings for a signed-in client."""
        ...

    async def refresh(self, claims: TokenClaims) -> TokenClaims:
        """Revalidate claims and return them with a new expiry."""
        ...


@dataclass
class SlackIdentity:
    """Identity resolved from a completed Slack OAuth exchange."""

    slack_id: str
    team_id: str
    access_token: str
    team_name: str | None = None
    name: str | None = None
    email: str | None = None
    avatar_url: str | None = None


_email_adapter = TypeAdapter(EmailStr)


def slack_email(identity: SlackIdentity) -> str | None:
    """The identity's email in canonical form, or None if Slack sent none we can use."""
    if not identity.email:
        return None
    try:
        return normalize_email(_email_adapter.validate_python(identity.email))
    except ValidationError:
        logger.warning("slack_email_invalid", slack_id=identity.slack_id)
        return None


class SlackApi(Protocol):
    """Slack Web API calls the SSO provider depends on."""

    async def exchange_code(self, code: str, redirect_uri: str) -> SlackIdentity:
        """Exchange an OAuth code for the signed-in user's identity."""
        ...

    async def valid_access_token(self, access_token: str) -> bool:
        """Whether Slack still honours the access token."""
        ...


class EmailProvider:
    """Locally managed users authenticated by email and bcrypt password."""

    source = AuthSource.EMAIL

    def __init__(self, repo: AuthRepository, config: AuthConfig) -> None:
        """Initialize with the user store.

        Args:
            repo: Auth repository for store operations.
            config: Service configuration.
        """
        self._repo = repo
        self._config = config

    async def authenticate(self, email: str, password: str) -> User:
        """Check an email/password pair.

        Raises:
            AuthenticationFailure: If the credentials don't match an email user.
        """
        user = await self._repo.get_user_by_email(normalize_email(email))
        if user is None or user.auth_source is not AuthSource.EMAIL:
            logger.info("email_auth_failed", reason="unknown_user")
            raise AuthenticationFailure("Invalid email or password")

        if not verify_password(password, user.password_hash):
            logger.info("email_auth_failed", user_id=user.user_id)
            raise AuthenticationFailure("Invalid email or password")

        logger.info("email_authenticated", user_id=user.user_id)
        return user

    async def register(
        self,
        email: str,
        password: str,
        first_name: str | None = None,
        last_name: str | None = None,
        avatar_url: str | None = None,
    ) -> User:
        """Create an active email user in a brand new organization.

        The user becomes the first admin of the organization's default team.

        Raises:
            ValidationFailure: If the password can't be hashed.
            Conflict: If a user with the email already exists.
        """
        if not password_fits(password):
            raise ValidationFailure("Password must be between 1 and 72 bytes")

        email = normalize_email(email)
        if await self._repo.get_user_by_email(email) is not None:
            logger.warning("user_already_exists", email=email)
            raise Conflict("User with email already exists.")

        org_id = new_org_id()
        user = await self._repo.create_user(
            User(
                user_id=new_user_id(),
                org_id=org_id,
                email=email,
                first_name=first_name,
                last_name=last_name,
                avatar_url=avatar_url,
                password_hash=hash_password(password),
                auth_source=AuthSource.EMAIL,
                status=UserStatus.ACTIVE,
                teams=[org_id],
            )
        )
        if user is None:
            # a concurrent registration took the email after the lookup
            logger.warning("user_already_exists", email=email)
            raise Conflict("User with email already exists.")

        await self._repo.create_team(Team(team_id=org_id, admins=[user.user_id]))
        logger.info("email_user_created", user_id=user.user_id, org_id=org_id)
        return user

    def auth_settings(self) -> dict[str, Any]:
        return {
            "links": [
                link_map("authenticate", GET, "/email/auth", JWT_MEDIA_TYPE),
                link_map("create", POST, "/email/users", USER_MEDIA_TYPE),
            ]
        }

    def authed_settings(self, org_id: str, user_id: str) -> dict[str, Any]:
        return {
            "links": [
                user_link(org_id, user_id),
                refresh_link(EMAIL_REFRESH_URL),
                users_link(org_id),
                invite_link(org_id),
                teams_link(),
            ]
        }

    async def refresh(self, claims: TokenClaims) -> TokenClaims:
        """Reissue claims if the user still exists in the same organization.

        Raises:
            StaleIdentity: If the user is gone or changed organization.
        """
        logger.info("refresh_token_requested", user_id=claims.user_id, org_id=claims.org_id)
        user = await self._repo.get_user(claims.user_id)
        if user is None or user.org_id != claims.org_id:
            logger.warning("refresh_stale_identity", user_id=claims.user_id, org_id=claims.org_id)
            raise StaleIdentity("Could not confirm token.")

        logger.info("refreshing_token", user_id=claims.user_id)
        return claims.model_copy(
            update={
                "auth_source": AuthSource.EMAIL,
                "teams": list(user.teams),
                "name": user.name,
                "email": user.email,
                "exp": expiry(self._config.token_ttl),
            }
        )


class SlackProvider:
    """Users signed in through Slack OAuth."""

    source = AuthSource.SLACK

    def __init__(self, repo: AuthRepository, config: AuthConfig, client: SlackApi) -> None:
        """Initialize the provider.

        Args:
            repo: Auth repository for store operations.
            config: Service configuration.
            client: Slack Web API client.
        """
        self._repo = repo
        self._config = config
        self._client = client

    def authorize_url(self) -> str:
        """Slack page where the user grants sign-in consent."""
        params = {
            "client_id": self._config.slack_client_id,
            "user_scope": ",".join(SLACK_USER_SCOPES),
            "redirect_uri": self._config.slack_redirect_uri,
        }
        return f"{self._config.slack_authorize_url}?{urlencode(params)}"

    def auth_settings(self) -> dict[str, Any]:
        return {
            "links": [link_map("authenticate", GET, self.authorize_url(), "text/plain")],
        }

    def authed_settings(self, org_id: str, user_id: str) -> dict[str, Any]:
        return {
            "links": [
                user_link(org_id, user_id),
                refresh_link(SLACK_REFRESH_URL),
                teams_link(),
            ]
        }

    async def authenticate(self, code: str) -> tuple[User, str]:
        """Complete the OAuth exchange and sync the user record.

        Returns:
            The user and the Slack access token to carry in their claims.

        Raises:
            AuthenticationFailure: If Slack rejects the code.
            ProviderUnavailable: If Slack can't be reached.
        """
        identity = await self._client.exchange_code(code, self._config.slack_redirect_uri)
        user = await self._sync_user(identity)
        logger.info("slack_authenticated", user_id=user.user_id, org_id=user.org_id)
        return user, identity.access_token

    async def _sync_user(self, identity: SlackIdentity) -> User:
        user_id = slack_user_id(identity.slack_id)
        first_name, _, last_name = (identity.name or "").partition(" ")
        email = slack_email(identity)

        existing = await self._repo.get_user(user_id)
        if existing is None:
            created = await self._repo.create_user(
                User(
                    user_id=user_id,
                    org_id=identity.team_id,
                    email=email,
                    first_name=first_name or None,
                    last_name=last_name or None,
                    avatar_url=identity.avatar_url,
                    auth_source=AuthSource.SLACK,
                    status=UserStatus.ACTIVE,
                    teams=[identity.team_id],
                )
            )
            if created is not None:
                await self._ensure_team(identity, user_id)
                return created
            # a concurrent callback for the same user inserted it first
            logger.info("slack_user_exists", user_id=user_id)

        updated = await self._repo.update_profile(
            user_id,
            first_name=first_name or None,
            last_name=last_name or None,
            avatar_url=identity.avatar_url,
            email=email,
        )
        if updated is not None:
            return updated
        if existing is not None:
            return existing
        raise AuthenticationFailure("Slack user could not be stored")

    async def _ensure_team(self, identity: SlackIdentity, user_id: str) -> None:
        """Create the workspace team with its first user as admin, if it's new."""
        if await self._repo.get_team(identity.team_id) is not None:
            return
        team = await self._repo.create_team(
            Team(team_id=identity.team_id, name=identity.team_name, admins=[user_id])
        )
        if team is None:
            logger.info("slack_team_exists", team_id=identity.team_id)
            return
        logger.info("slack_team_created", team_id=identity.team_id, admin=user_id)

    async def refresh(self, claims: TokenClaims) -> TokenClaims:
        """Reissue claims if the carried Slack access token is still valid.

        Raises:
            StaleIdentity: If the access token is missing or revoked.
            ProviderUnavailable: If Slack can't be reached.
        """
        logger.info("refresh_token_requested", user_id=claims.user_id, org_id=claims.org_id)
        if not claims.user_token or not await self._client.valid_access_token(claims.user_token):
            logger.warning("refresh_invalid_access_token", user_id=claims.user_id)
            raise StaleIdentity("Could not confirm token.")

        update: dict[str, Any] = {
            "auth_source": AuthSource.SLACK,
            "exp": expiry(self._config.token_ttl),
        }
        user = await self._repo.get_user(claims.user_id)
        if user is not None:
            update.update(teams=list(user.teams), name=user.name, email=user.email)

        logger.info("refreshing_token", user_id=claims.user_id)
        return claims.model_copy(update=update)


@dataclass(frozen=True)
class Providers:
    """The closed set of identity providers."""

    email: EmailProvider
    slack: SlackProvider

    def for_source(self, source: AuthSource) -> IdentityProvider:
        """Provider responsible for sessions from ``source``."""
        if source is AuthSource.EMAIL:
            return self.email
        if source is AuthSource.SLACK:
            return self.slack
        assert_never(source)
