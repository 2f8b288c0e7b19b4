"""Request-level authentication: token extraction, provider routing, reissue."""

from collections.abc import Mapping
from datetime import timedelta
from typing import Any

import structlog

from teamauth.core.auth import jwt
from teamauth.core.auth.providers import Providers
from teamauth.core.auth.types import AuthSource, TokenClaims, User
from teamauth.core.config import AuthConfig
from teamauth.core.exceptions import AuthenticationFailure

logger = structlog.get_logger()

DEBUG_CLAIMS = {
    "user-id": "test-user",
    "org-id": "test-org",
    "auth-source": AuthSource.EMAIL.value,
    "teams": ["test-org"],
    "name": "Test User",
}
DEBUG_TOKEN_TTL = timedelta(minutes=5)


class AuthGateway:
    """Decides whether a request is authenticated and by which provider.

    Each request moves through extract -> decode -> route by source -> act.
    Settings requests degrade to the anonymous view when the token can't be
    trusted; every other operation fails with AuthenticationFailure.
    """

    def __init__(self, config: AuthConfig, providers: Providers) -> None:
        """Initialize the gateway.

        Args:
            config: Service configuration holding the signing passphrase.
            providers: The identity providers to route to.
        """
        self._config = config
        self._providers = providers

    def identify(self, headers: Mapping[str, str], *, allow_expired: bool = False) -> TokenClaims:
        """Trusted claims of the request's bearer token.

        Args:
            headers: Request headers.
            allow_expired: Accept an authentic but expired token.

        Raises:
            AuthenticationFailure: If the token is missing, forged, malformed or expired.
        """
        token = jwt.read_token(headers)
        if token is None:
            logger.warning("missing_token")
            raise AuthenticationFailure("Could not confirm token.")
        try:
            return jwt.validate(token, self._config.passphrase, allow_expired=allow_expired)
        except jwt.TokenError as e:
            logger.warning("bad_token", error=str(e))
            raise AuthenticationFailure("Could not confirm token.") from None

    def try_identify(self, headers: Mapping[str, str]) -> TokenClaims | None:
        """Claims of a trusted token, or None for anonymous requests."""
        token = jwt.read_token(headers)
        if token is None:
            return None
        try:
            return jwt.validate(token, self._config.passphrase)
        except jwt.TokenError as e:
            logger.info("settings_token_ignored", error=str(e))
            return None

    def auth_settings(self, headers: Mapping[str, str]) -> dict[str, Any]:
        """Settings for the request.

        Anonymous requests get every provider's public settings; signed-in
        requests get the settings of the provider that issued their token.
        """
        claims = self.try_identify(headers)
        if claims is None:
            return {
                AuthSource.EMAIL.value: self._providers.email.auth_settings(),
                AuthSource.SLACK.value: self._providers.slack.auth_settings(),
            }
        provider = self._providers.for_source(claims.auth_source)
        return provider.authed_settings(claims.org_id, claims.user_id)

    async def refresh(self, headers: Mapping[str, str], source: AuthSource) -> str:
        """Revalidate the request's token with its provider and reissue it.

        Args:
            headers: Request headers.
            source: Provider the refresh route belongs to.

        Returns:
            A newly signed token.

        Raises:
            AuthenticationFailure: If the token can't be trusted or came from another provider.
            StaleIdentity: If the provider no longer vouches for the claims.
            ProviderUnavailable: If the provider can't be reached.
        """
        claims = self.identify(headers, allow_expired=True)
        if claims.auth_source is not source:
            logger.warning(
                "refresh_source_mismatch",
                user_id=claims.user_id,
                token_source=claims.auth_source.value,
                route_source=source.value,
            )
            raise AuthenticationFailure("Could not confirm token.")

        provider = self._providers.for_source(claims.auth_source)
        refreshed = await provider.refresh(claims)
        return jwt.generate(refreshed, self._config.passphrase)

    def issue(self, user: User, source: AuthSource, user_token: str | None = None) -> str:
        """Sign a new token for a freshly authenticated user."""
        claims = jwt.claims_for(user, source, self._config.token_ttl, user_token=user_token)
        return jwt.generate(claims, self._config.passphrase)

    def debug_token(self) -> dict[str, Any]:
        """A fixed debug token with its verification and decoding."""
        claims = TokenClaims.model_validate({**DEBUG_CLAIMS, "exp": jwt.expiry(DEBUG_TOKEN_TTL)})
        token = jwt.generate(claims, self._config.passphrase)
        return {
            "token": token,
            "verified": jwt.verify(token, self._config.passphrase),
            "decoded": jwt.decode(token).model_dump(mode="json", by_alias=True, exclude_none=True),
        }
