"""Organization user management on behalf of an authenticated caller."""

import structlog

from teamauth.core.auth.repository import AuthRepository
from teamauth.core.auth.types import TokenClaims, User
from teamauth.core.exceptions import AuthorizationFailure, NotFound

logger = structlog.get_logger()


def require_same_org(claims: TokenClaims, org_id: str) -> None:
    """Reject requests addressing an organization the caller isn't in.

    Raises:
        AuthorizationFailure: If ``org_id`` isn't the caller's organization.
    """
    if claims.org_id != org_id:
        logger.warning("org_mismatch", user_id=claims.user_id, org_id=org_id)
        raise AuthorizationFailure("Not a member of this organization")


class UserService:
    """Service for enumerating, fetching and deleting organization users."""

    def __init__(self, repo: AuthRepository) -> None:
        self._repo = repo

    async def list_org_users(self, claims: TokenClaims, org_id: str) -> list[User]:
        """Users of the caller's organization, excluding the caller."""
        require_same_org(claims, org_id)
        users = await self._repo.list_users(org_id)
        logger.info("user_enumeration", org_id=org_id, count=len(users))
        return [user for user in users if user.user_id != claims.user_id]

    async def get_org_user(self, claims: TokenClaims, org_id: str, user_id: str) -> User:
        """Fetch a user of the caller's organization.

        Raises:
            AuthorizationFailure: If ``org_id`` isn't the caller's organization.
            NotFound: If the user doesn't exist in that organization.
        """
        require_same_org(claims, org_id)
        user = await self._repo.get_user(user_id)
        if user is None or user.org_id != org_id:
            raise NotFound("User not found")
        return user

    async def delete_user(self, claims: TokenClaims, user_id: str) -> None:
        """Delete a user or pending invite from the caller's organization.

        Raises:
            NotFound: If the user doesn't exist.
            AuthorizationFailure: If the user belongs to another organization.
        """
        logger.info("delete_requested", user_id=user_id, by=claims.user_id)
        user = await self._repo.get_user(user_id)
        if user is None:
            logger.warning("delete_missing_user", user_id=user_id)
            raise NotFound("User not found")

        if user.org_id != claims.org_id:
            logger.warning("delete_unauthorized", user_id=user_id, by=claims.user_id)
            raise AuthorizationFailure("Not a member of this organization", status_code=401)

        await self._repo.delete_user(user_id)
        logger.info("user_deleted", user_id=user_id)
