"""Invite lifecycle for locally managed (email) users.

An invite is a user record in ``pending`` status created with a one-time
secret and a random password nobody is told. It can be re-invited until it is
activated; ``active`` is terminal.
"""

import structlog

from teamauth.core.auth.password import unusable_password_hash
from teamauth.core.auth.providers import normalize_email
from teamauth.core.auth.repository import AuthRepository
from teamauth.core.auth.tokens import generate_one_time_secret, new_user_id
from teamauth.core.auth.types import AuthSource, User, UserStatus
from teamauth.core.exceptions import Conflict, NotFound

logger = structlog.get_logger()


class InviteService:
    """Service for creating and re-sending user invites."""

    def __init__(self, repo: AuthRepository) -> None:
        """Initialize with auth repository.

        Args:
            repo: Auth repository for store operations.
        """
        self._repo = repo

    async def create_invite(self, email: str, org_id: str) -> User:
        """Create a pending user in the organization.

        The user joins the organization's default team when it exists.

        Args:
            email: Invitee's email address.
            org_id: Organization the invitee joins.

        Returns:
            The created pending user.

        Raises:
            Conflict: If a user with the email already exists.
        """
        email = normalize_email(email)
        if await self._repo.get_user_by_email(email) is not None:
            raise Conflict("User with email already exists.")

        team = await self._repo.get_team(org_id)
        user = await self._repo.create_user(
            User(
                user_id=new_user_id(),
                org_id=org_id,
                email=email,
                password_hash=unusable_password_hash(),
                one_time_secret=generate_one_time_secret(),
                auth_source=AuthSource.EMAIL,
                status=UserStatus.PENDING,
                teams=[team.team_id] if team else [],
            )
        )
        if user is None:
            # a concurrent request created a user with this email first
            raise Conflict("User with email already exists.")

        logger.info("user_invited", user_id=user.user_id, org_id=org_id)
        return user

    async def reinvite(self, email: str, user_id: str | None = None) -> User:
        """Re-invite a pending user.

        Args:
            email: Invitee's email address.
            user_id: Specific user the caller means to re-invite, if any.

        Returns:
            The pending user.

        Raises:
            NotFound: If no user has the email, or it isn't ``user_id``.
            Conflict: If the user has already been activated.
        """
        user = await self._repo.get_user_by_email(normalize_email(email))
        if user is None:
            raise NotFound("No user with that email")

        if user_id is not None and user_id != user.user_id:
            logger.warning("reinvite_user_mismatch", requested=user_id, resolved=user.user_id)
            raise NotFound("Re-invite request didn't match user")

        if not user.is_pending:
            logger.warning("reinvite_ineligible", user_id=user.user_id, status=user.status.value)
            raise Conflict("User not eligible for reinvite")

        logger.info("user_reinvited", user_id=user.user_id)
        return user

    async def invite(self, email: str, org_id: str, user_id: str | None = None) -> User:
        """Invite by email, re-inviting when the user already exists.

        A user that already belongs to another organization is not invited
        into a second one.

        Raises:
            Conflict: If the existing user is active or in another organization.
            NotFound: If ``user_id`` is given and doesn't match an existing user.
        """
        existing = await self._repo.get_user_by_email(normalize_email(email))
        if existing is None:
            if user_id is not None:
                raise NotFound("Re-invite request didn't match user")
            return await self.create_invite(email, org_id)

        if existing.org_id != org_id:
            logger.warning("invite_cross_org", user_id=existing.user_id, org_id=org_id)
            raise Conflict("User belongs to another organization")

        return await self.reinvite(email, user_id)
