"""Team-admin authorization and admin-set management."""

from dataclasses import dataclass

import structlog

from teamauth.core.auth.repository import AuthRepository
from teamauth.core.auth.types import Team, User
from teamauth.core.exceptions import AuthorizationFailure, Conflict, NotFound

logger = structlog.get_logger()


def is_admin(team: Team, user_id: str) -> bool:
    """Whether the user is in the team's admin set."""
    return user_id in team.admins


@dataclass
class TeamMember:
    """A team member annotated with their admin flag."""

    user: User
    admin: bool


class TeamService:
    """Service for team operations gated on team-admin rights.

    Every mutating operation runs authorize -> exists -> mutate, stopping
    at the first failure so nothing changes after a failed check.
    """

    def __init__(self, repo: AuthRepository) -> None:
        """Initialize with auth repository.

        Args:
            repo: Auth repository for store operations.
        """
        self._repo = repo

    async def require_admin(self, team_id: str, user_id: str) -> Team:
        """The team, if the user administers it.

        Raises:
            AuthorizationFailure: If the team is missing or the user isn't an admin.
        """
        team = await self._repo.get_team(team_id)
        if team is None or not is_admin(team, user_id):
            logger.warning("team_admin_required", team_id=team_id, user_id=user_id)
            raise AuthorizationFailure("Team admin rights required")
        return team

    async def teams_for_user(self, user_id: str) -> list[Team]:
        """Teams the user is a member of."""
        user = await self._repo.get_user(user_id)
        if user is None or not user.teams:
            return []
        return await self._repo.get_teams(user.teams)

    async def get_team(self, team_id: str, acting_user_id: str) -> tuple[Team, list[TeamMember]]:
        """A team and its members, for one of its admins."""
        team = await self.require_admin(team_id, acting_user_id)
        users = await self._repo.list_team_users(team_id)
        return team, [TeamMember(user=user, admin=is_admin(team, user.user_id)) for user in users]

    async def delete_team(self, team_id: str, acting_user_id: str) -> None:
        """Delete a team on behalf of one of its admins."""
        await self.require_admin(team_id, acting_user_id)
        await self._repo.delete_team(team_id)
        logger.info("team_deleted", team_id=team_id, by=acting_user_id)

    async def _require_member(self, team_id: str, user_id: str) -> User:
        user = await self._repo.get_user(user_id)
        if user is None or not user.is_member_of(team_id):
            raise NotFound("User is not a member of the team")
        return user

    async def add_admin(self, team_id: str, acting_user_id: str, user_id: str) -> Team:
        """Grant a team member admin rights.

        Raises:
            AuthorizationFailure: If the caller isn't an admin of the team.
            NotFound: If the target isn't a current team member.
        """
        await self.require_admin(team_id, acting_user_id)
        await self._require_member(team_id, user_id)

        updated = await self._repo.add_admin(team_id, user_id)
        if updated is None:
            # membership or the team changed between the check and the write
            raise NotFound("User is not a member of the team")
        logger.info("team_admin_added", team_id=team_id, user_id=user_id, by=acting_user_id)
        return updated

    async def remove_admin(self, team_id: str, acting_user_id: str, user_id: str) -> Team:
        """Revoke a member's admin rights.

        A team always keeps at least one admin.

        Raises:
            AuthorizationFailure: If the caller isn't an admin of the team.
            NotFound: If the target isn't a member or isn't an admin.
            Conflict: If the target is the last remaining admin.
        """
        team = await self.require_admin(team_id, acting_user_id)
        await self._require_member(team_id, user_id)
        if not is_admin(team, user_id):
            raise NotFound("User is not an admin of the team")

        updated = await self._repo.remove_admin(team_id, user_id)
        if updated is None:
            current = await self._repo.get_team(team_id)
            if current is None or not is_admin(current, user_id):
                raise NotFound("User is not an admin of the team")
            logger.warning("last_admin_removal_refused", team_id=team_id, user_id=user_id)
            raise Conflict("A team must keep at least one admin")

        logger.info("team_admin_removed", team_id=team_id, user_id=user_id, by=acting_user_id)
        return updated
