"""Auth repository protocol for store operations."""

from typing import Protocol, runtime_checkable

from teamauth.core.auth.types import Team, User


@runtime_checkable
class AuthRepository(Protocol):
    """Protocol for auth store operations.

    Implementations provide actual storage (PostgreSQL, in-memory). Admin-set
    mutations must be atomic conditional updates keyed on the team record.
    """

    # User operations
    async def get_user(self, user_id: str) -> User | None:
        """Get user by ID."""
        ...

    async def get_user_by_email(self, email: str) -> User | None:
        """Get user by email address."""
        ...

    async def create_user(self, user: User) -> User | None:
        """Insert a new user record.

        Returns the created user, or None when the user id is taken or, for an
        email user, another email user already has the email. The check and
        the insert are one atomic step.
        """
        ...

    async def update_profile(
        self,
        user_id: str,
        first_name: str | None = None,
        last_name: str | None = None,
        avatar_url: str | None = None,
        email: str | None = None,
    ) -> User | None:
        """Update profile fields reported by an identity provider."""
        ...

    async def delete_user(self, user_id: str) -> bool:
        """Delete a user and drop them from every admin set."""
        ...

    async def list_users(self, org_id: str) -> list[User]:
        """List users of an organization."""
        ...

    async def list_team_users(self, team_id: str) -> list[User]:
        """List users that are members of a team."""
        ...

    # Team operations
    async def get_team(self, team_id: str) -> Team | None:
        """Get team by ID."""
        ...

    async def get_teams(self, team_ids: list[str]) -> list[Team]:
        """Get the teams with the given IDs that exist."""
        ...

    async def create_team(self, team: Team) -> Team | None:
        """Insert a new team record.

        Returns the created team, or None when the team id is taken.
        """
        ...

    async def delete_team(self, team_id: str) -> bool:
        """Delete a team and drop it from every user's teams."""
        ...

    async def add_admin(self, team_id: str, user_id: str) -> Team | None:
        """Add an admin if the user is a current member.

        Returns the updated team, or None when the team is missing or the
        user is not a member. Adding an existing admin is a no-op.
        """
        ...

    async def remove_admin(self, team_id: str, user_id: str) -> Team | None:
        """Remove an admin unless they are the last one.

        Returns the updated team, or None when the team is missing, the user
        is not an admin, or they are the only remaining admin.
        """
        ...
