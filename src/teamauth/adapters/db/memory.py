"""In-memory AuthRepository for development and testing."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import TypeVar

from teamauth.core.auth.types import AuthSource, Team, User, utc_now

R = TypeVar("R", User, Team)


class InMemoryAuthRepository:
    """Store users and teams in process memory.

    This adapter is useful for:
    - Unit and API testing without a real database
    - Development without database setup (``STORE_BACKEND=memory``)

    Records are copied on the way in and out, so callers never share mutable
    state with the store. All writes are serialized by one lock, which makes
    the uniqueness checks on create and the conditional admin-set updates
    atomic.
    """

    def __init__(self, users: Iterable[User] = (), teams: Iterable[Team] = ()) -> None:
        """Initialize the store, optionally seeded.

        Args:
            users: Users to start with.
            teams: Teams to start with.
        """
        self._users: dict[str, User] = {}
        self._teams: dict[str, Team] = {}
        self._lock = asyncio.Lock()
        self.seed(users, teams)

    def seed(self, users: Iterable[User] = (), teams: Iterable[Team] = ()) -> None:
        """Insert or replace records without going through the async API."""
        for user in users:
            self._users[user.user_id] = user.model_copy(deep=True)
        for team in teams:
            self._teams[team.team_id] = team.model_copy(deep=True)

    @staticmethod
    def _copy(record: R | None) -> R | None:
        return record.model_copy(deep=True) if record is not None else None

    # User operations
    async def get_user(self, user_id: str) -> User | None:
        return self._copy(self._users.get(user_id))

    async def get_user_by_email(self, email: str) -> User | None:
        matches = sorted(
            (user for user in self._users.values() if user.email == email),
            key=lambda user: (user.auth_source is not AuthSource.EMAIL, user.created_at),
        )
        return self._copy(matches[0]) if matches else None

    def _email_taken(self, user: User) -> bool:
        if user.auth_source is not AuthSource.EMAIL or user.email is None:
            return False
        return any(
            other.auth_source is AuthSource.EMAIL and other.email == user.email
            for other in self._users.values()
        )

    async def create_user(self, user: User) -> User | None:
        async with self._lock:
            if user.user_id in self._users or self._email_taken(user):
                return None
            self._users[user.user_id] = user.model_copy(deep=True)
        return user.model_copy(deep=True)

    async def update_profile(
        self,
        user_id: str,
        first_name: str | None = None,
        last_name: str | None = None,
        avatar_url: str | None = None,
        email: str | None = None,
    ) -> User | None:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            changes = {
                "first_name": first_name,
                "last_name": last_name,
                "avatar_url": avatar_url,
                "email": email,
            }
            update = {key: value for key, value in changes.items() if value is not None}
            updated = user.model_copy(update={**update, "updated_at": utc_now()})
            self._users[user_id] = updated
        return updated.model_copy(deep=True)

    async def delete_user(self, user_id: str) -> bool:
        async with self._lock:
            if self._users.pop(user_id, None) is None:
                return False
            for team_id, team in self._teams.items():
                if user_id in team.admins:
                    self._teams[team_id] = team.model_copy(
                        update={
                            "admins": [a for a in team.admins if a != user_id],
                            "updated_at": utc_now(),
                        }
                    )
        return True

    async def list_users(self, org_id: str) -> list[User]:
        users = [user for user in self._users.values() if user.org_id == org_id]
        return [user.model_copy(deep=True) for user in sorted(users, key=lambda u: u.created_at)]

    async def list_team_users(self, team_id: str) -> list[User]:
        users = [user for user in self._users.values() if team_id in user.teams]
        return [user.model_copy(deep=True) for user in sorted(users, key=lambda u: u.created_at)]

    # Team operations
    async def get_team(self, team_id: str) -> Team | None:
        return self._copy(self._teams.get(team_id))

    async def get_teams(self, team_ids: list[str]) -> list[Team]:
        teams = [self._teams[team_id] for team_id in set(team_ids) if team_id in self._teams]
        teams.sort(key=lambda team: (team.name or "", team.team_id))
        return [team.model_copy(deep=True) for team in teams]

    async def create_team(self, team: Team) -> Team | None:
        async with self._lock:
            if team.team_id in self._teams:
                return None
            self._teams[team.team_id] = team.model_copy(deep=True)
        return team.model_copy(deep=True)

    async def delete_team(self, team_id: str) -> bool:
        async with self._lock:
            if self._teams.pop(team_id, None) is None:
                return False
            for user_id, user in self._users.items():
                if team_id in user.teams:
                    self._users[user_id] = user.model_copy(
                        update={
                            "teams": [t for t in user.teams if t != team_id],
                            "updated_at": utc_now(),
                        }
                    )
        return True

    async def add_admin(self, team_id: str, user_id: str) -> Team | None:
        async with self._lock:
            team = self._teams.get(team_id)
            user = self._users.get(user_id)
            if team is None or user is None or team_id not in user.teams:
                return None
            if user_id not in team.admins:
                team = team.model_copy(
                    update={"admins": [*team.admins, user_id], "updated_at": utc_now()}
                )
                self._teams[team_id] = team
        return team.model_copy(deep=True)

    async def remove_admin(self, team_id: str, user_id: str) -> Team | None:
        async with self._lock:
            team = self._teams.get(team_id)
            if team is None or user_id not in team.admins or len(team.admins) <= 1:
                return None
            team = team.model_copy(
                update={
                    "admins": [a for a in team.admins if a != user_id],
                    "updated_at": utc_now(),
                }
            )
            self._teams[team_id] = team
        return team.model_copy(deep=True)
