"""PostgreSQL implementation of AuthRepository.

Two tables: ``users`` (keyed by ``user_id``, with a ``teams text[]`` column)
and ``teams`` (keyed by ``team_id``, with an ``admins text[]`` column). Email
users are unique by email through a partial unique index. Inserts are
``ON CONFLICT DO NOTHING``, so a request that loses a creation race gets None
instead of a duplicate row. Admin-set changes are single conditional UPDATE
statements, so concurrent writers on the same team can't lose each other's
update.
"""

from typing import Any

from teamauth.adapters.db.app_db import AppDatabase
from teamauth.core.auth.types import Team, User

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    user_id text PRIMARY KEY,
    org_id text NOT NULL,
    email text,
    first_name text,
    last_name text,
    avatar_url text,
    password_hash text,
    one_time_secret text,
    auth_source text NOT NULL,
    status text NOT NULL,
    teams text[] NOT NULL DEFAULT '{}',
    created_at timestamptz NOT NULL DEFAULT NOW(),
    updated_at timestamptz NOT NULL DEFAULT NOW()
);
CREATE UNIQUE INDEX IF NOT EXISTS users_email_source_email_key
    ON users (email) WHERE auth_source = 'email';
CREATE INDEX IF NOT EXISTS users_org_id_idx ON users (org_id);
CREATE TABLE IF NOT EXISTS teams (
    team_id text PRIMARY KEY,
    name text,
    admins text[] NOT NULL DEFAULT '{}',
    created_at timestamptz NOT NULL DEFAULT NOW(),
    updated_at timestamptz NOT NULL DEFAULT NOW()
);
"""


class PostgresAuthRepository:
    """PostgreSQL implementation of auth repository."""

    def __init__(self, db: AppDatabase) -> None:
        """Initialize with database connection.

        Args:
            db: Application database instance.
        """
        self._db = db

    async def create_schema(self) -> None:
        """Create the tables and indexes if they don't exist yet."""
        await self._db.execute(SCHEMA)

    def _row_to_user(self, row: dict[str, Any]) -> User:
        """Convert database row to User model."""
        return User(
            user_id=row["user_id"],
            org_id=row["org_id"],
            email=row.get("email"),
            first_name=row.get("first_name"),
            last_name=row.get("last_name"),
            avatar_url=row.get("avatar_url"),
            password_hash=row.get("password_hash"),
            one_time_secret=row.get("one_time_secret"),
            auth_source=row["auth_source"],
            status=row["status"],
            teams=list(row.get("teams") or []),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _row_to_team(self, row: dict[str, Any]) -> Team:
        """Convert database row to Team model."""
        return Team(
            team_id=row["team_id"],
            name=row.get("name"),
            admins=list(row.get("admins") or []),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    # User operations
    async def get_user(self, user_id: str) -> User | None:
        """Get user by ID."""
        row = await self._db.fetch_one("SELECT * FROM users WHERE user_id = $1", user_id)
        return self._row_to_user(row) if row else None

    async def get_user_by_email(self, email: str) -> User | None:
        """Get user by email address, preferring the email-sourced record."""
        row = await self._db.fetch_one(
            """
            SELECT * FROM users WHERE email = $1
            ORDER BY (auth_source = 'email') DESC, created_at
            LIMIT 1
            """,
            email,
        )
        return self._row_to_user(row) if row else None

    async def create_user(self, user: User) -> User | None:
        """Create a new user, or return None if the id or email is taken."""
        row = await self._db.fetch_one(
            """
            INSERT INTO users (user_id, org_id, email, first_name, last_name, avatar_url,
                               password_hash, one_time_secret, auth_source, status, teams,
                               created_at, updated_at)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13)
            ON CONFLICT DO NOTHING
            RETURNING *
            """,
            user.user_id,
            user.org_id,
            user.email,
            user.first_name,
            user.last_name,
            user.avatar_url,
            user.password_hash,
            user.one_time_secret,
            user.auth_source.value,
            user.status.value,
            list(user.teams),
            user.created_at,
            user.updated_at,
        )
        return self._row_to_user(row) if row else None

    async def update_profile(
        self,
        user_id: str,
        first_name: str | None = None,
        last_name: str | None = None,
        avatar_url: str | None = None,
        email: str | None = None,
    ) -> User | None:
        """Update profile fields, keeping current values for omitted ones."""
        row = await self._db.fetch_one(
            """
            UPDATE users SET first_name = COALESCE($2, first_name),
                             last_name = COALESCE($3, last_name),
                             avatar_url = COALESCE($4, avatar_url),
                             email = COALESCE($5, email),
                             updated_at = NOW()
            WHERE user_id = $1
            RETURNING *
            """,
            user_id,
            first_name,
            last_name,
            avatar_url,
            email,
        )
        return self._row_to_user(row) if row else None

    async def delete_user(self, user_id: str) -> bool:
        """Delete a user and drop them from every admin set."""
        async with self._db.acquire() as conn, conn.transaction():
            await conn.execute(
                """
                UPDATE teams SET admins = array_remove(admins, $1), updated_at = NOW()
                WHERE $1 = ANY(admins)
                """,
                user_id,
            )
            result: str = await conn.execute("DELETE FROM users WHERE user_id = $1", user_id)
        return result == "DELETE 1"

    async def list_users(self, org_id: str) -> list[User]:
        """List users of an organization."""
        rows = await self._db.fetch_all(
            "SELECT * FROM users WHERE org_id = $1 ORDER BY created_at", org_id
        )
        return [self._row_to_user(row) for row in rows]

    async def list_team_users(self, team_id: str) -> list[User]:
        """List users that are members of a team."""
        rows = await self._db.fetch_all(
            "SELECT * FROM users WHERE $1 = ANY(teams) ORDER BY created_at", team_id
        )
        return [self._row_to_user(row) for row in rows]

    # Team operations
    async def get_team(self, team_id: str) -> Team | None:
        """Get team by ID."""
        row = await self._db.fetch_one("SELECT * FROM teams WHERE team_id = $1", team_id)
        return self._row_to_team(row) if row else None

    async def get_teams(self, team_ids: list[str]) -> list[Team]:
        """Get the teams with the given IDs that exist."""
        rows = await self._db.fetch_all(
            "SELECT * FROM teams WHERE team_id = ANY($1::text[]) ORDER BY name, team_id",
            list(team_ids),
        )
        return [self._row_to_team(row) for row in rows]

    async def create_team(self, team: Team) -> Team | None:
        """Create a new team, or return None if the id is taken."""
        row = await self._db.fetch_one(
            """
            INSERT INTO teams (team_id, name, admins, created_at, updated_at)
            VALUES ($1, $2, $3, $4, $5)
            ON CONFLICT DO NOTHING
            RETURNING *
            """,
            team.team_id,
            team.name,
            list(team.admins),
            team.created_at,
            team.updated_at,
        )
        return self._row_to_team(row) if row else None

    async def delete_team(self, team_id: str) -> bool:
        """Delete a team and drop it from every user's teams."""
        async with self._db.acquire() as conn, conn.transaction():
            await conn.execute(
                """
                UPDATE users SET teams = array_remove(teams, $1), updated_at = NOW()
                WHERE $1 = ANY(teams)
                """,
                team_id,
            )
            result: str = await conn.execute("DELETE FROM teams WHERE team_id = $1", team_id)
        return result == "DELETE 1"

    async def add_admin(self, team_id: str, user_id: str) -> Team | None:
        """Add an admin, conditional on current team membership."""
        row = await self._db.fetch_one(
            """
            UPDATE teams
            SET admins = CASE WHEN $2 = ANY(admins) THEN admins
                              ELSE array_append(admins, $2) END,
                updated_at = NOW()
            WHERE team_id = $1
              AND EXISTS (SELECT 1 FROM users WHERE user_id = $2 AND $1 = ANY(teams))
            RETURNING *
            """,
            team_id,
            user_id,
        )
        return self._row_to_team(row) if row else None

    async def remove_admin(self, team_id: str, user_id: str) -> Team | None:
        """Remove an admin, conditional on them not being the last one."""
        row = await self._db.fetch_one(
            """
            UPDATE teams SET admins = array_remove(admins, $2), updated_at = NOW()
            WHERE team_id = $1 AND $2 = ANY(admins) AND cardinality(admins) > 1
            RETURNING *
            """,
            team_id,
            user_id,
        )
        return self._row_to_team(row) if row else None
