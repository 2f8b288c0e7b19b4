"""Auth domain types."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, EmailStr, Field


def to_kebab(name: str) -> str:
    """Map a python field name to its wire key."""
    return name.replace("_", "-")


class WireModel(BaseModel):
    """Base for records exchanged with kebab-case keys (``user-id``, ``org-id``)."""

    model_config = ConfigDict(alias_generator=to_kebab, populate_by_name=True)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class AuthSource(str, Enum):
    """Identity provider that produced a session."""

    EMAIL = "email"
    SLACK = "slack"


class UserStatus(str, Enum):
    """Lifecycle status of a user record."""

    PENDING = "pending"
    ACTIVE = "active"


class User(WireModel):
    """User domain model."""

    user_id: str
    org_id: str
    email: EmailStr | None = None
    first_name: str | None = None
    last_name: str | None = None
    avatar_url: str | None = None
    password_hash: str | None = None  # None for SSO users
    one_time_secret: str | None = None  # set while an invite is pending
    auth_source: AuthSource
    status: UserStatus = UserStatus.ACTIVE
    teams: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def name(self) -> str:
        """Display name built from first and last name."""
        parts = [part for part in (self.first_name, self.last_name) if part and part.strip()]
        return " ".join(parts)

    @property
    def is_pending(self) -> bool:
        """Whether the user is an invite awaiting activation."""
        return self.status is UserStatus.PENDING

    def is_member_of(self, team_id: str) -> bool:
        """Whether the user currently belongs to the team."""
        return team_id in self.teams


class Team(WireModel):
    """Team domain model.

    ``admins`` is always a subset of the team's members.
    """

    team_id: str
    name: str | None = None
    admins: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class TokenClaims(WireModel):
    """Claims carried by a bearer token.

    A projection of a User at issuance time; may be stale until refreshed.
    """

    user_id: str
    org_id: str
    auth_source: AuthSource
    teams: list[str] = Field(default_factory=list)
    name: str = ""
    email: str | None = None
    user_token: str | None = None  # SSO access token, slack sessions only
    exp: int  # expiration timestamp
