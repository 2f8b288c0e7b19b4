"""Team-admin authorization."""

from teamauth.core.rbac.teams import TeamMember, TeamService, is_admin

__all__ = [
    "TeamMember",
    "TeamService",
    "is_admin",
]
