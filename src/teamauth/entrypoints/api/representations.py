"""JSON representations of users and teams, with hypermedia links."""

from collections.abc import Sequence
from typing import Any

from fastapi.responses import JSONResponse, PlainTextResponse

from teamauth.core import links
from teamauth.core.auth.types import Team, User
from teamauth.core.rbac.teams import TeamMember, is_admin

COLLECTION_VERSION = "1.0"

# Never rendered: password_hash, one_time_secret
USER_PROPS = {
    "user_id",
    "org_id",
    "email",
    "first_name",
    "last_name",
    "avatar_url",
    "auth_source",
    "status",
    "created_at",
    "updated_at",
}


def _user_links(user: User) -> list[dict[str, Any]]:
    href = links.user_url(user.org_id, user.user_id)
    user_links = [links.self_link(href, links.USER_MEDIA_TYPE), links.delete_link(href)]
    if user.is_pending:
        user_links.append(links.link_map("reinvite", links.POST, f"{href}/invite", links.USER_MEDIA_TYPE))
    return user_links


def render_user(user: User) -> dict[str, Any]:
    """A user, without credentials."""
    data = user.model_dump(mode="json", by_alias=True, include=USER_PROPS)
    data["name"] = user.name
    data["links"] = _user_links(user)
    return data


def render_user_collection(org_id: str, users: Sequence[User]) -> dict[str, Any]:
    """The users of an organization as a collection document."""
    href = links.org_users_url(org_id)
    return {
        "collection": {
            "version": COLLECTION_VERSION,
            "href": href,
            "org-id": org_id,
            "links": [
                links.self_link(href, links.USER_COLLECTION_MEDIA_TYPE),
                links.invite_link(org_id),
            ],
            "users": [render_user(user) for user in users],
        }
    }


def _member_links(team_id: str, member: TeamMember) -> list[dict[str, Any]]:
    href = links.admin_url(team_id, member.user.user_id)
    if member.admin:
        return [links.link_map("remove-admin", links.DELETE, href, links.ADMIN_MEDIA_TYPE)]
    return [links.link_map("add-admin", links.PUT, href, links.ADMIN_MEDIA_TYPE)]


def render_team(team: Team, members: Sequence[TeamMember]) -> dict[str, Any]:
    """A team with its members, as seen by one of its admins."""
    href = links.team_url(team.team_id)
    data = team.model_dump(mode="json", by_alias=True)
    data["users"] = [
        {
            **render_user(member.user),
            "admin": member.admin,
            "links": _member_links(team.team_id, member),
        }
        for member in members
    ]
    data["links"] = [links.self_link(href, links.TEAM_MEDIA_TYPE), links.delete_link(href)]
    return data


def render_team_collection(teams: Sequence[Team], user_id: str) -> dict[str, Any]:
    """The caller's teams, flagging the ones they administer."""
    return {
        "collection": {
            "version": COLLECTION_VERSION,
            "href": "/teams",
            "links": [links.self_link("/teams", links.TEAM_COLLECTION_MEDIA_TYPE)],
            "teams": [
                {
                    "team-id": team.team_id,
                    "name": team.name,
                    "admin": is_admin(team, user_id),
                    "links": [
                        links.link_map(
                            "item", links.GET, links.team_url(team.team_id), links.TEAM_MEDIA_TYPE
                        )
                    ],
                }
                for team in teams
            ],
        }
    }


def token_response(token: str, status_code: int = 200, location: str | None = None) -> PlainTextResponse:
    """A signed token as an ``application/jwt`` body."""
    headers = {"Location": location} if location else None
    return PlainTextResponse(token, status_code=status_code, media_type=links.JWT_MEDIA_TYPE, headers=headers)


def vendor_response(
    content: dict[str, Any], media_type: str, status_code: int = 200, location: str | None = None
) -> JSONResponse:
    """A JSON body served under one of the service's vendor media types."""
    headers = {"Location": location} if location else None
    return JSONResponse(content, status_code=status_code, media_type=media_type, headers=headers)
