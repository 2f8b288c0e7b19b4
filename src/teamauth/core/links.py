"""Hypermedia links and media types advertised by the service."""

from typing import Any

GET = "GET"
POST = "POST"
PUT = "PUT"
DELETE = "DELETE"

JWT_MEDIA_TYPE = "application/jwt"
USER_MEDIA_TYPE = "application/vnd.teamauth.user.v1+json"
USER_COLLECTION_MEDIA_TYPE = "application/vnd.collection+vnd.teamauth.user+json;version=1"
TEAM_MEDIA_TYPE = "application/vnd.teamauth.team.v1+json"
TEAM_COLLECTION_MEDIA_TYPE = "application/vnd.collection+vnd.teamauth.team+json;version=1"
ADMIN_MEDIA_TYPE = "application/vnd.teamauth.team.admin.v1"


def link_map(
    rel: str, method: str, href: str, media_type: str | None = None, **extra: Any
) -> dict[str, Any]:
    """Build a single link description."""
    link: dict[str, Any] = {"rel": rel, "method": method, "href": href}
    if media_type:
        link["type"] = media_type
    link.update(extra)
    return link


def self_link(href: str, media_type: str) -> dict[str, Any]:
    return link_map("self", GET, href, media_type)


def delete_link(href: str) -> dict[str, Any]:
    return link_map("delete", DELETE, href)


def org_users_url(org_id: str) -> str:
    return f"/org/{org_id}/users"


def user_url(org_id: str, user_id: str) -> str:
    return f"{org_users_url(org_id)}/{user_id}"


def team_url(team_id: str) -> str:
    return f"/teams/{team_id}"


def admin_url(team_id: str, user_id: str) -> str:
    return f"{team_url(team_id)}/admins/{user_id}"


def user_link(org_id: str, user_id: str) -> dict[str, Any]:
    return link_map("user", GET, user_url(org_id, user_id), USER_MEDIA_TYPE)


def refresh_link(href: str) -> dict[str, Any]:
    return link_map("refresh", GET, href, JWT_MEDIA_TYPE)


def teams_link() -> dict[str, Any]:
    return link_map("collection", GET, "/teams", TEAM_COLLECTION_MEDIA_TYPE)


def users_link(org_id: str) -> dict[str, Any]:
    return link_map("users", GET, org_users_url(org_id), USER_COLLECTION_MEDIA_TYPE)


def invite_link(org_id: str) -> dict[str, Any]:
    return link_map("invite", POST, f"{org_users_url(org_id)}/invite", USER_MEDIA_TYPE)
