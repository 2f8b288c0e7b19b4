"""Organization user management routes."""

from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse
from pydantic import EmailStr

from teamauth.core import links
from teamauth.core.auth.types import WireModel
from teamauth.core.auth.users import require_same_org
from teamauth.entrypoints.api.deps import InviteServiceDep, UserServiceDep
from teamauth.entrypoints.api.middleware.jwt_auth import AuthDep
from teamauth.entrypoints.api.representations import (
    render_user,
    render_user_collection,
    vendor_response,
)

router = APIRouter(prefix="/org/{org_id}/users", tags=["users"])


class InviteRequest(WireModel):
    """Invite request body."""

    email: EmailStr


@router.get("")
async def list_users(org_id: str, auth: AuthDep, service: UserServiceDep) -> JSONResponse:
    """List the organization's users, excluding the caller."""
    users = await service.list_org_users(auth, org_id)
    return vendor_response(render_user_collection(org_id, users), links.USER_COLLECTION_MEDIA_TYPE)


@router.post("/invite", status_code=status.HTTP_201_CREATED)
async def invite_user(
    org_id: str,
    body: InviteRequest,
    auth: AuthDep,
    service: InviteServiceDep,
) -> JSONResponse:
    """Invite an email address into the caller's organization.

    Creates a pending user, or returns the existing pending user of the
    organization for a re-invite.
    """
    require_same_org(auth, org_id)
    user = await service.invite(body.email, auth.org_id)
    return vendor_response(
        render_user(user),
        links.USER_MEDIA_TYPE,
        status_code=status.HTTP_201_CREATED,
        location=links.user_url(user.org_id, user.user_id),
    )


@router.get("/{user_id}")
async def get_user(org_id: str, user_id: str, auth: AuthDep, service: UserServiceDep) -> JSONResponse:
    """Get a user of the caller's organization."""
    user = await service.get_org_user(auth, org_id, user_id)
    return vendor_response(render_user(user), links.USER_MEDIA_TYPE)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(org_id: str, user_id: str, auth: AuthDep, service: UserServiceDep) -> Response:
    """Delete a user or pending invite of the caller's organization.

    A path naming another organization is forbidden. A target user who
    belongs to another organization is reported as 401.
    """
    require_same_org(auth, org_id)
    await service.delete_user(auth, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{user_id}/invite", status_code=status.HTTP_201_CREATED)
async def reinvite_user(
    org_id: str,
    user_id: str,
    body: InviteRequest,
    auth: AuthDep,
    service: InviteServiceDep,
) -> JSONResponse:
    """Re-invite a specific pending user."""
    require_same_org(auth, org_id)
    user = await service.invite(body.email, auth.org_id, user_id=user_id)
    return vendor_response(
        render_user(user),
        links.USER_MEDIA_TYPE,
        status_code=status.HTTP_201_CREATED,
        location=links.user_url(user.org_id, user.user_id),
    )
