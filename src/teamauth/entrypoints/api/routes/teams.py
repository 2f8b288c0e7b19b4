"""Team routes gated on team-admin rights."""

from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse

from teamauth.core import links
from teamauth.entrypoints.api.deps import TeamServiceDep
from teamauth.entrypoints.api.middleware.jwt_auth import AuthDep
from teamauth.entrypoints.api.representations import (
    render_team,
    render_team_collection,
    vendor_response,
)

router = APIRouter(prefix="/teams", tags=["teams"])


@router.get("")
@router.get("/", include_in_schema=False)
async def list_teams(auth: AuthDep, service: TeamServiceDep) -> JSONResponse:
    """List the caller's teams."""
    teams = await service.teams_for_user(auth.user_id)
    return vendor_response(
        render_team_collection(teams, auth.user_id), links.TEAM_COLLECTION_MEDIA_TYPE
    )


@router.get("/{team_id}")
async def get_team(team_id: str, auth: AuthDep, service: TeamServiceDep) -> JSONResponse:
    """Get a team with its members. Team admins only."""
    team, members = await service.get_team(team_id, auth.user_id)
    return vendor_response(render_team(team, members), links.TEAM_MEDIA_TYPE)


@router.delete("/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_team(team_id: str, auth: AuthDep, service: TeamServiceDep) -> Response:
    """Delete a team. Team admins only."""
    await service.delete_team(team_id, auth.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{team_id}/admins/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def add_admin(team_id: str, user_id: str, auth: AuthDep, service: TeamServiceDep) -> Response:
    """Grant a team member admin rights."""
    await service.add_admin(team_id, auth.user_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{team_id}/admins/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_admin(
    team_id: str, user_id: str, auth: AuthDep, service: TeamServiceDep
) -> Response:
    """Revoke a member's admin rights. The last admin can't be removed."""
    await service.remove_admin(team_id, auth.user_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
