"""Tests for team-admin authorization."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from teamauth.adapters.db.memory import InMemoryAuthRepository
from teamauth.core.auth.types import AuthSource, Team, User
from teamauth.core.exceptions import AuthorizationFailure, Conflict, NotFound
from teamauth.core.rbac.teams import TeamService, is_admin


@pytest.fixture
def service(memory_repo: InMemoryAuthRepository) -> TeamService:
    """Create team service over the seeded store."""
    return TeamService(memory_repo)


class TestIsAdmin:
    """Tests for is_admin."""

    def test_admin(self, acme_team: Team) -> None:
        assert is_admin(acme_team, "user-alice") is True

    def test_member(self, acme_team: Team) -> None:
        assert is_admin(acme_team, "user-bob") is False

    def test_empty_admins(self) -> None:
        assert is_admin(Team(team_id="t"), "user-alice") is False


class TestRequireAdmin:
    """Tests for require_admin."""

    async def test_admin(self, service: TeamService) -> None:
        team = await service.require_admin("org-acme", "user-alice")

        assert team.team_id == "org-acme"

    async def test_non_admin(self, service: TeamService) -> None:
        with pytest.raises(AuthorizationFailure):
            await service.require_admin("org-acme", "user-bob")

    async def test_missing_team(self, service: TeamService) -> None:
        """A missing team fails authorization before any existence check."""
        with pytest.raises(AuthorizationFailure):
            await service.require_admin("team-missing", "user-alice")


class TestTeamsForUser:
    """Tests for teams_for_user."""

    async def test_member_teams(self, service: TeamService) -> None:
        teams = await service.teams_for_user("user-bob")

        assert [team.team_id for team in teams] == ["org-acme"]

    async def test_unknown_user(self, service: TeamService) -> None:
        assert await service.teams_for_user("user-nobody") == []


class TestGetTeam:
    """Tests for get_team."""

    async def test_members_flagged(self, service: TeamService) -> None:
        team, members = await service.get_team("org-acme", "user-alice")

        assert team.team_id == "org-acme"
        flags = {member.user.user_id: member.admin for member in members}
        assert flags == {"user-alice": True, "user-bob": False, "user-carol": False}

    async def test_non_admin(self, service: TeamService) -> None:
        with pytest.raises(AuthorizationFailure):
            await service.get_team("org-acme", "user-bob")


class TestDeleteTeam:
    """Tests for delete_team."""

    async def test_admin_deletes(
        self, service: TeamService, memory_repo: InMemoryAuthRepository
    ) -> None:
        await service.delete_team("org-acme", "user-alice")

        assert await memory_repo.get_team("org-acme") is None
        bob = await memory_repo.get_user("user-bob")
        assert bob is not None and bob.teams == []

    async def test_non_admin(
        self, service: TeamService, memory_repo: InMemoryAuthRepository
    ) -> None:
        with pytest.raises(AuthorizationFailure):
            await service.delete_team("org-acme", "user-bob")

        assert await memory_repo.get_team("org-acme") is not None


class TestAddAdmin:
    """Tests for add_admin."""

    async def test_promotes_member(self, service: TeamService) -> None:
        team = await service.add_admin("org-acme", "user-alice", "user-bob")

        assert set(team.admins) == {"user-alice", "user-bob"}

    async def test_idempotent(self, service: TeamService) -> None:
        team = await service.add_admin("org-acme", "user-alice", "user-alice")

        assert team.admins == ["user-alice"]

    async def test_non_member(self, service: TeamService) -> None:
        """Only current members can become admins."""
        with pytest.raises(NotFound):
            await service.add_admin("org-acme", "user-alice", "slack-U0DAVE")

    async def test_non_admin_caller(
        self, service: TeamService, memory_repo: InMemoryAuthRepository
    ) -> None:
        """Authorization fails before anything changes."""
        with pytest.raises(AuthorizationFailure):
            await service.add_admin("org-acme", "user-bob", "user-bob")

        team = await memory_repo.get_team("org-acme")
        assert team is not None and team.admins == ["user-alice"]

    async def test_membership_lost_during_write(self, acme_team: Team, bob: User) -> None:
        """A conditional write that matches nothing reports the member missing."""
        repo = MagicMock()
        repo.get_team = AsyncMock(return_value=acme_team)
        repo.get_user = AsyncMock(return_value=bob)
        repo.add_admin = AsyncMock(return_value=None)

        with pytest.raises(NotFound):
            await TeamService(repo).add_admin("org-acme", "user-alice", "user-bob")


class TestRemoveAdmin:
    """Tests for remove_admin."""

    async def test_demotes_admin(self, service: TeamService) -> None:
        await service.add_admin("org-acme", "user-alice", "user-bob")

        team = await service.remove_admin("org-acme", "user-alice", "user-bob")

        assert team.admins == ["user-alice"]

    async def test_self_demotion(self, service: TeamService) -> None:
        """An admin can step down while another admin remains."""
        await service.add_admin("org-acme", "user-alice", "user-bob")

        team = await service.remove_admin("org-acme", "user-alice", "user-alice")

        assert team.admins == ["user-bob"]

    async def test_last_admin(self, service: TeamService) -> None:
        """The last admin can't be removed."""
        with pytest.raises(Conflict, match="at least one admin"):
            await service.remove_admin("org-acme", "user-alice", "user-alice")

    async def test_target_not_admin(self, service: TeamService) -> None:
        with pytest.raises(NotFound):
            await service.remove_admin("org-acme", "user-alice", "user-bob")

    async def test_target_not_member(self, service: TeamService) -> None:
        with pytest.raises(NotFound):
            await service.remove_admin("org-acme", "user-alice", "slack-U0DAVE")

    async def test_non_admin_caller(self, service: TeamService) -> None:
        with pytest.raises(AuthorizationFailure):
            await service.remove_admin("org-acme", "user-bob", "user-alice")

    async def test_concurrently_removed(self, bob: User) -> None:
        """An admin removed by someone else between check and write is not found."""
        both = Team(team_id="org-acme", admins=["user-alice", "user-bob"])
        after = Team(team_id="org-acme", admins=["user-alice"])
        repo = MagicMock()
        repo.get_team = AsyncMock(side_effect=[both, after])
        repo.get_user = AsyncMock(return_value=bob)
        repo.remove_admin = AsyncMock(return_value=None)

        with pytest.raises(NotFound):
            await TeamService(repo).remove_admin("org-acme", "user-alice", "user-bob")


def test_slack_users_share_rules() -> None:
    """Admin rights don't depend on how the user signed in."""
    team = Team(team_id="T1", admins=["slack-U1"])
    user = User(user_id="slack-U1", org_id="T1", auth_source=AuthSource.SLACK, teams=["T1"])

    assert is_admin(team, user.user_id)
    assert user.is_member_of("T1")
