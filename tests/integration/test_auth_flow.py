"""End-to-end flows through the API against the in-memory store.

These walk several routes in sequence and check the state each one leaves
behind for the next.
"""

from urllib.parse import parse_qs, urlparse

from fastapi.testclient import TestClient

from teamauth.core.auth import jwt
from teamauth.core.auth.providers import SlackIdentity
from teamauth.core.config import AuthConfig
from tests.fixtures.mocks import FakeSlackApi


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class TestEmailSignUpFlow:
    """Register, sign in, refresh and manage the organization."""

    def test_register_then_sign_in(self, client: TestClient, auth_config: AuthConfig) -> None:
        """A registered user can sign in with the same credentials."""
        created = client.post(
            "/email/users",
            json={"email": "Nina@Example.com", "password": "nina-password"},  # pragma: allowlist secret
        )
        assert created.status_code == 201

        signed_in = client.get("/email/auth", auth=("nina@example.com", "nina-password"))

        assert signed_in.status_code == 200
        first = jwt.validate(created.text, auth_config.passphrase)
        second = jwt.validate(signed_in.text, auth_config.passphrase)
        assert first.user_id == second.user_id
        assert second.email == "nina@example.com"

    def test_new_user_administers_own_team(
        self, client: TestClient, auth_config: AuthConfig
    ) -> None:
        """Registration creates an organization whose default team the user administers."""
        created = client.post(
            "/email/users", json={"email": "olga@example.com", "password": "olga-password"}
        )
        claims = jwt.validate(created.text, auth_config.passphrase)

        teams = client.get("/teams", headers=_bearer(created.text)).json()["collection"]["teams"]

        assert [(team["team-id"], team["admin"]) for team in teams] == [(claims.org_id, True)]

    def test_duplicate_registration_creates_nothing(
        self, client: TestClient, auth_config: AuthConfig
    ) -> None:
        created = client.post(
            "/email/users", json={"email": "pia@example.com", "password": "pia-password"}
        )
        claims = jwt.validate(created.text, auth_config.passphrase)

        duplicate = client.post(
            "/email/users", json={"email": "PIA@example.com", "password": "other-password"}
        )

        assert duplicate.status_code == 409
        users = client.get(
            f"/org/{claims.org_id}/users", headers=_bearer(created.text)
        ).json()["collection"]["users"]
        # The caller is excluded, so their organization lists nobody else
        assert users == []

    def test_invite_then_list(self, client: TestClient, auth_config: AuthConfig) -> None:
        """An invite shows up as a pending member of the inviter's organization."""
        created = client.post(
            "/email/users", json={"email": "quinn@example.com", "password": "quinn-password"}
        )
        claims = jwt.validate(created.text, auth_config.passphrase)
        users_url = f"/org/{claims.org_id}/users"

        invited = client.post(
            f"{users_url}/invite", json={"email": "rae@example.com"}, headers=_bearer(created.text)
        )
        listed = client.get(users_url, headers=_bearer(created.text)).json()["collection"]["users"]

        assert invited.status_code == 201
        assert [(user["email"], user["status"]) for user in listed] == [
            ("rae@example.com", "pending")
        ]


class TestSlackSignInFlow:
    """Sign in with Slack, then use the session."""

    def test_first_sign_in_provisions_user(
        self,
        client: TestClient,
        fake_slack: FakeSlackApi,
        auth_config: AuthConfig,
    ) -> None:
        """A new Slack user lands in the org named by their Slack team."""
        fake_slack.add_identity(
            "code-new",
            SlackIdentity(
                slack_id="U0SAM",
                team_id="T0NEW",
                access_token="xoxp-sam",
                email="sam@example.net",
                name="Sam Sato",
            ),
        )

        redirect = client.get("/sso/auth", params={"code": "code-new"}, follow_redirects=False)
        token = parse_qs(urlparse(redirect.headers["location"]).query)["jwt"][0]
        claims = jwt.validate(token, auth_config.passphrase)

        assert claims.user_id == "slack-U0SAM"
        assert claims.org_id == "T0NEW"
        settings = client.get("/", headers=_bearer(token)).json()
        assert {link["rel"] for link in settings["links"]} >= {"refresh"}

    def test_test_token_is_verified(self, client: TestClient) -> None:
        data = client.get("/test-token").json()

        assert data["verified"] is True
