"""Tests for sign-in with Slack routes."""

from urllib.parse import parse_qs, urlparse

from fastapi.testclient import TestClient

from teamauth.core.auth import jwt
from teamauth.core.auth.providers import SlackIdentity
from teamauth.core.auth.types import AuthSource, User
from teamauth.core.config import AuthConfig
from tests.fixtures.domain_objects import bearer, claims_of
from tests.fixtures.mocks import FakeSlackApi


def login_params(location: str) -> dict[str, list[str]]:
    url = urlparse(location)
    assert f"{url.scheme}://{url.netloc}{url.path}" == "http://ui.example.com/login"
    return parse_qs(url.query)


def sign_in(client: TestClient, fake_slack: FakeSlackApi, identity: SlackIdentity) -> str:
    """Complete a Slack sign-in and return the issued token."""
    fake_slack.add_identity("code-1", identity)
    response = client.get("/sso/auth", params={"code": "code-1"}, follow_redirects=False)
    return login_params(response.headers["location"])["jwt"][0]


class TestSsoCallback:
    """Test GET /sso/auth."""

    def test_test_mode(self, client: TestClient) -> None:
        response = client.get("/sso/auth", params={"test": "true"})

        assert response.status_code == 200
        assert response.json() == {"test": True, "ok": True}

    def test_success_redirects_with_token(
        self,
        client: TestClient,
        fake_slack: FakeSlackApi,
        slack_identity: SlackIdentity,
        auth_config: AuthConfig,
    ) -> None:
        """Should redirect to the UI with a Slack session token."""
        fake_slack.add_identity("code-1", slack_identity)

        response = client.get("/sso/auth", params={"code": "code-1"}, follow_redirects=False)

        assert response.status_code == 302
        token = login_params(response.headers["location"])["jwt"][0]
        claims = jwt.validate(token, auth_config.passphrase)
        assert claims.user_id == "slack-U0DAVE"
        assert claims.auth_source is AuthSource.SLACK
        assert claims.user_token == "xoxp-dave"

    def test_user_declined(self, client: TestClient) -> None:
        response = client.get(
            "/sso/auth", params={"error": "access_denied"}, follow_redirects=False
        )

        assert response.status_code == 302
        assert login_params(response.headers["location"]) == {"access": ["access_denied"]}

    def test_rejected_code(self, client: TestClient) -> None:
        response = client.get("/sso/auth", params={"code": "bad"}, follow_redirects=False)

        assert login_params(response.headers["location"]) == {"access": ["denied"]}

    def test_slack_unavailable(self, client: TestClient, fake_slack: FakeSlackApi) -> None:
        fake_slack.unavailable = True

        response = client.get("/sso/auth", params={"code": "code-1"}, follow_redirects=False)

        assert login_params(response.headers["location"]) == {"access": ["failed"]}

    def test_malformed_email_still_signs_in(
        self, client: TestClient, fake_slack: FakeSlackApi, auth_config: AuthConfig
    ) -> None:
        """Should sign the user in without an email rather than fail."""
        identity = SlackIdentity(
            slack_id="U0GIL", team_id="T0NEW", access_token="xoxp-gil", email="gil@@example"
        )

        token = sign_in(client, fake_slack, identity)

        claims = jwt.validate(token, auth_config.passphrase)
        assert claims.user_id == "slack-U0GIL"
        assert claims.email is None


class TestSsoRefresh:
    """Test GET /sso/refresh-token."""

    def test_refresh(
        self,
        client: TestClient,
        fake_slack: FakeSlackApi,
        slack_identity: SlackIdentity,
        auth_config: AuthConfig,
    ) -> None:
        """Should reissue while Slack honours the access token."""
        token = sign_in(client, fake_slack, slack_identity)

        response = client.get("/sso/refresh-token", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/jwt")
        assert jwt.validate(response.text, auth_config.passphrase).user_id == "slack-U0DAVE"

    def test_revoked(
        self, client: TestClient, fake_slack: FakeSlackApi, slack_identity: SlackIdentity
    ) -> None:
        """Should answer 400 once Slack revokes the access token."""
        token = sign_in(client, fake_slack, slack_identity)
        fake_slack.valid_tokens.clear()

        response = client.get("/sso/refresh-token", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 400
        assert response.json()["code"] == "STALE_IDENTITY"

    def test_email_token_rejected(
        self, client: TestClient, auth_config: AuthConfig, alice: User
    ) -> None:
        """Should not refresh tokens from another provider."""
        response = client.get(
            "/sso/refresh-token", headers=bearer(auth_config, claims_of(auth_config, alice))
        )

        assert response.status_code == 401

    def test_missing_token(self, client: TestClient) -> None:
        response = client.get("/sso/refresh-token")

        assert response.status_code == 401
        assert response.headers["www-authenticate"].startswith("Bearer")
