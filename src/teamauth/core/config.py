"""Immutable service configuration passed to core components."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta

from teamauth.core.exceptions import ConfigurationError

DEFAULT_TOKEN_TTL = timedelta(hours=2)
SLACK_USER_SCOPES = ("identity.basic", "identity.email", "identity.avatar", "identity.team")


@dataclass(frozen=True)
class AuthConfig:
    """Configuration established once at startup and never mutated.

    Attributes:
        passphrase: Secret used to sign and verify tokens.
        auth_server_url: Public base URL of this service.
        ui_server_url: Base URL of the web UI that receives login redirects.
        slack_client_id: Slack OAuth client id.
        slack_client_secret: Slack OAuth client secret.
        slack_api_url: Base URL of the Slack Web API.
        slack_authorize_url: Slack OAuth authorize page.
        slack_timeout: Seconds before a Slack API call is abandoned.
        token_ttl: Lifetime of issued tokens.
    """

    passphrase: str = field(repr=False)
    auth_server_url: str = "http://localhost:3003"
    ui_server_url: str = "http://localhost:3449"
    slack_client_id: str = ""
    slack_client_secret: str = field(default="", repr=False)
    slack_api_url: str = "https://slack.com/api"
    slack_authorize_url: str = "https://slack.com/oauth/v2/authorize"
    slack_timeout: float = 10.0
    token_ttl: timedelta = DEFAULT_TOKEN_TTL

    def __post_init__(self) -> None:
        """Reject configuration the service cannot start with."""
        if not self.passphrase:
            raise ConfigurationError("A token signing passphrase is required")
        if self.token_ttl <= timedelta(0):
            raise ConfigurationError("Token TTL must be positive")

    @property
    def slack_redirect_uri(self) -> str:
        """OAuth callback URL registered with Slack."""
        return f"{self.auth_server_url.rstrip('/')}/sso/auth"
