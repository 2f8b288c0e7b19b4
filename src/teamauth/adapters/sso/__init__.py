"""SSO adapters."""

from teamauth.adapters.sso.slack_client import SlackClient

__all__ = ["SlackClient"]
