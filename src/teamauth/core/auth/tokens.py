"""Identifier and one-time secret generation for user records and invites."""

import secrets
from uuid import uuid4

# Token configuration
ONE_TIME_SECRET_BYTES = 32  # 256 bits of entropy
SLACK_USER_PREFIX = "slack-"


def generate_one_time_secret() -> str:
    """Generate a cryptographically secure invite secret.

    Returns:
        URL-safe base64 encoded token string.
    """
    return secrets.token_urlsafe(ONE_TIME_SECRET_BYTES)


def new_user_id() -> str:
    """Unique id for a locally created user."""
    return str(uuid4())


def new_org_id() -> str:
    """Unique id for a newly created organization."""
    return str(uuid4())


def slack_user_id(slack_id: str) -> str:
    """Stable local user id for a Slack user."""
    return f"{SLACK_USER_PREFIX}{slack_id}"
