"""Domain-specific exceptions.

All exceptions in the teamauth system inherit from TeamAuthError, making it
easy to catch all system errors while still being able to handle specific
error types. Each error carries the HTTP status it maps to, so the API layer
renders failures without re-interpreting them.
"""

from __future__ import annotations


class TeamAuthError(Exception):
    """Base exception for all teamauth errors.

    Attributes:
        status_code: HTTP status the error maps to.
        code: Stable machine-readable error code.
    """

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str = "", status_code: int | None = None) -> None:
        """Initialize the error.

        Args:
            message: Human readable description.
            status_code: Override for the default HTTP status of this error type.
        """
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class AuthenticationFailure(TeamAuthError):
    """Missing, invalid or expired token, or bad credentials.

    Attributes:
        challenge: ``WWW-Authenticate`` value sent with the 401.
    """

    status_code = 401
    code = "AUTHENTICATION_FAILURE"
    challenge = 'Bearer realm="teamauth"'


class CredentialsRejected(AuthenticationFailure):
    """HTTP Basic email/password sign-in failed or sent no credentials."""

    challenge = 'Basic realm="teamauth"'


class AuthorizationFailure(TeamAuthError):
    """The caller is authenticated but may not perform the operation.

    Raised when the caller is not an admin of the team, or when the target
    resource belongs to a different organization.
    """

    status_code = 403
    code = "AUTHORIZATION_FAILURE"


class ValidationFailure(TeamAuthError):
    """Malformed request body or missing required field."""

    status_code = 400
    code = "VALIDATION_FAILURE"


class StaleIdentity(TeamAuthError):
    """Token claims no longer match the store or the upstream provider.

    Raised on refresh when the user is gone, has moved to another
    organization, or the carried SSO access token was revoked.
    """

    status_code = 400
    code = "STALE_IDENTITY"


class NotFound(TeamAuthError):
    """No such user or team."""

    status_code = 404
    code = "NOT_FOUND"


class Conflict(TeamAuthError):
    """Duplicate email, ineligible re-invite, or last-admin removal."""

    status_code = 409
    code = "CONFLICT"


class ProviderUnavailable(TeamAuthError):
    """An upstream identity provider call failed or timed out.

    This is reported to the caller, never retried inline.
    """

    status_code = 500
    code = "PROVIDER_UNAVAILABLE"


class InternalError(TeamAuthError):
    """A downstream dependency failed unexpectedly."""


class ConfigurationError(TeamAuthError):
    """Process configuration is unusable.

    This is a FATAL startup error (e.g. missing signing passphrase), never a
    per-request failure.
    """

    code = "CONFIGURATION_ERROR"
