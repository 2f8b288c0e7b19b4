"""Multi-tenant session tokens, dual-provider sign-in and team-admin authorization."""

__version__ = "0.1.0"
