"""API middleware."""

from teamauth.entrypoints.api.middleware.jwt_auth import AuthDep, verify_jwt

__all__ = ["AuthDep", "verify_jwt"]
