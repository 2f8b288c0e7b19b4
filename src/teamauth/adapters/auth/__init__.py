"""Auth store adapters."""

from teamauth.adapters.auth.postgres import PostgresAuthRepository

__all__ = ["PostgresAuthRepository"]
