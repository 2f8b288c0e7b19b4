"""Dependency injection and application lifespan management."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import TYPE_CHECKING, Annotated

import structlog
from fastapi import Depends, Request

from teamauth.adapters.auth.postgres import PostgresAuthRepository
from teamauth.adapters.db.app_db import AppDatabase
from teamauth.adapters.db.memory import InMemoryAuthRepository
from teamauth.adapters.sso.slack_client import SlackClient
from teamauth.core.auth.gateway import AuthGateway
from teamauth.core.auth.invites import InviteService
from teamauth.core.auth.providers import EmailProvider, Providers, SlackProvider
from teamauth.core.auth.repository import AuthRepository
from teamauth.core.auth.users import UserService
from teamauth.core.config import AuthConfig
from teamauth.core.exceptions import ConfigurationError
from teamauth.core.rbac.teams import TeamService

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = structlog.get_logger()

STORE_BACKENDS = ("postgres", "memory")


class Settings:
    """Application settings loaded from environment."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        """Load settings from environment variables.

        Args:
            environ: Variables to read instead of the process environment.

        Raises:
            ConfigurationError: If the signing passphrase is missing or a value is invalid.
        """
        env = os.environ if environ is None else environ
        try:
            self.port = int(env.get("PORT", "3003"))
            slack_timeout = float(env.get("SLACK_TIMEOUT_SECONDS", "10"))
            token_ttl = timedelta(minutes=int(env.get("TOKEN_TTL_MINUTES", "120")))
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from None

        self.database_url = env.get("DATABASE_URL", "postgresql://localhost:5432/teamauth")
        self.store_backend = env.get("STORE_BACKEND", "postgres").lower()
        if self.store_backend not in STORE_BACKENDS:
            raise ConfigurationError(f"STORE_BACKEND must be one of {', '.join(STORE_BACKENDS)}")

        passphrase = env.get("TEAMAUTH_PASSPHRASE", "")
        if not passphrase:
            raise ConfigurationError("TEAMAUTH_PASSPHRASE must be set")

        self.auth = AuthConfig(
            passphrase=passphrase,
            auth_server_url=env.get("AUTH_SERVER_URL", f"http://localhost:{self.port}"),
            ui_server_url=env.get("UI_SERVER_URL", "http://localhost:3449"),
            slack_client_id=env.get("SLACK_CLIENT_ID", ""),
            slack_client_secret=env.get("SLACK_CLIENT_SECRET", ""),
            slack_api_url=env.get("SLACK_API_URL", "https://slack.com/api"),
            slack_timeout=slack_timeout,
            token_ttl=token_ttl,
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan - setup and teardown.

    This context manager handles:
    - Store setup (asyncpg pool, or the in-memory store)
    - Slack client configuration
    - Provider and gateway wiring
    """
    settings: Settings = app.state.settings
    config = settings.auth

    app_db: AppDatabase | None = None
    repo: AuthRepository | None = app.state.repository
    if repo is None:
        if settings.store_backend == "memory":
            repo = InMemoryAuthRepository()
        else:
            app_db = AppDatabase(settings.database_url)
            await app_db.connect()
            postgres_repo = PostgresAuthRepository(app_db)
            await postgres_repo.create_schema()
            repo = postgres_repo

    slack_client = app.state.slack_client or SlackClient(
        client_id=config.slack_client_id,
        client_secret=config.slack_client_secret,
        api_url=config.slack_api_url,
        timeout=config.slack_timeout,
    )

    providers = Providers(
        email=EmailProvider(repo, config),
        slack=SlackProvider(repo, config, slack_client),
    )

    # Store in app state
    app.state.repository = repo
    app.state.slack_client = slack_client
    app.state.providers = providers
    app.state.gateway = AuthGateway(config, providers)

    logger.info(
        "teamauth_started",
        port=settings.port,
        store=settings.store_backend,
        auth_server_url=config.auth_server_url,
    )

    yield

    if app_db is not None:
        await app_db.close()
    logger.info("teamauth_stopped")


def get_config(request: Request) -> AuthConfig:
    """Get service configuration from app state."""
    settings: Settings = request.app.state.settings
    return settings.auth


def get_repository(request: Request) -> AuthRepository:
    """Get the auth store from app state."""
    repo: AuthRepository = request.app.state.repository
    return repo


def get_providers(request: Request) -> Providers:
    """Get the identity providers from app state."""
    providers: Providers = request.app.state.providers
    return providers


def get_gateway(request: Request) -> AuthGateway:
    """Get the auth gateway from app state."""
    gateway: AuthGateway = request.app.state.gateway
    return gateway


def get_invite_service(repo: Annotated[AuthRepository, Depends(get_repository)]) -> InviteService:
    """Get invite service for the request."""
    return InviteService(repo)


def get_user_service(repo: Annotated[AuthRepository, Depends(get_repository)]) -> UserService:
    """Get organization user service for the request."""
    return UserService(repo)


def get_team_service(repo: Annotated[AuthRepository, Depends(get_repository)]) -> TeamService:
    """Get team service for the request."""
    return TeamService(repo)


# Annotated types for dependency injection
ConfigDep = Annotated[AuthConfig, Depends(get_config)]
ProvidersDep = Annotated[Providers, Depends(get_providers)]
GatewayDep = Annotated[AuthGateway, Depends(get_gateway)]
InviteServiceDep = Annotated[InviteService, Depends(get_invite_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
TeamServiceDep = Annotated[TeamService, Depends(get_team_service)]
