"""FastAPI application definition."""

from __future__ import annotations

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from teamauth import __version__
from teamauth.core.auth.providers import SlackApi
from teamauth.core.auth.repository import AuthRepository
from teamauth.core.exceptions import AuthenticationFailure, TeamAuthError, ValidationFailure

from .deps import Settings, lifespan
from .routes import api_router

logger = structlog.get_logger()


async def handle_teamauth_error(request: Request, exc: TeamAuthError) -> JSONResponse:
    """Render a domain error with the status it maps to."""
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, code=exc.code, error=str(exc))
    headers = None
    if exc.status_code == 401:
        # 401s from other errors, such as a cross-org delete, use the bearer challenge
        challenge = getattr(exc, "challenge", AuthenticationFailure.challenge)
        headers = {"WWW-Authenticate": challenge}
    return JSONResponse(
        {"code": exc.code, "detail": str(exc)},
        status_code=exc.status_code,
        headers=headers,
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as a 400 validation failure."""
    fields = [".".join(str(part) for part in error["loc"]) for error in exc.errors()]
    logger.info("request_invalid", path=request.url.path, fields=fields)
    return await handle_teamauth_error(request, ValidationFailure(f"Invalid request: {', '.join(fields)}"))


def create_app(
    settings: Settings | None = None,
    repository: AuthRepository | None = None,
    slack_client: SlackApi | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Settings to use instead of the environment.
        repository: Store to use instead of the configured backend.
        slack_client: Slack client to use instead of the real API.

    Raises:
        ConfigurationError: If settings come from an unusable environment.
    """
    app = FastAPI(
        title="teamauth",
        description="Session tokens, sign-in and team administration",
        version=__version__,
        lifespan=lifespan,
        redirect_slashes=False,  # Prevent 307 redirects that lose auth headers
    )
    app.state.settings = settings or Settings()
    app.state.repository = repository
    app.state.slack_client = slack_client

    # CORS middleware for the UI
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TeamAuthError, handle_teamauth_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_validation_error)  # type: ignore[arg-type]

    app.include_router(api_router)
    return app


def main() -> None:
    """Run the server."""
    settings = Settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)
