"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from meeting_activity.api.activities import router as activities_router
from meeting_activity.api.realtime import router as realtime_router
from meeting_activity.app_logging import configure_logging
from meeting_activity.containers import AppContainer
from meeting_activity.domain.errors import (
    ActiveMeetingConflict,
    AuthenticationRequired,
    PersistenceError,
    ValidationError,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(activities_router)
    app.include_router(realtime_router)

    @app.exception_handler(AuthenticationRequired)
    async def authentication_required(
        request: Request, exc: AuthenticationRequired
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED, content={"error": str(exc)}
        )

    @app.exception_handler(ValidationError)
    async def invalid_activity(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)}
        )

    @app.exception_handler(RequestValidationError)
    async def invalid_request(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request body", "detail": _error_fields(exc)},
        )

    @app.exception_handler(ActiveMeetingConflict)
    async def active_meeting(
        request: Request, exc: ActiveMeetingConflict
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT, content={"error": str(exc)}
        )

    @app.exception_handler(PersistenceError)
    async def persistence_failed(
        request: Request, exc: PersistenceError
    ) -> JSONResponse:
        logger.exception(
            "Activity store request failed",
            exc_info=exc,
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app


def _error_fields(exc: RequestValidationError) -> list[str]:
    """Return dotted locations of the invalid request fields."""
    return [".".join(str(part) for part in error["loc"]) for error in exc.errors()]
