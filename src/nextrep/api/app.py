"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from nextrep.api.food import router as food_router
from nextrep.api.goals import router as goals_router
from nextrep.api.locations import router as locations_router
from nextrep.api.progress import router as progress_router
from nextrep.api.schedule import router as schedule_router
from nextrep.api.trackers import router as trackers_router
from nextrep.api.users import router as users_router
from nextrep.app_logging import configure_logging
from nextrep.containers import AppContainer
from nextrep.errors import NextRepError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="NextRep", lifespan=lifespan)
    app.state.container = container

    app.include_router(goals_router)
    app.include_router(schedule_router)
    app.include_router(trackers_router)
    app.include_router(progress_router)
    app.include_router(food_router)
    app.include_router(locations_router)
    app.include_router(users_router)

    @app.exception_handler(NextRepError)
    async def handle_app_error(request: Request, exc: NextRepError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "%s %s failed: %s", request.method, request.url.path, exc.message
            )
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error_response(400, _validation_message(exc))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(500, "Internal server error")

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"success": False, "message": message}
    )


def _validation_message(exc: RequestValidationError) -> str:
    """Describe the first invalid request field."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{location}: {first.get('msg', 'invalid value')}".strip(": ")
