"""FastAPI application for the bountyhook management API."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from bountyhook import __version__
from bountyhook.config import Settings
from bountyhook.exceptions import BountyHookError, NotFoundError, ValidationError
from bountyhook.logging import configure_logging, get_logger
from bountyhook.service import RelayService

from .router import router, set_service

logger = get_logger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Map bountyhook errors to HTTP responses."""

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle malformed request bodies with 400 status."""
        errors = exc.errors()
        first = errors[0] if errors else {}
        loc = [str(part) for part in first.get("loc", ()) if part != "body"]
        error = ValidationError(".".join(loc) or "body", first.get("msg", "invalid request"))
        logger.warning("Invalid request", field=error.field, path=str(request.url))
        return JSONResponse(status_code=400, content=error.to_dict())

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        """Handle validation errors with 400 status."""
        logger.warning(
            "Validation error", field=exc.field, error=exc.message, path=str(request.url)
        )
        return JSONResponse(status_code=400, content=exc.to_dict())

    @app.exception_handler(NotFoundError)
    async def not_found_error_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        """Handle not found errors with 404 status."""
        logger.info(
            "Resource not found",
            resource_type=exc.resource_type,
            resource_id=exc.resource_id,
            path=str(request.url),
        )
        return JSONResponse(status_code=404, content=exc.to_dict())

    @app.exception_handler(BountyHookError)
    async def bountyhook_error_handler(request: Request, exc: BountyHookError) -> JSONResponse:
        """Handle all other bountyhook errors with 500 status."""
        logger.error("bountyhook error", error=exc.message, code=exc.code, path=str(request.url))
        return JSONResponse(status_code=500, content=exc.to_dict())


def create_app(
    settings: Settings | None = None,
    service: RelayService | None = None,
) -> FastAPI:
    """Create the management API application.

    The lifespan loads persisted state, starts the poller (first cycle
    runs immediately) and stops it on shutdown.

    Args:
        settings: Optional settings. Uses environment if None.
        service: Optional pre-built service (tests inject one).

    Returns:
        Configured FastAPI application.

    Example:
        ```python
        from bountyhook.api import create_app

        app = create_app()
        # Run with: uvicorn bountyhook.api:app
        ```
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        relay = service or RelayService.create(settings)
        configure_logging(level=relay.settings.log_level, format=relay.settings.log_format)
        logger.info("Starting bountyhook", version=__version__, env=relay.settings.env)

        relay.initialize()
        set_service(relay)
        relay.start()

        yield

        await relay.stop()
        set_service(None)

    app = FastAPI(
        title="bountyhook",
        description="Bounty board webhook relay: signed, retried lifecycle notifications.",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    register_exception_handlers(app)
    app.include_router(router)

    return app


# Default app instance for uvicorn
app = create_app()
