"""
api-base: FastAPI Application Factory
======================================

What:  Builds a FastAPI app wired with api-base logging, middleware and
       exception handlers, then mounts the caller's routers.
Why:   Controllers already turn service errors into responses. Errors raised
       outside a controller (dependencies, custom routes) need the same
       ``{"error": message}`` shape and the same status policy.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌─────────────────┐               │
    │  │   Req ID     │→│    Logging      │               │
    │  └──────────────┘ └─────────────────┘               │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────────┐ ┌─────────────────┐       │
    │  │ caller's routers     │ │ GET /health     │       │
    │  └──────────────────────┘ └─────────────────┘       │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ ApiBaseError → policy status │ Exception→500 │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from api_base import __version__
from api_base.controller import default_exception_policy
from api_base.exceptions import ApiBaseError, error_message
from api_base.logging_config import setup_logging
from api_base.middleware import RequestIDMiddleware, RequestLoggingMiddleware, request_id_var
from api_base.responses import respond_error

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("%s %s starting up", app.title, app.version)

    yield

    logger.info("%s shutting down", app.title)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global handlers for errors raised outside a controller.

    Handler hierarchy:
        ApiBaseError (and subclasses) → status from the exception policy
        Exception (fallback)          → 500 with a generic message

    The fallback never echoes the exception text; unlike service errors,
    these come from framework or application wiring and may hold internals.
    """
    policy = default_exception_policy()

    @app.exception_handler(ApiBaseError)
    async def handle_api_base_error(request: Request, exc: ApiBaseError):
        rid = request_id_var.get("")
        status = policy.status_for(exc)
        if status >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return respond_error(error_message(exc), status)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "An unexpected error occurred"},
        )


def create_app(
    *routers: APIRouter,
    title: str = "api-base",
    version: str = __version__,
) -> FastAPI:
    """
    Create a FastAPI application serving the given routers.

    Usage:
        app = create_app(
            resource_router("/api/products", lambda: product_service),
            title="Products API",
        )
    """
    app = FastAPI(title=title, version=version, lifespan=lifespan)

    # Last added runs first: RequestID → Logging → routes
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    @app.get("/health", tags=["Health"])
    async def health() -> dict:
        return {"status": "ok", "version": __version__}

    for router in routers:
        app.include_router(router)

    return app
