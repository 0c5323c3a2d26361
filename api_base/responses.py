"""
api-base: Response Helpers
===========================

What:  Pure constructors for the JSON responses a controller sends.
Why:   Every endpoint shares the same body shapes: ``{"error": "..."}`` for a
       single failure message and ``{"errors": ...}`` for structured
       validation failures. Building them in one place keeps that contract.
How:   Each helper returns a fresh Starlette response. Helpers hold no state,
       so equal arguments always render byte-identical bodies.
"""

from typing import Any, Optional

from starlette.responses import JSONResponse, Response


def respond(body: Any, status: int = 200) -> Response:
    """JSON response with ``body``; a 204 status always gets an empty body."""
    if status == 204:
        return respond_no_content()
    return JSONResponse(content=body, status_code=status)


def respond_created(body: Optional[Any] = None) -> JSONResponse:
    return JSONResponse(content=body if body is not None else {}, status_code=201)


def respond_no_content() -> Response:
    return Response(status_code=204)


def respond_error(message: str, status: int) -> JSONResponse:
    """Single-message failure body: ``{"error": message}``."""
    return JSONResponse(content={"error": message}, status_code=status)


def respond_not_found(message: str = "Resource not found") -> JSONResponse:
    return respond_error(message, 404)


def respond_unauthorized(message: str = "Unauthorized") -> JSONResponse:
    return respond_error(message, 401)


def respond_forbidden(message: str = "Forbidden") -> JSONResponse:
    return respond_error(message, 403)


def respond_server_error(message: str = "Internal server error") -> JSONResponse:
    return respond_error(message, 500)


def respond_validation_error(errors: Any) -> JSONResponse:
    """
    422 with structured errors under the plural ``errors`` key.

    Use this instead of returning an ``errors`` result when the controller
    wants to distinguish field validation (422) from generic bad input (400).
    """
    return JSONResponse(content={"errors": errors}, status_code=422)
