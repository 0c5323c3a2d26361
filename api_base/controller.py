"""
api-base: API Controller (Response Resolver)
=============================================

What:  Runs one request through the pipeline: collect inputs, call a named
       service operation, turn its result or exception into a JSON response.
Why:   Keeps endpoints thin. The endpoint only names the operation; the
       controller owns status codes and error formatting.
Who:   Instantiated per request by route handlers (see ``api_base.routing``).

Request Flow:
    ┌──────────────┐    ┌────────────────┐    ┌───────────────────┐
    │  Normalizer  │───▶│service.op(data)│───▶│ determine_status  │──▶ 2xx / 400
    │  (collect)   │    └────────────────┘    └───────────────────┘
    └──────────────┘            │ raises
                                ▼
                       ┌───────────────────┐
                       │ handle_exception  │──▶ 4xx / 5xx {"error": message}
                       └───────────────────┘

Collaborators:
    service_provider  callable returning the service object
    success_status    callable mapping operation name → status code

    Both can be injected through the constructor or supplied by overriding
    ``get_service()`` / ``get_success_status()`` in a subclass.
"""

import inspect
import logging
from typing import Any, Callable, Mapping, Optional

from fastapi.encoders import jsonable_encoder
from starlette.datastructures import UploadFile
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from api_base import responses
from api_base.config import settings
from api_base.exceptions import (
    ApiBaseError,
    DEFAULT_EXCEPTION_RULES,
    ExceptionPolicy,
    OperationNotFoundError,
    ResponseEncodingError,
    error_message,
)
from api_base.request_data import RequestNormalizer

logger = logging.getLogger(__name__)

ServiceProvider = Callable[[], Any]
SuccessStatus = Callable[[str], int]


def default_exception_policy() -> ExceptionPolicy:
    """Default rules with the configured fallback for unclassified errors."""
    return ExceptionPolicy(
        rules=DEFAULT_EXCEPTION_RULES,
        fallback_status=settings.unclassified_error_status,
    )


class ApiController:
    """
    Request-scoped controller that delegates to a service object.

    Usage:
        controller = ApiController(
            request,
            service_provider=lambda: product_service,
            success_status=resource_status_policy(),
        )
        return await controller.handle_request("create")

    Contract:
        - ``handle_request`` always returns a response; no exception escapes.
        - A result containing an ``errors`` key is a failure (400) regardless
          of the success-status policy.
        - Service operations receive exactly one argument: the merged input
          dict. They may be plain functions or coroutines.
    """

    def __init__(
        self,
        request: Request,
        service_provider: Optional[ServiceProvider] = None,
        success_status: Optional[SuccessStatus] = None,
        *,
        error_policy: Optional[ExceptionPolicy] = None,
    ):
        self.request = request
        self.normalizer = RequestNormalizer(request)
        self._service_provider = service_provider
        self._success_status = success_status
        self.error_policy = error_policy or default_exception_policy()

    # ── Collaborators ─────────────────────────────────────────────────────

    def get_service(self) -> Any:
        if self._service_provider is None:
            raise NotImplementedError(
                f"{type(self).__name__} needs a service_provider or a get_service() override"
            )
        return self._service_provider()

    def get_success_status(self, operation: str) -> int:
        if self._success_status is None:
            raise NotImplementedError(
                f"{type(self).__name__} needs a success_status or a get_success_status() override"
            )
        return self._success_status(operation)

    # ── Request side ──────────────────────────────────────────────────────

    async def collect_request_data(self, route_params: Optional[Mapping[str, Any]] = None) -> dict:
        return await self.normalizer.collect(route_params)

    async def get_json_data(self) -> dict:
        return await self.normalizer.get_json_data()

    async def get_file_input(self, field: str) -> Optional[UploadFile]:
        return await self.normalizer.get_file_input(field)

    # ── Pipeline ──────────────────────────────────────────────────────────

    async def handle_request(
        self,
        operation: str,
        route_params: Optional[Mapping[str, Any]] = None,
    ) -> Response:
        """
        Collect inputs, run ``operation`` on the service, resolve the response.

        Args:
            operation:    Name of the service method to call
            route_params: Path parameters; they override every other input

        Returns:
            The service result with the status from ``determine_status``, or
            the error response built by ``handle_exception``.
        """
        try:
            data = await self.collect_request_data(route_params)
            service = self.get_service()
            handler = getattr(service, operation, None)
            if handler is None or not callable(handler):
                raise OperationNotFoundError(
                    operation, context={"service": type(service).__name__}
                )

            result = handler(data)
            if inspect.isawaitable(result):
                result = await result

            body = _encode(result, operation)
            status = self.determine_status(body, operation)
            response = _render(body, status, operation)
        except Exception as exc:
            return self.handle_exception(exc)

        logger.debug("Operation %s resolved with status %d", operation, status)
        return response

    def determine_status(self, result: Any, operation: str) -> int:
        """400 when the result carries ``errors``, else the policy's success code."""
        if isinstance(result, Mapping) and "errors" in result:
            return 400
        return self.get_success_status(operation)

    def handle_exception(self, exc: Exception) -> JSONResponse:
        """
        Map a raised exception to ``{"error": message}`` with a policy status.

        The message is passed through verbatim. Context and tracebacks are
        logged server-side only.
        """
        status = self.error_policy.status_for(exc)
        message = error_message(exc)
        context = exc.context if isinstance(exc, ApiBaseError) else {}

        if status >= 500:
            logger.error(
                "%s %s failed with %s: %s | Context: %s",
                self.request.method,
                self.request.url.path,
                type(exc).__name__,
                message,
                context,
                exc_info=exc,
            )
        else:
            logger.warning(
                "%s %s rejected with %s (%d): %s",
                self.request.method,
                self.request.url.path,
                type(exc).__name__,
                status,
                message,
            )
        return responses.respond_error(message, status)

    # ── Response helpers ──────────────────────────────────────────────────

    def respond_created(self, body: Optional[Any] = None) -> JSONResponse:
        return responses.respond_created(body)

    def respond_no_content(self) -> Response:
        return responses.respond_no_content()

    def respond_not_found(self, message: str = "Resource not found") -> JSONResponse:
        return responses.respond_not_found(message)

    def respond_unauthorized(self, message: str = "Unauthorized") -> JSONResponse:
        return responses.respond_unauthorized(message)

    def respond_forbidden(self, message: str = "Forbidden") -> JSONResponse:
        return responses.respond_forbidden(message)

    def respond_validation_error(self, errors: Any) -> JSONResponse:
        return responses.respond_validation_error(errors)


def _encode(result: Any, operation: str) -> Any:
    """JSON-ready form of a service result, nested models and dates included."""
    try:
        return jsonable_encoder(result)
    except (TypeError, ValueError) as exc:
        raise ResponseEncodingError(operation, context={"cause": str(exc)}) from exc


def _render(body: Any, status: int, operation: str) -> Response:
    # json.dumps still rejects NaN and infinity after encoding
    try:
        return responses.respond(body, status)
    except (TypeError, ValueError) as exc:
        raise ResponseEncodingError(operation, context={"cause": str(exc)}) from exc
