"""
api-base: Exception Hierarchy and Exception Policy
===================================================

What:  Package exceptions plus the rule table that maps any exception raised
       by a service operation to an HTTP status code.
Why:   Services signal failure either by returning an ``errors`` mapping or by
       raising. Raised errors need one consistent translation so no endpoint
       ever leaks a stack trace or picks a status ad hoc.
How:   ``ExceptionPolicy`` holds ordered (kinds, status) rules. Resolution walks
       the exception's MRO and stops at the first class a rule names, so the
       most specific matching kind wins regardless of rule order.

Default Policy:
    NotFoundError            → 404 Not Found
    UnauthorizedError        → 401 Unauthorized
    ValueError / TypeError   → 400 Bad Request (invalid argument / bad input)
    RuntimeError             → 500 Internal Server Error
    anything else            → UNCLASSIFIED_ERROR_STATUS (400 unless configured)

Exception Hierarchy:
    ApiBaseError (base)
    ├── InvalidArgumentError      (also a ValueError)   → 400
    ├── ServiceFailureError       (also a RuntimeError) → 500
    │   └── OperationNotFoundError                      → 500
    ├── NotFoundError                                   → 404
    └── UnauthorizedError                               → 401

Design Decision:
    Unclassified errors fall back to 400, not 500. This keeps compatibility
    with controllers that treat unknown failures as client-attributable. The
    fallback is a named constant and a setting so deployments can move it.
"""

from typing import Any, Dict, Iterable, Optional, Sequence, Tuple, Type, Union

UNCLASSIFIED_ERROR_STATUS = 400

ExceptionKinds = Union[Type[BaseException], Tuple[Type[BaseException], ...]]


class ApiBaseError(Exception):
    """
    Base exception for all api-base errors.

    Attributes:
        message:  User-facing error description (returned in the ``error`` key)
        context:  Additional debug info (logged, never returned to the client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class InvalidArgumentError(ApiBaseError, ValueError):
    """
    Raised by services when the caller supplied unusable input.

    HTTP: 400 Bad Request

    Subclasses ``ValueError`` so it is classified like any other invalid
    argument even under a custom policy that only lists builtin kinds.
    """

    def __init__(
        self,
        message: str = "Invalid argument",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class ServiceFailureError(ApiBaseError, RuntimeError):
    """Raised when a service fails for reasons the client cannot fix. HTTP: 500"""

    def __init__(
        self,
        message: str = "The service failed to complete the operation",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class OperationNotFoundError(ServiceFailureError):
    """
    Raised when the service object has no callable for the requested operation.

    This is a wiring mistake in the application, so it is a server fault (500)
    and the message names only the operation, never the service class.
    """

    def __init__(self, operation: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["operation"] = operation
        super().__init__(
            message=f"Operation '{operation}' is not available",
            context=ctx,
        )
        self.operation = operation


class ResponseEncodingError(ServiceFailureError):
    """
    Raised when an operation's result cannot be rendered as JSON.

    The result came from the server, so this is a 500. The encoder's own
    message stays in the context and the logs.
    """

    def __init__(self, operation: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["operation"] = operation
        super().__init__(
            message=f"Result of operation '{operation}' could not be encoded",
            context=ctx,
        )
        self.operation = operation


class NotFoundError(ApiBaseError):
    """
    Raised when a requested resource does not exist.

    HTTP: 404 Not Found. Message text matches ``respond_not_found``.
    """

    def __init__(
        self,
        message: str = "Resource not found",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class UnauthorizedError(ApiBaseError):
    """Raised when the caller is not authenticated. HTTP: 401"""

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


# ══════════════════════════════════════════════════════════════════════════
# Exception Policy
# ══════════════════════════════════════════════════════════════════════════

DEFAULT_EXCEPTION_RULES: Tuple[Tuple[ExceptionKinds, int], ...] = (
    (NotFoundError, 404),
    (UnauthorizedError, 401),
    ((ValueError, TypeError), 400),
    (RuntimeError, 500),
)


class ExceptionPolicy:
    """
    Ordered table mapping exception kinds to HTTP status codes.

    Usage:
        policy = ExceptionPolicy()
        policy.status_for(ValueError("bad"))        # 400
        policy.status_for(RuntimeError("boom"))     # 500
        policy.status_for(KeyError("x"))            # fallback (400)

    Why walk the MRO instead of isinstance() over the rules:
        With isinstance() the first listed rule wins, so a broad rule placed
        early would shadow a narrower one. Walking the MRO picks the closest
        ancestor that any rule mentions. Rule order only breaks ties when two
        rules name the same class.
    """

    def __init__(
        self,
        rules: Optional[Iterable[Tuple[ExceptionKinds, int]]] = None,
        fallback_status: int = UNCLASSIFIED_ERROR_STATUS,
    ):
        self.fallback_status = fallback_status
        self._table: Dict[Type[BaseException], int] = {}
        for kinds, status in rules if rules is not None else DEFAULT_EXCEPTION_RULES:
            for kind in _as_tuple(kinds):
                # First rule naming a class wins
                self._table.setdefault(kind, status)

    def status_for(self, exc: BaseException) -> int:
        for cls in type(exc).__mro__:
            status = self._table.get(cls)
            if status is not None:
                return status
        return self.fallback_status

    def with_rule(self, kinds: ExceptionKinds, status: int) -> "ExceptionPolicy":
        """Return a copy where ``kinds`` map to ``status``, replacing earlier rules."""
        policy = ExceptionPolicy(rules=(), fallback_status=self.fallback_status)
        policy._table = dict(self._table)
        for kind in _as_tuple(kinds):
            policy._table[kind] = status
        return policy

    @property
    def rules(self) -> Sequence[Tuple[Type[BaseException], int]]:
        return tuple(self._table.items())


def error_message(exc: BaseException) -> str:
    """Message text for the ``error`` body key, passed through verbatim."""
    if isinstance(exc, ApiBaseError):
        return exc.message
    return str(exc)


def _as_tuple(kinds: ExceptionKinds) -> Tuple[Type[BaseException], ...]:
    if isinstance(kinds, tuple):
        return kinds
    return (kinds,)
