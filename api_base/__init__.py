"""
api-base: JSON REST Controller Layer
=====================================

What: A thin convenience layer for JSON endpoints on top of Starlette/FastAPI.
How:  Request data from every source is merged into one mapping, handed to a
      named operation of a service object, and the outcome is resolved into a
      JSON response with a status code.

Architecture Note:

    ┌─────────────────────────────────────┐
    │     Routing glue (FastAPI router)   │  ← binds paths to operation names
    ├─────────────────────────────────────┤
    │   ApiController (Response Resolver) │  ← status + exception mapping
    ├─────────────────────────────────────┤
    │  RequestNormalizer (request data)   │  ← query / form / raw / JSON / route
    ├─────────────────────────────────────┤
    │     Service object (user supplied)  │  ← business logic, returns dicts
    └─────────────────────────────────────┘

    The controller never owns business rules. Services return either a
    success mapping or a mapping with an ``errors`` key; anything they raise
    is classified by the exception policy.
"""

__version__ = "1.0.0"

from api_base.controller import ApiController
from api_base.exceptions import (
    ApiBaseError,
    ExceptionPolicy,
    InvalidArgumentError,
    NotFoundError,
    OperationNotFoundError,
    ResponseEncodingError,
    ServiceFailureError,
    UnauthorizedError,
)
from api_base.request_data import RequestNormalizer
from api_base.status import RESOURCE_STATUSES, StatusPolicy, resource_status_policy

__all__ = [
    "__version__",
    "ApiController",
    "ApiBaseError",
    "ExceptionPolicy",
    "InvalidArgumentError",
    "NotFoundError",
    "OperationNotFoundError",
    "RequestNormalizer",
    "ResponseEncodingError",
    "RESOURCE_STATUSES",
    "ServiceFailureError",
    "StatusPolicy",
    "UnauthorizedError",
    "resource_status_policy",
]
