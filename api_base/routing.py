"""
api-base: Routing Glue
=======================

What:  Binds URL paths to service operation names on a FastAPI ``APIRouter``.
Why:   Most JSON resources expose the same five operations. Declaring them
       once keeps application code to "which service, which prefix".
How:   Each endpoint builds an ``ApiController`` for the incoming request and
       calls ``handle_request(operation, request.path_params)``, so path
       parameters become route params with final priority.

Resource Layout (``resource_router``):
    GET         {prefix}          → index
    GET         {prefix}/{id}     → show
    POST        {prefix}          → create
    PUT, PATCH  {prefix}/{id}     → update
    DELETE      {prefix}/{id}     → delete
"""

from typing import Iterable, List, Optional, Type

from fastapi import APIRouter
from starlette.requests import Request
from starlette.responses import Response

from api_base.controller import ApiController, ServiceProvider, SuccessStatus
from api_base.status import resource_status_policy

RESOURCE_ROUTES = (
    ("", ("GET",), "index"),
    ("/{id}", ("GET",), "show"),
    ("", ("POST",), "create"),
    ("/{id}", ("PUT", "PATCH"), "update"),
    ("/{id}", ("DELETE",), "delete"),
)


def api_route(
    router: APIRouter,
    path: str,
    operation: str,
    service_provider: ServiceProvider,
    success_status: SuccessStatus,
    *,
    methods: Iterable[str] = ("GET",),
    controller_class: Type[ApiController] = ApiController,
    **route_kwargs,
) -> None:
    """Register one endpoint that runs ``operation`` through a controller."""

    async def endpoint(request: Request) -> Response:
        controller = controller_class(request, service_provider, success_status)
        return await controller.handle_request(operation, dict(request.path_params))

    endpoint.__name__ = operation
    route_kwargs.setdefault("name", operation)
    router.add_api_route(
        path,
        endpoint,
        methods=list(methods),
        response_model=None,
        **route_kwargs,
    )


def resource_router(
    prefix: str,
    service_provider: ServiceProvider,
    *,
    success_status: Optional[SuccessStatus] = None,
    tags: Optional[List[str]] = None,
    controller_class: Type[ApiController] = ApiController,
) -> APIRouter:
    """
    Router exposing index/show/create/update/delete for one service.

    Args:
        prefix:           Path prefix, e.g. "/api/products"
        service_provider: Zero-argument callable returning the service object
        success_status:   Success-status policy; defaults to create → 201,
                          delete → 204, anything else → 200
        tags:             OpenAPI tags for the generated endpoints
    """
    policy = success_status or resource_status_policy()
    router = APIRouter(prefix=prefix, tags=tags or [])
    base_name = prefix.strip("/").replace("/", ".")
    for path, methods, operation in RESOURCE_ROUTES:
        # One route per method keeps OpenAPI operation IDs unique
        for method in methods:
            api_route(
                router,
                path,
                operation,
                service_provider,
                policy,
                methods=(method,),
                controller_class=controller_class,
                name=f"{base_name}.{operation}" if base_name else operation,
            )
    return router
