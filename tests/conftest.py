"""
api-base: Test Configuration (conftest.py)
===========================================

What:  Shared pytest fixtures for the test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixtures:
    make_request:     Factory for raw Starlette requests (no server needed)
    product_service:  In-memory service object with sync and async operations
    app:              FastAPI app from create_app() serving a products resource
    test_client:      HTTPX AsyncClient bound to ``app`` through ASGITransport
"""

import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel
from starlette.requests import Request

# Keep test output quiet; set before api_base.config is imported
os.environ.setdefault("API_BASE_LOG_LEVEL", "WARNING")

from api_base.exceptions import InvalidArgumentError, NotFoundError  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Request Factory
# ══════════════════════════════════════════════════════════════════════════

def build_request(
    method: str = "GET",
    path: str = "/api/test",
    query_string: str = "",
    body: bytes = b"",
    content_type: Optional[str] = None,
    headers: Optional[List[Tuple[str, str]]] = None,
) -> Request:
    """
    Build a Starlette request from a hand-written ASGI scope.

    The receive channel delivers ``body`` once, then reports a disconnect,
    exactly like a real server after the body has been sent.
    """
    raw_headers = [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in headers or []]
    if content_type is not None:
        raw_headers.append((b"content-type", content_type.encode("latin-1")))

    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "server": ("example.com", 80),
        "client": ("127.0.0.1", 50000),
        "path": path,
        "raw_path": path.encode("latin-1"),
        "root_path": "",
        "query_string": query_string.encode("latin-1"),
        "headers": raw_headers,
        "path_params": {},
    }
    sent = False

    async def receive():
        nonlocal sent
        if sent:
            return {"type": "http.disconnect"}
        sent = True
        return {"type": "http.request", "body": body, "more_body": False}

    return Request(scope, receive)


@pytest.fixture
def make_request():
    """
    Factory fixture for Starlette requests.

    Usage:
        async def test_json(make_request):
            request = make_request("POST", body=b'{"a": 1}')
    """
    return build_request


# ══════════════════════════════════════════════════════════════════════════
# Service Doubles
# ══════════════════════════════════════════════════════════════════════════

class ProductOut(BaseModel):
    id: int
    name: str
    price: float


class ProductService:
    """In-memory products service covering every result shape."""

    def __init__(self):
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    def index(self, data: dict) -> dict:
        self.calls.append(("index", data))
        return {"data": [{"id": 1, "name": "Test Product"}], "filters": data}

    def show(self, data: dict) -> dict:
        self.calls.append(("show", data))
        if data["id"] == "404":
            raise NotFoundError("Product not found", resource_id=data["id"])
        if not data["id"].isdigit():
            raise InvalidArgumentError("Invalid product id", field="id")
        return {"data": {"id": int(data["id"])}}

    def create(self, data: dict) -> dict:
        self.calls.append(("create", data))
        if not data.get("name"):
            return {"errors": {"name": "Name is required"}}
        return {"data": {"id": 1, **data}, "message": "Product created"}

    def update(self, data: dict) -> dict:
        self.calls.append(("update", data))
        return {"data": data}

    def delete(self, data: dict) -> dict:
        self.calls.append(("delete", data))
        return {}

    async def search(self, data: dict) -> dict:
        self.calls.append(("search", data))
        return {"data": {"q": data.get("q")}}

    def echo(self, data: dict) -> dict:
        return {"success": True, "data": data}

    def explode(self, data: dict) -> dict:
        raise ValueError("Test exception")

    def crash(self, data: dict) -> dict:
        raise RuntimeError("Server error")

    def as_model(self, data: dict) -> ProductOut:
        return ProductOut(id=7, name="Model Product", price=12.5)

    def as_model_list(self, data: dict) -> dict:
        return {"data": [ProductOut(id=1, name="Lamp", price=20.0)], "total": 1}

    def with_timestamp(self, data: dict) -> dict:
        created = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        return {"data": {"id": 1, "created_at": created}}

    def unencodable(self, data: dict) -> dict:
        return {"data": {"price": float("nan")}}


@pytest.fixture
def product_service():
    return ProductService()


# ══════════════════════════════════════════════════════════════════════════
# Application Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app(product_service):
    from api_base.main import create_app
    from api_base.routing import resource_router

    return create_app(
        resource_router("/api/products", lambda: product_service, tags=["Products"]),
        title="Products API",
    )


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
