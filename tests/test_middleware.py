"""
api-base: Middleware Tests
===========================

What:  Access log levels, skip paths and request ID propagation.
"""

import logging

import pytest
from fastapi import APIRouter
from httpx import ASGITransport, AsyncClient

from api_base.main import create_app
from api_base.middleware import request_id_var


def _build_app():
    router = APIRouter()

    @router.get("/_test/ok")
    async def _ok():
        return {"request_id": request_id_var.get("")}

    @router.get("/_test/missing")
    async def _missing():
        from api_base.exceptions import NotFoundError
        raise NotFoundError()

    return create_app(router)


class TestRequestLogging:

    @pytest.mark.asyncio
    async def test_levels_follow_status(self, caplog):
        transport = ASGITransport(app=_build_app())
        with caplog.at_level(logging.INFO, logger="api_base.access"):
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                await client.get("/_test/ok", headers={"X-Request-ID": "req-1"})
                await client.get("/_test/missing", headers={"X-Request-ID": "req-2"})

        access = [r for r in caplog.records if r.name == "api_base.access"]
        assert [r.levelno for r in access] == [logging.INFO, logging.WARNING]
        assert [r.request_id for r in access] == ["req-1", "req-2"]
        assert [r.status for r in access] == [200, 404]

    @pytest.mark.asyncio
    async def test_health_is_not_logged(self, caplog):
        transport = ASGITransport(app=_build_app())
        with caplog.at_level(logging.INFO, logger="api_base.access"):
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                await client.get("/health")

        assert not [r for r in caplog.records if r.name == "api_base.access"]


class TestRequestID:

    @pytest.mark.asyncio
    async def test_handler_sees_request_id(self):
        transport = ASGITransport(app=_build_app())
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/_test/ok", headers={"X-Request-ID": "trace-42"})

        assert response.json() == {"request_id": "trace-42"}
        assert response.headers["X-Request-ID"] == "trace-42"
        # Reset once the request is done
        assert request_id_var.get("") == ""
