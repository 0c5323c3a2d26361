"""
api-base: Response Helper Tests
================================

What:  Status codes and body shapes of the pure response helpers.
"""

import json

import pytest

from api_base import responses


def body_of(response):
    return json.loads(response.body)


class TestHelpers:

    def test_respond_created(self):
        data = {"id": 1, "name": "New Product"}
        response = responses.respond_created(data)

        assert response.status_code == 201
        assert body_of(response) == data

    def test_respond_created_without_body(self):
        assert body_of(responses.respond_created()) == {}

    def test_respond_no_content(self):
        response = responses.respond_no_content()

        assert response.status_code == 204
        assert response.body == b""

    def test_respond_not_found_default_message(self):
        response = responses.respond_not_found()

        assert response.status_code == 404
        assert body_of(response) == {"error": "Resource not found"}

    def test_respond_unauthorized(self):
        response = responses.respond_unauthorized("Token expired")

        assert response.status_code == 401
        assert body_of(response) == {"error": "Token expired"}

    def test_respond_forbidden(self):
        response = responses.respond_forbidden()

        assert response.status_code == 403
        assert body_of(response) == {"error": "Forbidden"}

    def test_respond_server_error(self):
        response = responses.respond_server_error()

        assert response.status_code == 500
        assert body_of(response) == {"error": "Internal server error"}

    def test_respond_validation_error(self):
        errors = {"name": "Name is required", "price": "Price must be numeric"}
        response = responses.respond_validation_error(errors)

        assert response.status_code == 422
        assert body_of(response) == {"errors": errors}

    def test_respond_with_204_drops_body(self):
        response = responses.respond({"ignored": True}, 204)

        assert response.status_code == 204
        assert response.body == b""

    def test_content_type_is_json(self):
        response = responses.respond({"a": 1})
        assert response.headers["content-type"] == "application/json"


class TestIdempotence:
    """Helpers hold no state: equal arguments give byte-identical responses."""

    @pytest.mark.parametrize(
        "helper, args",
        [
            (responses.respond_created, ({"id": 1, "name": "New Product"},)),
            (responses.respond_no_content, ()),
            (responses.respond_not_found, ("Product not found",)),
            (responses.respond_unauthorized, ()),
            (responses.respond_validation_error, ({"name": "Name is required"},)),
        ],
    )
    def test_repeat_calls_match(self, helper, args):
        first = helper(*args)
        second = helper(*args)

        assert first.status_code == second.status_code
        assert first.body == second.body
        assert first.raw_headers == second.raw_headers
