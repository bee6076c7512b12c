"""
Unit tests for the centralized error translator.
"""
import json
import pytest
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError

from eventhub.core import errors
from eventhub.core.errors import (
    DuplicateKeyError,
    ForbiddenError,
    InvalidIdError,
    NotFoundError,
    TokenExpiredError,
    UnauthorizedError,
    duplicate_field,
    error_response,
)


def body_of(response) -> dict:
    return json.loads(response.body)


@pytest.mark.unit
class TestErrorResponse:

    @pytest.mark.parametrize(
        "exc, status_code, message",
        [
            (DuplicateKeyError("email"), 400, "email already exists"),
            (InvalidIdError(), 400, "Invalid ID format"),
            (UnauthorizedError(), 401, "Authentication required"),
            (TokenExpiredError(), 401, "Token expired"),
            (ForbiddenError("Not yours"), 403, "Not yours"),
            (NotFoundError("Event not found"), 404, "Event not found"),
        ],
    )
    def test_app_errors(self, exc, status_code, message):
        response = error_response(exc)

        assert response.status_code == status_code
        assert body_of(response)["message"] == message

    def test_duplicate_key_lists_field(self):
        body = body_of(error_response(DuplicateKeyError("email")))

        assert body["errors"] == [{"field": "email", "message": "email already exists"}]

    def test_body_validation_error(self):
        exc = RequestValidationError([
            {"loc": ("body", "date"), "msg": "Value error, Event date must be in the future", "type": "value_error"},
        ])

        response = error_response(exc)

        assert response.status_code == 400
        assert body_of(response) == {
            "message": "Validation error",
            "errors": [{"field": "date", "message": "Event date must be in the future"}],
        }

    def test_query_validation_error(self):
        exc = RequestValidationError([
            {"loc": ("query", "limit"), "msg": "Input should be greater than or equal to 1", "type": "greater_than_equal"},
        ])

        body = body_of(error_response(exc))

        assert body["message"] == "Query validation error"
        assert body["errors"][0]["field"] == "limit"

    @pytest.mark.parametrize(
        "driver_message",
        [
            "UNIQUE constraint failed: users.email",
            'duplicate key value violates unique constraint "ix_users_email"\nDETAIL:  Key (email)=(a@b.com) already exists.',
        ],
    )
    def test_integrity_error_becomes_duplicate_key(self, driver_message):
        exc = IntegrityError("INSERT INTO users ...", {}, Exception(driver_message))

        assert duplicate_field(exc) == "email"
        response = error_response(exc)
        assert response.status_code == 400
        assert body_of(response)["message"] == "email already exists"

    def test_unexpected_error_in_development(self, monkeypatch):
        monkeypatch.setattr(errors.settings, "ENVIRONMENT", "development")
        try:
            raise RuntimeError("boom")
        except RuntimeError as exc:
            response = error_response(exc)

        body = body_of(response)
        assert response.status_code == 500
        assert body["message"] == "Internal server error"
        assert "RuntimeError: boom" in body["stack"]

    def test_unexpected_error_in_production_hides_stack(self, monkeypatch):
        monkeypatch.setattr(errors.settings, "ENVIRONMENT", "production")

        body = body_of(error_response(RuntimeError("boom")))

        assert body == {"message": "Internal server error"}
