"""Tests for error handling and custom exceptions."""

import pytest
from flask import Flask

from camp_core.exceptions import (
    AccountDeactivated,
    AlreadyAccepted,
    CampError,
    DatabaseError,
    DuplicateEmail,
    InsufficientRole,
    InvalidCredentials,
    InvalidState,
    ResourceNotFound,
    SelfActionForbidden,
    TokenExpired,
    TokenInvalid,
    TokenKindMismatch,
    Unauthenticated,
    ValidationError,
)
from camp_core.main import register_error_handlers


@pytest.fixture
def error_client():
    """Bare Flask app with the error handlers and routes that raise."""
    test_app = Flask(__name__)
    test_app.config["TESTING"] = True
    register_error_handlers(test_app)

    @test_app.route("/test/not-found")
    def test_not_found():
        raise ResourceNotFound("Member not found", details={"member_id": "123"})

    @test_app.route("/test/not-found-no-details")
    def test_not_found_no_details():
        raise ResourceNotFound("Not found")

    @test_app.route("/test/database")
    def test_database():
        raise DatabaseError("Database operation failed")

    @test_app.route("/test/internal")
    def test_internal():
        raise RuntimeError("secret internal detail")

    with test_app.test_client() as client:
        yield client


class TestTaxonomy:
    """Each error maps to one transport code."""

    @pytest.mark.parametrize("error_class,code,status", [
        (Unauthenticated, "UNAUTHORIZED", 401),
        (InvalidCredentials, "UNAUTHORIZED", 401),
        (AccountDeactivated, "FORBIDDEN", 403),
        (InsufficientRole, "FORBIDDEN", 403),
        (ValidationError, "BAD_REQUEST", 400),
        (TokenInvalid, "BAD_REQUEST", 400),
        (TokenExpired, "BAD_REQUEST", 400),
        (TokenKindMismatch, "BAD_REQUEST", 400),
        (AlreadyAccepted, "BAD_REQUEST", 400),
        (SelfActionForbidden, "BAD_REQUEST", 400),
        (InvalidState, "BAD_REQUEST", 400),
        (ResourceNotFound, "NOT_FOUND", 404),
        (DuplicateEmail, "CONFLICT", 409),
        (DatabaseError, "INTERNAL_SERVER_ERROR", 500),
    ])
    def test_codes(self, error_class, code, status):
        error = error_class("message")

        assert isinstance(error, CampError)
        assert error.code == code
        assert error.status_code == status

    def test_token_errors_share_a_base(self):
        assert issubclass(TokenExpired, TokenInvalid)
        assert issubclass(TokenKindMismatch, TokenInvalid)

    def test_details_default_to_empty(self):
        error = CampError("boom")
        assert error.message == "boom"
        assert error.details == {}
        assert str(error) == "boom"


class TestErrorHandlers:
    """Errors become JSON envelopes."""

    def test_not_found_with_details(self, error_client):
        response = error_client.get("/test/not-found")

        assert response.status_code == 404
        assert response.get_json() == {
            "error": {
                "type": "ResourceNotFound",
                "code": "NOT_FOUND",
                "message": "Member not found",
                "details": {"member_id": "123"},
            }
        }

    def test_details_omitted_when_empty(self, error_client):
        error = error_client.get("/test/not-found-no-details").get_json()["error"]
        assert "details" not in error

    def test_database_error_is_generic(self, error_client):
        response = error_client.get("/test/database")

        assert response.status_code == 500
        assert response.get_json()["error"]["code"] == "INTERNAL_SERVER_ERROR"

    def test_unexpected_error_hides_internals(self, error_client):
        response = error_client.get("/test/internal")

        assert response.status_code == 500
        error = response.get_json()["error"]
        assert error["type"] == "InternalServerError"
        assert "secret" not in error["message"]

    def test_unknown_route(self, error_client):
        response = error_client.get("/no/such/route")

        assert response.status_code == 404
        assert response.get_json()["error"]["code"] == "NOT_FOUND"

    def test_wrong_method(self, error_client):
        response = error_client.post("/test/not-found")

        assert response.status_code == 405
        assert response.get_json()["error"]["code"] == "METHOD_NOT_ALLOWED"
