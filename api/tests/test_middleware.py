# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for middleware functionality.
"""

import logging
import pytest
from unittest.mock import Mock
from flask import Flask, g
from pydantic import ValidationError

from middleware.auth import AuthMiddleware, require_auth
from middleware.error_handler import (
    ErrorHandlerMiddleware, ValidationException, ConflictException,
    AuthenticationException, InvalidTokenException, NotFoundException,
    GENERIC_SERVER_ERROR
)
from middleware.validation import format_validation_errors, summarize_errors, validate_payload, json_body
from observability.middleware import _log_level
from models.requests import LoginRequest
from services.auth import TokenValidationError
from utils.request import RequestParser, ResponseBuilder, HeaderUtils


class TestValidationMiddleware:
    """Test validation helpers."""

    def test_format_validation_errors(self):
        """Pydantic's 'Value error, ' prefix is stripped from messages."""
        with pytest.raises(ValidationError) as exc_info:
            LoginRequest.model_validate({"email": "jane@example.com"})

        errors = format_validation_errors(exc_info.value)

        assert errors == [{"field": "password", "message": "Field required", "type": "missing"}]

    def test_summarize_errors(self):
        assert summarize_errors([]) == "Validation failed"
        assert summarize_errors([{"field": "", "message": "Passwords do not match"}]) == "Passwords do not match"
        assert summarize_errors([
            {"field": "email", "message": "Please enter a valid email"},
            {"field": "password", "message": "Field required"}
        ]) == "email: Please enter a valid email"

    def test_validate_payload_raises_validation_exception(self):
        with pytest.raises(ValidationException) as exc_info:
            validate_payload(LoginRequest, {"password": "x"})

        assert exc_info.value.status_code == 400
        assert exc_info.value.validation_errors[0]["field"] == "email"

    def test_validate_payload_rejects_non_objects(self):
        with pytest.raises(ValidationException):
            validate_payload(LoginRequest, ["not", "an", "object"])

    def test_validate_payload_returns_model(self):
        validated = validate_payload(LoginRequest, {"email": "Jane@Example.com", "password": "x"})

        assert validated.email == "jane@example.com"


class TestRequestUtilities:
    """Test request parsing helpers."""

    def setup_method(self):
        self.app = Flask(__name__)

    @pytest.mark.parametrize("query,expected", [
        ("", {"page": 1, "limit": 10}),
        ("?page=3&limit=25", {"page": 3, "limit": 25}),
        ("?page=0&limit=0", {"page": 1, "limit": 1}),
        ("?page=-4&limit=1000", {"page": 1, "limit": 100}),
        ("?page=abc&limit=xyz", {"page": 1, "limit": 10})
    ])
    def test_pagination_params(self, query, expected):
        with self.app.test_request_context(f"/items{query}"):
            assert RequestParser.get_pagination_params() == expected

    def test_filter_params_only_allowed_and_non_empty(self):
        with self.app.test_request_context("/items?category=spam&anonymous=&other=x"):
            assert RequestParser.get_filter_params(["category", "anonymous"]) == {"category": "spam"}

    def test_json_body(self):
        with self.app.test_request_context("/items", method="POST", json={"a": 1}):
            assert json_body() == {"a": 1}

    def test_json_body_empty(self):
        with self.app.test_request_context("/items", method="POST"):
            assert json_body() == {}

    @pytest.mark.parametrize("data", ["{not json", "[1, 2]"])
    def test_json_body_rejects_invalid(self, data):
        with self.app.test_request_context("/items", method="POST", data=data,
                                           content_type="application/json"):
            with pytest.raises(ValidationException) as exc_info:
                json_body()

        assert exc_info.value.validation_errors[0]["field"] == "body"

    @pytest.mark.parametrize("header,token", [
        ("Bearer abc.def.ghi", "abc.def.ghi"),
        ("bearer abc", "abc"),
        ("Basic dXNlcjpwYXNz", None),
        ("Bearer ", None),
        ("", None)
    ])
    def test_bearer_token(self, header, token):
        with self.app.test_request_context("/", headers={"Authorization": header}):
            assert HeaderUtils.get_bearer_token() == token

    def test_paginated_response(self):
        body, status_code, _ = ResponseBuilder.paginated([{"id": "1"}], 21, 2, 10, "Listed")

        assert status_code == 200
        assert body["data"] == [{"id": "1"}]
        assert body["pagination"] == {
            "page": 2,
            "limit": 10,
            "total": 21,
            "totalPages": 3,
            "hasNext": True,
            "hasPrev": True
        }

    def test_error_response(self):
        body, status_code, _ = ResponseBuilder.error("Nope", 404, "resource-not-found")

        assert status_code == 404
        assert body == {"success": False, "error": {"type": "resource-not-found", "message": "Nope"}}


class TestAuthMiddleware:
    """Test bearer token authentication."""

    def setup_method(self):
        self.app = Flask(__name__)
        self.auth_service = Mock()
        self.app.auth_middleware = AuthMiddleware(self.auth_service)
        ErrorHandlerMiddleware(self.app)

        @self.app.route("/protected")
        @require_auth
        def protected():
            return {"donor_id": g.donor_context.donor_id}

    def test_missing_token_is_401(self):
        response = self.app.test_client().get("/protected")

        assert response.status_code == 401
        assert response.get_json()["error"]["message"] == "Access token required"
        self.auth_service.validate_token.assert_not_called()

    def test_invalid_token_is_403(self):
        self.auth_service.validate_token.side_effect = TokenValidationError("Invalid or expired token")

        response = self.app.test_client().get(
            "/protected", headers={"Authorization": "Bearer expired"}
        )

        assert response.status_code == 403
        assert response.get_json()["error"] == {
            "type": "invalid-token",
            "message": "Invalid or expired token"
        }

    def test_valid_token_sets_donor_context(self):
        self.auth_service.validate_token.return_value = {"sub": "donor-1", "email": "jane@example.com"}

        response = self.app.test_client().get(
            "/protected", headers={"Authorization": "Bearer good"}
        )

        assert response.status_code == 200
        assert response.get_json() == {"donor_id": "donor-1"}
        self.auth_service.validate_token.assert_called_once_with("good")


class TestErrorHandlerMiddleware:
    """Test the mapping from exceptions to status codes."""

    def setup_method(self):
        self.app = Flask(__name__)
        ErrorHandlerMiddleware(self.app)

    def raise_from_route(self, error):
        @self.app.route("/boom")
        def boom():
            raise error

        return self.app.test_client().get("/boom")

    @pytest.mark.parametrize("error,status_code,error_type", [
        (ValidationException("bad"), 400, "validation-error"),
        (ConflictException("Email already registered"), 400, "resource-conflict"),
        (AuthenticationException("Invalid email or password", "authentication-failed"), 401,
         "authentication-failed"),
        (InvalidTokenException("Invalid or expired token"), 403, "invalid-token"),
        (NotFoundException("Donor not found"), 404, "resource-not-found")
    ])
    def test_custom_exceptions(self, error, status_code, error_type):
        response = self.raise_from_route(error)

        assert response.status_code == status_code
        body = response.get_json()
        assert body["success"] is False
        assert body["error"]["type"] == error_type
        assert body["error"]["message"] == error.message

    def test_validation_details_included(self):
        details = [{"field": "email", "message": "Please enter a valid email", "type": "value_error"}]

        response = self.raise_from_route(ValidationException("email: Please enter a valid email", details))

        assert response.get_json()["error"]["details"] == details

    def test_unexpected_error_is_generic_500(self):
        response = self.raise_from_route(RuntimeError("connection string mongodb://secret"))

        assert response.status_code == 500
        body = response.get_json()
        assert body["error"]["message"] == GENERIC_SERVER_ERROR
        assert "secret" not in response.get_data(as_text=True)

    def test_unknown_route_is_404(self):
        response = self.app.test_client().get("/missing")

        assert response.status_code == 404
        assert response.get_json()["success"] is False


class TestRequestTelemetry:
    """Test per-request log levels."""

    @pytest.mark.parametrize("status_code,path,level", [
        (200, "/api/v1/blood-requests", logging.INFO),
        (404, "/api/v1/reports/abc", logging.INFO),
        (200, "/api/healthz", logging.DEBUG),
        (503, "/api/healthz", logging.ERROR),
        (500, "/api/v1/donor/profile", logging.ERROR)
    ])
    def test_log_level(self, status_code, path, level):
        assert _log_level(status_code, path) == level
