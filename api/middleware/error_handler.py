# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Error handling middleware with the standard failure envelope.
Provides the application exception taxonomy and centralized error handling
for the Flask application.
"""

from flask import Flask, request
from werkzeug.exceptions import HTTPException
from typing import Dict, Any, List, Optional, Tuple
from opentelemetry import trace
import logging

from utils.request import ResponseBuilder

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = "An unexpected error occurred"


class CustomException(Exception):
    """Base class for custom application exceptions."""

    def __init__(self, message: str, status_code: int = 500, error_type: str = "application-error"):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type


class ValidationException(CustomException):
    """Exception for validation errors."""

    def __init__(self, message: str, validation_errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message, 400, "validation-error")
        self.validation_errors = validation_errors or []


class ConflictException(CustomException):
    """Exception for duplicate donor email or phone number."""

    def __init__(self, message: str):
        super().__init__(message, 400, "resource-conflict")


class AuthenticationException(CustomException):
    """Exception for missing tokens and rejected credentials."""

    def __init__(self, message: str, error_type: str = "authentication-required"):
        super().__init__(message, 401, error_type)


class InvalidTokenException(CustomException):
    """Exception for tokens with a bad signature or past their expiry."""

    def __init__(self, message: str):
        super().__init__(message, 403, "invalid-token")


class NotFoundException(CustomException):
    """Exception for resource not found errors."""

    def __init__(self, message: str):
        super().__init__(message, 404, "resource-not-found")


class ErrorHandlerMiddleware:
    """Centralized error handling middleware."""

    def __init__(self, app: Flask):
        self.app = app
        self.register_error_handlers()

    def register_error_handlers(self):
        """Register error handlers with Flask application."""

        @self.app.errorhandler(CustomException)
        def handle_custom_exception(error: CustomException):
            return self.handle_custom_error(error)

        @self.app.errorhandler(HTTPException)
        def handle_http_exception(error: HTTPException):
            if error.code and error.code >= 500:
                return self.handle_server_error(error)
            return self.handle_client_error(error)

        # Handle generic exceptions
        @self.app.errorhandler(Exception)
        def handle_generic_exception(error: Exception):
            return self.handle_unexpected_error(error)

    def handle_custom_error(self, error: CustomException) -> Tuple[Dict[str, Any], int]:
        """
        Handle exceptions raised by services and middleware.

        Args:
            error: Application exception

        Returns:
            Tuple of (error response dict, status code)
        """
        with tracer.start_as_current_span("error_handler.custom_exception") as span:
            span.set_attributes({
                "error.type": error.error_type,
                "error.status": error.status_code,
                "http.method": request.method,
                "http.path": request.path
            })

            logger.warning(
                f"Request failed: {error.error_type}",
                extra={
                    "error_type": error.error_type,
                    "status_code": error.status_code,
                    "detail": error.message,
                    "path": request.path,
                    "method": request.method
                }
            )

            details = error.validation_errors if isinstance(error, ValidationException) else None
            body, status_code, _ = ResponseBuilder.error(
                error.message,
                error.status_code,
                error.error_type,
                details
            )
            return body, status_code

    def handle_client_error(self, error: HTTPException) -> Tuple[Dict[str, Any], int]:
        """
        Handle werkzeug client errors (unknown route, wrong method, bad JSON).

        Args:
            error: HTTP exception

        Returns:
            Tuple of (error response dict, status code)
        """
        error_type = (error.name or "error").lower().replace(" ", "-")
        detail = str(error.description) if error.description else error.name

        logger.warning(
            f"Client error: {error.name}",
            extra={
                "error_type": error_type,
                "status_code": error.code,
                "path": request.path,
                "method": request.method,
                "ip_address": request.remote_addr
            }
        )

        body, status_code, _ = ResponseBuilder.error(detail, error.code, error_type)
        return body, status_code

    def handle_server_error(self, error: HTTPException) -> Tuple[Dict[str, Any], int]:
        """
        Handle werkzeug server errors (5xx status codes).

        Args:
            error: HTTP exception

        Returns:
            Tuple of (error response dict, status code)
        """
        logger.error(
            f"Server error: {error.name}",
            extra={
                "status_code": error.code,
                "path": request.path,
                "method": request.method
            },
            exc_info=True
        )

        body, status_code, _ = ResponseBuilder.error(
            GENERIC_SERVER_ERROR,
            error.code,
            "internal-server-error"
        )
        return body, status_code

    def handle_unexpected_error(self, error: Exception) -> Tuple[Dict[str, Any], int]:
        """
        Handle unexpected exceptions not caught by specific handlers.

        The response never carries exception details.

        Args:
            error: Unexpected exception

        Returns:
            Tuple of (error response dict, status code)
        """
        span = trace.get_current_span()
        span.record_exception(error)
        span.set_attribute("error.class", error.__class__.__name__)

        logger.error(
            f"Unexpected error: {error.__class__.__name__}",
            extra={
                "error_type": "unexpected-error",
                "error_class": error.__class__.__name__,
                "path": request.path,
                "method": request.method,
                "ip_address": request.remote_addr
            },
            exc_info=error
        )

        body, status_code, _ = ResponseBuilder.error(
            GENERIC_SERVER_ERROR,
            500,
            "internal-server-error"
        )
        return body, status_code
