# SPDX-License-Identifier: Apache-2.0

"""
Authentication middleware for JWT token validation and donor context extraction.

This module provides a Flask decorator that validates bearer tokens and
builds the donor context for protected endpoints. A missing token yields 401,
an invalid or expired one 403.
"""

from functools import wraps
from flask import request, g, current_app
from typing import Dict, Any, Callable, Optional
from opentelemetry import trace
import logging

from middleware.error_handler import AuthenticationException, InvalidTokenException
from models.entities import DonorContext
from services.auth import AuthService, TokenValidationError
from utils.request import HeaderUtils

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class AuthMiddleware:
    """
    JWT authentication middleware for Flask applications.

    Handles token extraction, validation and donor context building for
    protected endpoints.
    """

    def __init__(self, auth_service: AuthService):
        """
        Initialize the authentication middleware.

        Args:
            auth_service: JWT authentication service
        """
        self.auth_service = auth_service

    def extract_token_from_request(self) -> Optional[str]:
        """
        Extract JWT token from the Authorization header.

        Returns:
            JWT token string or None if not found
        """
        return HeaderUtils.get_bearer_token()

    def build_donor_context(self, token_payload: Dict[str, Any]) -> DonorContext:
        """
        Build donor context from validated token payload and request information.

        Args:
            token_payload: Decoded JWT payload

        Returns:
            DonorContext for request processing
        """
        return DonorContext(
            donor_id=token_payload["sub"],
            email=token_payload.get("email"),
            token_payload=token_payload,
            ip_address=request.remote_addr,
            user_agent=request.headers.get('User-Agent', '')
        )

    def authenticate(self) -> DonorContext:
        """
        Validate the request's bearer token.

        Returns:
            DonorContext for the authenticated donor

        Raises:
            AuthenticationException: If no token was presented
            InvalidTokenException: If the token is invalid or expired
        """
        with tracer.start_as_current_span("auth.middleware.validate_request") as span:
            span.set_attribute("auth.operation", "validate_request")

            token = self.extract_token_from_request()
            if not token:
                span.set_attribute("auth.result", "missing_token")
                logger.warning("Authentication failed: missing token", extra={"path": request.path})
                raise AuthenticationException("Access token required")

            try:
                token_payload = self.auth_service.validate_token(token)
            except TokenValidationError as e:
                span.set_attribute("auth.result", "invalid_token")
                logger.warning(f"Authentication failed: {str(e)}", extra={"path": request.path})
                raise InvalidTokenException(str(e))

            donor_context = self.build_donor_context(token_payload)

            span.set_attributes({
                "auth.result": "success",
                "donor.id": donor_context.donor_id
            })

            logger.debug(
                "Authentication successful",
                extra={
                    "donor_id": donor_context.donor_id,
                    "ip_address": donor_context.ip_address
                }
            )

            return donor_context


def require_auth(f: Callable) -> Callable:
    """
    Decorator to require JWT authentication for Flask routes.

    The donor context is stored on ``g.donor_context``.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        g.donor_context = current_app.auth_middleware.authenticate()
        return f(*args, **kwargs)

    return decorated_function
