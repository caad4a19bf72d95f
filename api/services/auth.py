# SPDX-License-Identifier: Apache-2.0

"""
Authentication service for JWT token management and password hashing.

This module provides HS256 token issuing and validation over a shared
secret, and bcrypt password hashing for donor credentials.
"""

import jwt
import bcrypt
from datetime import datetime, timedelta
from typing import Callable, Dict, Any
from opentelemetry import trace
import logging

from domain.validation import utc_now

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

DEFAULT_TOKEN_EXPIRE_DAYS = 7
INVALID_TOKEN_MESSAGE = "Invalid or expired token"


class AuthenticationError(Exception):
    """Raised when a token cannot be issued."""
    pass


class TokenValidationError(Exception):
    """Raised when token validation fails."""
    pass


class AuthService:
    """
    JWT authentication service with HS256 signing and bcrypt password hashing.

    Tokens carry the donor identifier and email and expire after a fixed
    number of days. Validation never tells callers whether a token was
    rejected for its signature or for its expiry.
    """

    algorithm = "HS256"

    def __init__(self, secret_key: str,
                 token_expire_days: int = DEFAULT_TOKEN_EXPIRE_DAYS,
                 bcrypt_rounds: int = 12,
                 clock: Callable[[], datetime] = utc_now):
        """
        Initialize the authentication service.

        Args:
            secret_key: Shared secret used to sign and verify tokens
            token_expire_days: Token lifetime in days
            bcrypt_rounds: bcrypt cost factor
            clock: Returns the current timezone-aware instant
        """
        if not secret_key:
            raise ValueError("A signing secret is required")
        self.secret_key = secret_key
        self.token_expire_days = token_expire_days
        self.bcrypt_rounds = bcrypt_rounds
        self.clock = clock

    def hash_password(self, password: str) -> str:
        """
        Hash a password using bcrypt with a fresh salt.

        Args:
            password: Plain text password to hash

        Returns:
            Self-describing bcrypt digest (salt and cost embedded)
        """
        with tracer.start_as_current_span("auth.hash_password") as span:
            span.set_attribute("auth.operation", "hash_password")

            salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
            hashed = bcrypt.hashpw(password.encode('utf-8'), salt)

            logger.debug("Password hashed successfully")
            return hashed.decode('utf-8')

    def verify_password(self, password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Args:
            password: Plain text password to verify
            hashed_password: Stored bcrypt digest

        Returns:
            True if password matches; False on mismatch or malformed digest
        """
        with tracer.start_as_current_span("auth.verify_password") as span:
            span.set_attribute("auth.operation", "verify_password")

            if not password or not hashed_password:
                span.set_attribute("auth.verification_result", "failed")
                return False

            try:
                result = bcrypt.checkpw(
                    password.encode('utf-8'),
                    hashed_password.encode('utf-8')
                )
            except ValueError as e:
                # bcrypt rejects digests it cannot parse
                span.set_attribute("auth.verification_result", "error")
                logger.warning(f"Password verification error: {str(e)}")
                return False

            span.set_attribute("auth.verification_result", "success" if result else "failed")
            logger.debug(f"Password verification: {'success' if result else 'failed'}")

            return result

    def generate_token(self, donor_id: str, email: str) -> Dict[str, Any]:
        """
        Issue a signed token bound to a donor.

        Args:
            donor_id: Donor identifier (token subject)
            email: Donor email

        Returns:
            Dictionary with token, token type, lifetime and expiry timestamp
        """
        with tracer.start_as_current_span("auth.generate_token") as span:
            span.set_attributes({
                "auth.operation": "generate_token",
                "donor.id": donor_id
            })

            now = self.clock()
            expires_at = now + timedelta(days=self.token_expire_days)

            payload = {
                "sub": donor_id,
                "donorId": donor_id,
                "email": email,
                "iat": now,
                "exp": expires_at,
                "type": "access"
            }

            try:
                token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
            except jwt.PyJWTError as e:
                span.set_attribute("auth.token_generated", "error")
                logger.error(f"Token generation failed: {str(e)}")
                raise AuthenticationError(f"Failed to generate token: {str(e)}")

            span.set_attribute("auth.token_generated", "success")

            logger.info(
                "JWT token generated successfully",
                extra={
                    "donor_id": donor_id,
                    "expires_at": expires_at.isoformat()
                }
            )

            return {
                "token": token,
                "token_type": "Bearer",
                "expires_in": int(timedelta(days=self.token_expire_days).total_seconds()),
                "expires_at": expires_at.isoformat()
            }

    def validate_token(self, token: str) -> Dict[str, Any]:
        """
        Validate and decode a JWT token.

        Args:
            token: JWT token string to validate

        Returns:
            Decoded token claims

        Raises:
            TokenValidationError: If the signature, expiry or type is invalid
        """
        with tracer.start_as_current_span("auth.validate_token") as span:
            span.set_attribute("auth.operation", "validate_token")

            try:
                # Time claims are checked against the injected clock below
                payload = jwt.decode(
                    token,
                    self.secret_key,
                    algorithms=[self.algorithm],
                    options={
                        "verify_exp": False,
                        "verify_iat": False,
                        "require": ["exp", "sub"]
                    }
                )
            except jwt.InvalidTokenError as e:
                span.set_attribute("auth.validation_result", "invalid")
                logger.warning(f"Token validation failed: {str(e)}")
                raise TokenValidationError(INVALID_TOKEN_MESSAGE)

            if payload["exp"] <= self.clock().timestamp():
                span.set_attribute("auth.validation_result", "expired")
                logger.warning("Token validation failed: token expired")
                raise TokenValidationError(INVALID_TOKEN_MESSAGE)

            if payload.get("type") != "access":
                span.set_attribute("auth.validation_result", "invalid")
                logger.warning("Token validation failed: unexpected token type")
                raise TokenValidationError(INVALID_TOKEN_MESSAGE)

            span.set_attributes({
                "auth.validation_result": "success",
                "donor.id": payload.get("sub")
            })

            logger.debug(
                "Token validated successfully",
                extra={"donor_id": payload.get("sub")}
            )

            return payload
