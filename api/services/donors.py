# SPDX-License-Identifier: Apache-2.0

"""
Donor account service: registration, login and profile lookup.

Registration runs as a short-circuiting pipeline: uniqueness check,
password confirmation, validation and hashing, persistence, token issuing.
Uniqueness is ultimately guaranteed by the unique indexes on the donors
collection; the up-front lookup reports which field collided.
"""

from datetime import datetime
from typing import Any, Callable, Dict, Optional
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
import logging

from domain.validation import normalize_email, strip_fields, utc_now
from middleware.error_handler import (
    AuthenticationException,
    ConflictException,
    NotFoundException,
    ValidationException
)
from middleware.validation import validate_payload
from models.entities import Donor
from models.requests import LoginRequest, RegisterDonorRequest
from models.responses import AuthTokenResponse, DonorResponse
from services.auth import AuthService
from services.mongodb import DONORS, DuplicateDocumentError, MongoDBService

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

EMAIL_TAKEN = "Email already registered"
PHONE_TAKEN = "Phone number already registered"
PASSWORD_MISMATCH = "Passwords do not match"
INVALID_CREDENTIALS = "Invalid email or password"

# The stored digest is never loaded unless credentials are being checked
HIDE_SECRET = {"passwordHash": 0}


class DonorService:
    """Orchestrates donor registration, login and profile lookup."""

    def __init__(self, mongodb_service: MongoDBService, auth_service: AuthService,
                 clock: Callable[[], datetime] = utc_now):
        self.mongodb_service = mongodb_service
        self.auth_service = auth_service
        self.clock = clock

    def _find_conflict(self, email: Optional[str], phone_number: Any) -> Optional[str]:
        """Return the conflict message for an existing email or phone, email first."""
        if email and self.mongodb_service.find_one(DONORS, {"email": email}, {"_id": 1}):
            return EMAIL_TAKEN
        if isinstance(phone_number, str) and phone_number.strip():
            if self.mongodb_service.find_one(DONORS, {"phoneNumber": phone_number.strip()}, {"_id": 1}):
                return PHONE_TAKEN
        return None

    def _conflict_from_duplicate(self, error: DuplicateDocumentError, donor: Donor) -> str:
        """Map a unique index violation raised at insert time to a conflict message."""
        if "email" in error.key_pattern:
            return EMAIL_TAKEN
        if "phoneNumber" in error.key_pattern:
            return PHONE_TAKEN
        return self._find_conflict(donor.email, donor.phone_number) or EMAIL_TAKEN

    def _auth_response(self, donor_document: Dict[str, Any]) -> Dict[str, Any]:
        donor = DonorResponse.model_validate(strip_fields(donor_document, "passwordHash"))
        token = self.auth_service.generate_token(donor.id, donor.email)
        response = AuthTokenResponse(donor=donor, **token)
        return response.model_dump(mode="json", by_alias=True)

    def register(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Register a new donor.

        Args:
            payload: Registration fields, including password and confirmPassword

        Returns:
            Serialized token response with the redacted donor

        Raises:
            ConflictException: If the email or phone number is already registered
            ValidationException: On password mismatch or any invalid field
        """
        with tracer.start_as_current_span("donor.register") as span:
            email = normalize_email(payload.get("email"))

            conflict = self._find_conflict(email, payload.get("phoneNumber"))
            if conflict:
                span.set_status(Status(StatusCode.ERROR, "conflict"))
                logger.info("Registration rejected: duplicate donor", extra={"reason": conflict})
                raise ConflictException(conflict)

            if payload.get("confirmPassword") != payload.get("password"):
                span.set_status(Status(StatusCode.ERROR, "password mismatch"))
                raise ValidationException(PASSWORD_MISMATCH, [{
                    "field": "confirmPassword",
                    "message": PASSWORD_MISMATCH,
                    "type": "password_mismatch"
                }])

            registration = validate_payload(
                RegisterDonorRequest,
                payload,
                context={"now": self.clock()}
            )

            donor = Donor(
                **registration.model_dump(exclude={"password", "confirm_password"}),
                password_hash=self.auth_service.hash_password(registration.password)
            )
            document = donor.model_dump(by_alias=True, exclude={"id", "created_at", "updated_at"})

            try:
                created = self.mongodb_service.create(DONORS, document)
            except DuplicateDocumentError as e:
                # Lost a race with a concurrent registration
                conflict = self._conflict_from_duplicate(e, donor)
                span.set_status(Status(StatusCode.ERROR, "conflict"))
                logger.warning("Registration rejected at insert: duplicate donor", extra={"reason": conflict})
                raise ConflictException(conflict)

            span.set_attribute("donor.id", created["id"])
            logger.info("Donor registered", extra={"donor_id": created["id"]})

            return self._auth_response(created)

    def login(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Authenticate a donor by email and password.

        The same failure is reported whether the email is unknown or the
        password is wrong.

        Raises:
            ValidationException: If email or password is missing
            AuthenticationException: If the credentials do not match
        """
        with tracer.start_as_current_span("donor.login") as span:
            credentials = validate_payload(LoginRequest, payload)

            donor_document = self.mongodb_service.find_one(DONORS, {"email": credentials.email})

            password_hash = donor_document.get("passwordHash") if donor_document else None
            if not donor_document or not self.auth_service.verify_password(credentials.password, password_hash):
                span.set_status(Status(StatusCode.ERROR, "invalid credentials"))
                logger.warning(
                    "Login failed",
                    extra={"donor_found": donor_document is not None}
                )
                raise AuthenticationException(INVALID_CREDENTIALS, "authentication-failed")

            span.set_attribute("donor.id", donor_document["id"])
            logger.info("Donor logged in", extra={"donor_id": donor_document["id"]})

            return self._auth_response(donor_document)

    def get_profile(self, donor_id: str) -> Dict[str, Any]:
        """
        Fetch the redacted profile of a donor.

        Raises:
            NotFoundException: If no donor has this identifier
        """
        with tracer.start_as_current_span("donor.get_profile") as span:
            span.set_attribute("donor.id", donor_id)

            donor_document = self.mongodb_service.find_by_id(DONORS, donor_id, HIDE_SECRET)
            if donor_document is None:
                raise NotFoundException("Donor not found")

            return DonorResponse.model_validate(donor_document).model_dump(mode="json", by_alias=True)
