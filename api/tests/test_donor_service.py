# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for donor registration, login and profile lookup.
"""

import pytest
from unittest.mock import patch
from bson import ObjectId

from middleware.error_handler import (
    AuthenticationException, ConflictException, NotFoundException, ValidationException
)
from services.donors import (
    DonorService, EMAIL_TAKEN, PHONE_TAKEN, PASSWORD_MISMATCH, INVALID_CREDENTIALS
)
from services.mongodb import DONORS, DuplicateDocumentError


class TestDonorService:
    """Test donor workflows against in-memory storage."""

    @pytest.fixture
    def donor_service(self, mongodb_service, auth_service, clock):
        return DonorService(mongodb_service, auth_service, clock)

    def test_register_returns_token_and_redacted_donor(self, donor_service, auth_service,
                                                       sample_donor_data):
        result = donor_service.register(sample_donor_data)

        donor = result["donor"]
        assert donor["email"] == "jane.donor@example.com"
        assert donor["fullName"] == "Jane Donor"
        assert "passwordHash" not in donor
        assert "password" not in donor
        assert result["tokenType"] == "Bearer"

        claims = auth_service.validate_token(result["token"])
        assert claims["sub"] == donor["id"]
        assert claims["email"] == "jane.donor@example.com"

    def test_register_stores_only_a_digest(self, donor_service, mongodb_service, auth_service,
                                           sample_donor_data):
        result = donor_service.register(sample_donor_data)

        stored = mongodb_service.get_collection(DONORS).find_one({"_id": ObjectId(result["donor"]["id"])})
        assert "password" not in stored
        assert "confirmPassword" not in stored
        assert stored["passwordHash"] != "secret123"
        assert auth_service.verify_password("secret123", stored["passwordHash"])

    def test_duplicate_email_conflict(self, donor_service, sample_donor_data):
        donor_service.register(dict(sample_donor_data))
        sample_donor_data["phoneNumber"] = "+1 555-000-0000"
        sample_donor_data["email"] = "JANE.DONOR@example.com"

        with pytest.raises(ConflictException) as exc_info:
            donor_service.register(sample_donor_data)

        assert exc_info.value.message == EMAIL_TAKEN
        assert exc_info.value.status_code == 400

    def test_duplicate_phone_conflict(self, donor_service, sample_donor_data):
        donor_service.register(dict(sample_donor_data))
        sample_donor_data["email"] = "someone.else@example.com"

        with pytest.raises(ConflictException) as exc_info:
            donor_service.register(sample_donor_data)

        assert exc_info.value.message == PHONE_TAKEN

    def test_email_conflict_reported_before_phone(self, donor_service, sample_donor_data):
        donor_service.register(dict(sample_donor_data))

        with pytest.raises(ConflictException) as exc_info:
            donor_service.register(sample_donor_data)

        assert exc_info.value.message == EMAIL_TAKEN

    def test_conflict_checked_before_field_validation(self, donor_service, sample_donor_data):
        donor_service.register(dict(sample_donor_data))
        sample_donor_data["weight"] = 10

        with pytest.raises(ConflictException):
            donor_service.register(sample_donor_data)

    @pytest.mark.parametrize("confirm", ["different", None])
    def test_password_mismatch(self, donor_service, sample_donor_data, confirm):
        if confirm is None:
            del sample_donor_data["confirmPassword"]
        else:
            sample_donor_data["confirmPassword"] = confirm

        with pytest.raises(ValidationException) as exc_info:
            donor_service.register(sample_donor_data)

        assert exc_info.value.message == PASSWORD_MISMATCH

    def test_age_outside_range(self, donor_service, sample_donor_data):
        sample_donor_data["dateOfBirth"] = "2010-01-01"

        with pytest.raises(ValidationException) as exc_info:
            donor_service.register(sample_donor_data)

        assert exc_info.value.message == "dateOfBirth: Age must be between 18 and 65 years"
        assert exc_info.value.validation_errors[0]["field"] == "dateOfBirth"

    def test_insert_race_maps_to_conflict(self, donor_service, mongodb_service, sample_donor_data):
        with patch.object(
            mongodb_service,
            "create",
            side_effect=DuplicateDocumentError(DONORS, {"phoneNumber": 1})
        ):
            with pytest.raises(ConflictException) as exc_info:
                donor_service.register(sample_donor_data)

        assert exc_info.value.message == PHONE_TAKEN

    def test_login_success(self, donor_service, auth_service, sample_donor_data):
        registered = donor_service.register(sample_donor_data)

        result = donor_service.login({"email": " Jane.Donor@Example.com ", "password": "secret123"})

        assert result["donor"]["id"] == registered["donor"]["id"]
        assert "passwordHash" not in result["donor"]
        assert auth_service.validate_token(result["token"])["sub"] == registered["donor"]["id"]

    @pytest.mark.parametrize("credentials", [
        {"email": "jane.donor@example.com", "password": "wrong-password"},
        {"email": "nobody@example.com", "password": "secret123"}
    ])
    def test_login_failure_is_undifferentiated(self, donor_service, sample_donor_data, credentials):
        donor_service.register(sample_donor_data)

        with pytest.raises(AuthenticationException) as exc_info:
            donor_service.login(credentials)

        assert exc_info.value.message == INVALID_CREDENTIALS
        assert exc_info.value.status_code == 401

    def test_login_requires_both_fields(self, donor_service):
        with pytest.raises(ValidationException):
            donor_service.login({"email": "jane@example.com"})

    def test_get_profile(self, donor_service, sample_donor_data):
        registered = donor_service.register(sample_donor_data)

        profile = donor_service.get_profile(registered["donor"]["id"])

        assert profile["email"] == "jane.donor@example.com"
        assert profile["bloodGroup"] == "O+"
        assert "passwordHash" not in profile

    @pytest.mark.parametrize("donor_id", [str(ObjectId()), "not-an-id"])
    def test_get_profile_not_found(self, donor_service, donor_id):
        with pytest.raises(NotFoundException):
            donor_service.get_profile(donor_id)
