# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the blood request service.
"""

import pytest
from datetime import timedelta
from bson import ObjectId

from middleware.error_handler import NotFoundException, ValidationException
from services.blood_requests import BloodRequestService
from services.mongodb import BLOOD_REQUESTS


class TestBloodRequestService:
    """Test blood request workflows against in-memory storage."""

    @pytest.fixture
    def service(self, mongodb_service, clock):
        return BloodRequestService(mongodb_service, clock)

    @pytest.fixture
    def created(self, service, sample_blood_request_data):
        return service.create(sample_blood_request_data)

    def test_create(self, created, fixed_now):
        assert ObjectId.is_valid(created["id"])
        assert created["patientName"] == "John Patient"
        assert created["urgencyLevel"] == "High"
        assert created["requiredBy"].startswith("2024-06-20T10:00:00")
        assert created["createdAt"].startswith("2024-06-15T12:00:00")

    def test_create_omits_absent_optional_fields(self, service, mongodb_service, created):
        stored = mongodb_service.get_collection(BLOOD_REQUESTS).find_one({"_id": ObjectId(created["id"])})

        assert "additionalInformation" not in stored
        assert "detailsDescription" not in stored

    def test_create_rejects_past_deadline(self, service, sample_blood_request_data, fixed_now):
        sample_blood_request_data["requiredBy"] = (fixed_now - timedelta(minutes=1)).isoformat()

        with pytest.raises(ValidationException) as exc_info:
            service.create(sample_blood_request_data)

        assert exc_info.value.message == "requiredBy: Required by date must be in the future"

    def test_create_rejects_bad_contact(self, service, sample_blood_request_data):
        sample_blood_request_data["emergencyContact"] = "ask at reception"

        with pytest.raises(ValidationException) as exc_info:
            service.create(sample_blood_request_data)

        assert exc_info.value.validation_errors[0]["field"] == "emergencyContact"

    def test_get(self, service, created):
        assert service.get(created["id"]) == created

    @pytest.mark.parametrize("request_id", [str(ObjectId()), "malformed"])
    def test_get_not_found(self, service, request_id):
        with pytest.raises(NotFoundException) as exc_info:
            service.get(request_id)

        assert exc_info.value.message == "Blood request not found"

    def test_list_filters_and_orders(self, service, mongodb_service, sample_blood_request_data, fixed_now):
        for index, (urgency, group) in enumerate([("High", "A+"), ("Low", "A+"), ("High", "O-")]):
            mongodb_service.clock = lambda index=index: fixed_now + timedelta(minutes=index)
            service.create(dict(sample_blood_request_data, urgencyLevel=urgency, bloodGroup=group))

        everything = service.list({}, 1, 10)
        high = service.list({"urgencyLevel": "High"}, 1, 10)
        high_a = service.list({"urgencyLevel": "High", "bloodGroup": "A+"}, 1, 10)

        assert everything.total == 3
        assert [item["bloodGroup"] for item in everything.items] == ["O-", "A+", "A+"]
        assert [item["bloodGroup"] for item in high.items] == ["O-", "A+"]
        assert high_a.total == 1

    def test_list_rejects_unknown_filter_value(self, service):
        with pytest.raises(ValidationException):
            service.list({"bloodGroup": "Z+"}, 1, 10)

    def test_update_partial(self, service, created):
        updated = service.update(created["id"], {"unitsNeeded": 5, "additionalInformation": "O- also fine"})

        assert updated["unitsNeeded"] == 5
        assert updated["additionalInformation"] == "O- also fine"
        assert updated["patientName"] == created["patientName"]

    def test_update_clears_optional_field(self, service, created):
        service.update(created["id"], {"additionalInformation": "bring id"})

        updated = service.update(created["id"], {"additionalInformation": None})

        assert updated["additionalInformation"] is None

    def test_update_revalidates_fields(self, service, created):
        with pytest.raises(ValidationException):
            service.update(created["id"], {"requiredBy": "2020-01-01"})

        with pytest.raises(ValidationException):
            service.update(created["id"], {"urgencyLevel": None})

    def test_update_requires_a_field(self, service, created):
        with pytest.raises(ValidationException) as exc_info:
            service.update(created["id"], {})

        assert exc_info.value.message == "No updatable fields supplied"

    def test_update_not_found(self, service):
        with pytest.raises(NotFoundException):
            service.update(str(ObjectId()), {"unitsNeeded": 2})

    def test_delete(self, service, created):
        service.delete(created["id"])

        with pytest.raises(NotFoundException):
            service.get(created["id"])
        with pytest.raises(NotFoundException):
            service.delete(created["id"])
