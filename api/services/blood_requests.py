# SPDX-License-Identifier: Apache-2.0

"""
Blood request service: public creation and listing, authenticated updates.
"""

from datetime import datetime
from typing import Any, Callable, Dict
from opentelemetry import trace
import logging

from domain.validation import utc_now
from middleware.error_handler import NotFoundException, ValidationException
from middleware.validation import validate_payload
from models.entities import BloodRequest
from models.requests import BloodRequestFilters, CreateBloodRequestRequest, UpdateBloodRequestRequest
from models.responses import BloodRequestResponse
from services.mongodb import BLOOD_REQUESTS, MongoDBService, PaginationResult

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

NOT_FOUND = "Blood request not found"


class BloodRequestService:
    """CRUD operations over blood requests."""

    def __init__(self, mongodb_service: MongoDBService,
                 clock: Callable[[], datetime] = utc_now):
        self.mongodb_service = mongodb_service
        self.clock = clock

    @staticmethod
    def serialize(document: Dict[str, Any]) -> Dict[str, Any]:
        return BloodRequestResponse.model_validate(document).model_dump(mode="json", by_alias=True)

    def list(self, filters: Dict[str, Any], page: int, limit: int) -> PaginationResult:
        """
        List blood requests newest first.

        Args:
            filters: Raw filters; only urgencyLevel and bloodGroup are honored
            page: 1-based page number
            limit: Page size

        Returns:
            PaginationResult whose items are serialized blood requests
        """
        with tracer.start_as_current_span("blood_request.list") as span:
            criteria = validate_payload(BloodRequestFilters, filters)
            query = criteria.model_dump(by_alias=True, exclude_none=True)

            span.set_attributes({
                "pagination.page": page,
                "pagination.limit": limit,
                "filters.count": len(query)
            })

            result = self.mongodb_service.paginate(BLOOD_REQUESTS, page, limit, query)
            result.items = [self.serialize(item) for item in result.items]
            return result

    def get(self, request_id: str) -> Dict[str, Any]:
        document = self.mongodb_service.find_by_id(BLOOD_REQUESTS, request_id)
        if document is None:
            raise NotFoundException(NOT_FOUND)
        return self.serialize(document)

    def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate and store a new blood request.

        Raises:
            ValidationException: If a field is invalid or requiredBy is not in the future
        """
        with tracer.start_as_current_span("blood_request.create") as span:
            validated = validate_payload(
                CreateBloodRequestRequest,
                payload,
                context={"now": self.clock()}
            )

            blood_request = BloodRequest(**validated.model_dump())
            document = blood_request.model_dump(
                by_alias=True,
                exclude={"id", "created_at", "updated_at"},
                exclude_none=True
            )

            created = self.mongodb_service.create(BLOOD_REQUESTS, document)

            span.set_attributes({
                "blood_request.id": created["id"],
                "blood_request.urgency": created["urgencyLevel"]
            })
            logger.info(
                "Blood request created",
                extra={
                    "blood_request_id": created["id"],
                    "urgency_level": created["urgencyLevel"],
                    "blood_group": created["bloodGroup"]
                }
            )

            return self.serialize(created)

    def update(self, request_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply a partial update; only supplied fields are validated.

        Raises:
            ValidationException: If the patch is empty or a supplied field is invalid
            NotFoundException: If the blood request does not exist
        """
        with tracer.start_as_current_span("blood_request.update") as span:
            span.set_attribute("blood_request.id", request_id)

            validated = validate_payload(
                UpdateBloodRequestRequest,
                patch,
                context={"now": self.clock()}
            )
            changes = validated.model_dump(by_alias=True, exclude_unset=True)
            if not changes:
                raise ValidationException("No updatable fields supplied")

            set_fields = {key: value for key, value in changes.items() if value is not None}
            unset_fields = [key for key, value in changes.items() if value is None]

            updated = self.mongodb_service.update_by_id(BLOOD_REQUESTS, request_id, set_fields, unset_fields)
            if updated is None:
                raise NotFoundException(NOT_FOUND)

            logger.info(
                "Blood request updated",
                extra={"blood_request_id": request_id, "fields": sorted(changes)}
            )
            return self.serialize(updated)

    def delete(self, request_id: str) -> None:
        """
        Raises:
            NotFoundException: If the blood request does not exist
        """
        if not self.mongodb_service.delete_by_id(BLOOD_REQUESTS, request_id):
            raise NotFoundException(NOT_FOUND)
        logger.info("Blood request deleted", extra={"blood_request_id": request_id})
