# SPDX-License-Identifier: Apache-2.0

"""
Abuse report service.

Anonymous reports never store an identification. Listings drop the
identification of every report, anonymous or not, at the storage
projection level.
"""

from typing import Any, Dict, Optional
from opentelemetry import trace
import logging

from domain.validation import strip_fields
from middleware.error_handler import NotFoundException, ValidationException
from middleware.validation import validate_payload
from models.entities import Report
from models.requests import CreateReportRequest, ReportFilters, UpdateReportRequest
from models.responses import AnonymousReportResponse, ReportResponse
from services.mongodb import REPORTS, MongoDBService, PaginationResult

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

NOT_FOUND = "Report not found"
IDENTIFICATION = "userIdentification"
IDENTIFICATION_REQUIRED = "User identification is required unless the report is anonymous"


def redact(document: Dict[str, Any], force: bool = False) -> Dict[str, Any]:
    """Remove the identification when the report is anonymous, or always when forced."""
    if force or document.get("anonymous"):
        return strip_fields(document, IDENTIFICATION)
    return document


class ReportService:
    """CRUD operations over abuse reports."""

    def __init__(self, mongodb_service: MongoDBService):
        self.mongodb_service = mongodb_service

    @staticmethod
    def serialize(document: Dict[str, Any]) -> Dict[str, Any]:
        return ReportResponse.model_validate(document).model_dump(
            mode="json",
            by_alias=True,
            exclude_none=True
        )

    def list(self, filters: Dict[str, Any], page: int, limit: int) -> PaginationResult:
        """
        List reports newest first, never exposing identifications.

        Args:
            filters: Raw filters; only category and anonymous are honored
            page: 1-based page number
            limit: Page size
        """
        with tracer.start_as_current_span("report.list") as span:
            criteria = validate_payload(ReportFilters, filters)

            query: Dict[str, Any] = {}
            if criteria.category is not None:
                query["reportCategory"] = criteria.category
            if criteria.anonymous is not None:
                query["anonymous"] = criteria.anonymous

            span.set_attributes({
                "pagination.page": page,
                "pagination.limit": limit,
                "filters.count": len(query)
            })

            result = self.mongodb_service.paginate(
                REPORTS, page, limit, query,
                projection={IDENTIFICATION: 0}
            )
            result.items = [self.serialize(redact(item, force=True)) for item in result.items]
            return result

    def get(self, report_id: str) -> Dict[str, Any]:
        document = self.mongodb_service.find_by_id(REPORTS, report_id)
        if document is None:
            raise NotFoundException(NOT_FOUND)
        return self.serialize(redact(document))

    def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate and store a report.

        Anonymous reports are answered with the reduced projection
        (id, userType, reportCategory, createdAt).

        Raises:
            ValidationException: If a field is invalid or identification is missing
        """
        with tracer.start_as_current_span("report.create") as span:
            validated = validate_payload(CreateReportRequest, payload)

            report = Report(**validated.model_dump())
            document = report.model_dump(
                by_alias=True,
                exclude={"id", "created_at", "updated_at"},
                exclude_none=True
            )
            if report.anonymous:
                document = redact(document, force=True)

            created = self.mongodb_service.create(REPORTS, document)

            span.set_attributes({
                "report.id": created["id"],
                "report.anonymous": report.anonymous
            })
            logger.info(
                "Report submitted",
                extra={
                    "report_id": created["id"],
                    "category": created["reportCategory"],
                    "anonymous": report.anonymous
                }
            )

            if report.anonymous:
                return AnonymousReportResponse.model_validate(created).model_dump(mode="json", by_alias=True)
            return self.serialize(created)

    def update(self, report_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply a partial update while keeping the anonymity invariant.

        Raises:
            ValidationException: If the patch is invalid or would leave a
                non-anonymous report without identification
            NotFoundException: If the report does not exist
        """
        with tracer.start_as_current_span("report.update") as span:
            span.set_attribute("report.id", report_id)

            validated = validate_payload(UpdateReportRequest, patch)
            changes = validated.model_dump(by_alias=True, exclude_unset=True)
            if not changes:
                raise ValidationException("No updatable fields supplied")

            current = self.mongodb_service.find_by_id(REPORTS, report_id)
            if current is None:
                raise NotFoundException(NOT_FOUND)

            anonymous = changes.get("anonymous", current.get("anonymous", False))
            identification: Optional[str] = changes.get(IDENTIFICATION, current.get(IDENTIFICATION))

            unset_fields = [key for key, value in changes.items() if value is None]
            if anonymous:
                changes.pop(IDENTIFICATION, None)
                unset_fields.append(IDENTIFICATION)
            elif not identification:
                raise ValidationException(IDENTIFICATION_REQUIRED, [{
                    "field": IDENTIFICATION,
                    "message": IDENTIFICATION_REQUIRED,
                    "type": "missing"
                }])

            set_fields = {key: value for key, value in changes.items() if value is not None}
            updated = self.mongodb_service.update_by_id(
                REPORTS, report_id, set_fields, sorted(set(unset_fields))
            )
            if updated is None:
                raise NotFoundException(NOT_FOUND)

            logger.info(
                "Report updated",
                extra={"report_id": report_id, "fields": sorted(changes)}
            )
            return self.serialize(redact(updated))

    def delete(self, report_id: str) -> None:
        """
        Raises:
            NotFoundException: If the report does not exist
        """
        if not self.mongodb_service.delete_by_id(REPORTS, report_id):
            raise NotFoundException(NOT_FOUND)
        logger.info("Report deleted", extra={"report_id": report_id})
