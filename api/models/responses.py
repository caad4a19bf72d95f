# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Response models for API endpoints.

Every endpoint answers with the same envelope: ``success``, ``message`` and
``data`` on success, ``success`` and ``error`` on failure.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from .base import BaseEntity, CamelModel, IsoDateTime


class DonorResponse(BaseEntity):
    """Donor projection without the password digest."""

    full_name: str
    email: str
    phone_number: str
    date_of_birth: IsoDateTime
    gender: str
    blood_group: str
    weight: float
    address: str


class BloodRequestResponse(BaseEntity):
    """Blood request as returned to clients."""

    patient_name: str
    blood_group: str
    urgency_level: str
    units_needed: int
    required_by: IsoDateTime
    hospital_name: str
    doctor_name: str
    primary_contact: str
    emergency_contact: str
    location: str
    medical_reason: str
    additional_information: Optional[str] = None
    details_description: Optional[str] = None


class ReportResponse(BaseEntity):
    """Report as returned to clients; identification is omitted when absent."""

    user_type: str
    user_identification: Optional[str] = None
    report_category: str
    detailed_description: str
    supporting_evidence: Optional[str] = None
    anonymous: bool = False


class AnonymousReportResponse(CamelModel):
    """Reduced projection returned when an anonymous report is filed."""

    id: str
    user_type: str
    report_category: str
    created_at: Optional[IsoDateTime] = None


class AuthTokenResponse(CamelModel):
    """Issued token together with the redacted donor."""

    token: str = Field(..., description="Signed bearer token")
    token_type: str = Field(default="Bearer", description="Token type")
    expires_in: int = Field(..., description="Seconds until expiry")
    expires_at: str = Field(..., description="Expiry timestamp (ISO 8601)")
    donor: DonorResponse


class PaginationMeta(CamelModel):
    """Pagination block attached to list responses."""

    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class SuccessResponse(BaseModel):
    """Standard success envelope."""

    success: bool = Field(default=True)
    message: str
    data: Optional[Any] = None
    pagination: Optional[PaginationMeta] = None


class ErrorDetail(BaseModel):
    """Body of the ``error`` member of a failure envelope."""

    type: str = Field(..., description="Error type identifier")
    message: str = Field(..., description="Human-readable message")
    details: Optional[List[Dict[str, Any]]] = Field(None, description="Field-level violations")


class ErrorResponse(BaseModel):
    """Standard failure envelope."""

    success: bool = Field(default=False)
    error: ErrorDetail
