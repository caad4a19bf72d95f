# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas and data models for the blood donation platform.
"""

# Base models
from .base import BaseEntity, CamelModel

# Enumerations
from .enums import (
    Gender,
    BloodGroup,
    UrgencyLevel,
    ReporterType,
    ReportCategory
)

# Core entities
from .entities import (
    Donor,
    BloodRequest,
    Report,
    DonorContext
)

# Request models
from .requests import (
    RegisterDonorRequest,
    LoginRequest,
    CreateBloodRequestRequest,
    UpdateBloodRequestRequest,
    CreateReportRequest,
    UpdateReportRequest,
    BloodRequestFilters,
    ReportFilters
)

# Response models
from .responses import (
    DonorResponse,
    BloodRequestResponse,
    ReportResponse,
    AnonymousReportResponse,
    AuthTokenResponse,
    PaginationMeta,
    SuccessResponse,
    ErrorDetail,
    ErrorResponse
)

__all__ = [
    # Base models
    "BaseEntity",
    "CamelModel",

    # Enumerations
    "Gender",
    "BloodGroup",
    "UrgencyLevel",
    "ReporterType",
    "ReportCategory",

    # Core entities
    "Donor",
    "BloodRequest",
    "Report",
    "DonorContext",

    # Request models
    "RegisterDonorRequest",
    "LoginRequest",
    "CreateBloodRequestRequest",
    "UpdateBloodRequestRequest",
    "CreateReportRequest",
    "UpdateReportRequest",
    "BloodRequestFilters",
    "ReportFilters",

    # Response models
    "DonorResponse",
    "BloodRequestResponse",
    "ReportResponse",
    "AnonymousReportResponse",
    "AuthTokenResponse",
    "PaginationMeta",
    "SuccessResponse",
    "ErrorDetail",
    "ErrorResponse"
]
