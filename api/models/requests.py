# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request models for API endpoints.

Time-dependent rules (donor age, request deadlines) read the reference
instant from the validation context key ``now``; services pass their
injected clock there. Without a context the current UTC time is used.
"""

from datetime import datetime
from typing import ClassVar, Optional, Tuple
from pydantic import Field, ValidationInfo, field_validator, model_validator

from domain.validation import (
    MIN_DONOR_WEIGHT,
    is_eligible_age,
    is_email,
    is_in_future,
    is_phone_number,
    is_phone_or_email,
    normalize_email,
    utc_now
)
from .base import CamelModel, TrimmedStr, IsoDateTime
from .enums import Gender, BloodGroup, UrgencyLevel, ReporterType, ReportCategory


def _reference_now(info: ValidationInfo) -> datetime:
    context = info.context or {}
    return context.get("now") or utc_now()


class RegisterDonorRequest(CamelModel):
    """Request model for donor registration."""

    full_name: TrimmedStr = Field(..., min_length=2, description="Donor full name")
    email: str = Field(..., description="Email address")
    phone_number: TrimmedStr = Field(..., description="Phone number")
    date_of_birth: IsoDateTime = Field(..., description="Date of birth")
    gender: Gender = Field(..., description="Donor gender")
    blood_group: BloodGroup = Field(..., description="ABO/Rh blood group")
    weight: float = Field(..., ge=MIN_DONOR_WEIGHT, allow_inf_nan=False, description="Weight in kilograms")
    address: TrimmedStr = Field(..., min_length=10, description="Postal address")
    password: str = Field(..., min_length=6, description="Plaintext password")
    confirm_password: Optional[str] = Field(None, description="Password confirmation")

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        """Validate and normalize email format."""
        v = normalize_email(v)
        if not is_email(v):
            raise ValueError('Please enter a valid email')
        return v

    @field_validator('phone_number')
    @classmethod
    def validate_phone_number(cls, v):
        if not is_phone_number(v):
            raise ValueError('Please enter a valid phone number (at least 10 digits)')
        return v

    @field_validator('date_of_birth')
    @classmethod
    def validate_age(cls, v, info: ValidationInfo):
        """Donors must be between 18 and 65 years old on the reference date."""
        today = _reference_now(info).date()
        if not is_eligible_age(v.date(), today):
            raise ValueError('Age must be between 18 and 65 years')
        return v

    @model_validator(mode='after')
    def validate_password_confirmation(self):
        if self.confirm_password is not None and self.confirm_password != self.password:
            raise ValueError('Passwords do not match')
        return self


class LoginRequest(CamelModel):
    """Request model for donor login."""

    email: str = Field(..., min_length=1, description="Email address")
    password: str = Field(..., min_length=1, description="Plaintext password")

    @field_validator('email')
    @classmethod
    def normalize(cls, v):
        return normalize_email(v)


class BloodRequestRules(CamelModel):
    """Validators shared by blood request creation and update."""

    @field_validator('primary_contact', 'emergency_contact', check_fields=False)
    @classmethod
    def validate_contact(cls, v, info: ValidationInfo):
        if v is not None and not is_phone_or_email(v):
            label = "primary" if info.field_name == "primary_contact" else "emergency"
            raise ValueError(f'Invalid phone or email for {label} contact')
        return v

    @field_validator('required_by', check_fields=False)
    @classmethod
    def validate_required_by(cls, v, info: ValidationInfo):
        """Deadline must be strictly after the reference instant."""
        if v is not None and not is_in_future(v, _reference_now(info)):
            raise ValueError('Required by date must be in the future')
        return v


class CreateBloodRequestRequest(BloodRequestRules):
    """Request model for creating a blood request."""

    patient_name: TrimmedStr = Field(..., min_length=2, description="Patient name")
    blood_group: BloodGroup = Field(..., description="Required blood group")
    urgency_level: UrgencyLevel = Field(..., description="Urgency level")
    units_needed: int = Field(..., ge=1, description="Units of blood needed")
    required_by: IsoDateTime = Field(..., description="Deadline for the donation")
    hospital_name: TrimmedStr = Field(..., min_length=2, description="Hospital name")
    doctor_name: TrimmedStr = Field(..., min_length=2, description="Attending doctor")
    primary_contact: TrimmedStr = Field(..., description="Phone or email")
    emergency_contact: TrimmedStr = Field(..., description="Phone or email")
    location: TrimmedStr = Field(..., min_length=5, description="Location")
    medical_reason: TrimmedStr = Field(..., min_length=10, description="Medical reason")
    additional_information: Optional[TrimmedStr] = Field(None, description="Free text")
    details_description: Optional[TrimmedStr] = Field(None, description="Free text")


class UpdateBloodRequestRequest(BloodRequestRules):
    """Partial update of a blood request; only supplied fields are validated."""

    REQUIRED_FIELDS: ClassVar[Tuple[str, ...]] = (
        "patient_name", "blood_group", "urgency_level", "units_needed", "required_by",
        "hospital_name", "doctor_name", "primary_contact", "emergency_contact",
        "location", "medical_reason"
    )

    patient_name: Optional[TrimmedStr] = Field(None, min_length=2)
    blood_group: Optional[BloodGroup] = None
    urgency_level: Optional[UrgencyLevel] = None
    units_needed: Optional[int] = Field(None, ge=1)
    required_by: Optional[IsoDateTime] = None
    hospital_name: Optional[TrimmedStr] = Field(None, min_length=2)
    doctor_name: Optional[TrimmedStr] = Field(None, min_length=2)
    primary_contact: Optional[TrimmedStr] = None
    emergency_contact: Optional[TrimmedStr] = None
    location: Optional[TrimmedStr] = Field(None, min_length=5)
    medical_reason: Optional[TrimmedStr] = Field(None, min_length=10)
    additional_information: Optional[TrimmedStr] = None
    details_description: Optional[TrimmedStr] = None

    @model_validator(mode='after')
    def validate_not_nulled(self):
        for name in self.model_fields_set:
            if name in self.REQUIRED_FIELDS and getattr(self, name) is None:
                raise ValueError(f'{name} cannot be null')
        return self


class ReportRules(CamelModel):
    """Validators shared by report creation and update."""

    @field_validator('user_identification', check_fields=False)
    @classmethod
    def validate_identification(cls, v, info: ValidationInfo):
        if v is not None and not is_phone_or_email(v):
            raise ValueError('User identification must be a valid phone number or email')
        # Anonymous reports never keep an identification
        if info.data.get('anonymous'):
            return None
        return v


class CreateReportRequest(ReportRules):
    """Request model for filing a report."""

    # anonymous is declared first so the identification validator can see it
    anonymous: bool = Field(default=False, description="Hide the reporter identity")
    user_type: ReporterType = Field(..., description="Kind of reporter")
    user_identification: Optional[TrimmedStr] = Field(None, description="Phone or email of the reporter")
    report_category: ReportCategory = Field(..., description="Report category")
    detailed_description: TrimmedStr = Field(..., min_length=10, description="What happened")
    supporting_evidence: Optional[TrimmedStr] = Field(None, description="Evidence reference")

    @model_validator(mode='after')
    def validate_identification_required(self):
        if not self.anonymous and not self.user_identification:
            raise ValueError('User identification is required unless the report is anonymous')
        return self


class UpdateReportRequest(ReportRules):
    """Partial update of a report."""

    REQUIRED_FIELDS: ClassVar[Tuple[str, ...]] = (
        "user_type", "report_category", "detailed_description", "anonymous"
    )

    anonymous: Optional[bool] = None
    user_type: Optional[ReporterType] = None
    user_identification: Optional[TrimmedStr] = None
    report_category: Optional[ReportCategory] = None
    detailed_description: Optional[TrimmedStr] = Field(None, min_length=10)
    supporting_evidence: Optional[TrimmedStr] = None

    @model_validator(mode='after')
    def validate_not_nulled(self):
        for name in self.model_fields_set:
            if name in self.REQUIRED_FIELDS and getattr(self, name) is None:
                raise ValueError(f'{name} cannot be null')
        return self


class BloodRequestFilters(CamelModel):
    """Exact-match filters accepted when listing blood requests."""

    urgency_level: Optional[UrgencyLevel] = None
    blood_group: Optional[BloodGroup] = None


class ReportFilters(CamelModel):
    """Exact-match filters accepted when listing reports."""

    category: Optional[ReportCategory] = None
    anonymous: Optional[bool] = None
