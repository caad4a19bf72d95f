# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for the blood donation platform.

Entities mirror what is stored in MongoDB. Public projections live in
models.responses.
"""

from datetime import datetime
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field

from .base import BaseEntity
from .enums import Gender, BloodGroup, UrgencyLevel, ReporterType, ReportCategory


class Donor(BaseEntity):
    """Registered blood donor, including the stored password digest."""

    full_name: str = Field(..., description="Donor full name")
    email: str = Field(..., description="Unique, lower-cased email address")
    phone_number: str = Field(..., description="Unique phone number")
    date_of_birth: datetime = Field(..., description="Date of birth")
    gender: Gender = Field(..., description="Donor gender")
    blood_group: BloodGroup = Field(..., description="ABO/Rh blood group")
    weight: float = Field(..., description="Weight in kilograms")
    address: str = Field(..., description="Postal address")
    password_hash: Optional[str] = Field(None, description="bcrypt digest, never returned")


class BloodRequest(BaseEntity):
    """Solicitation for blood units for a patient."""

    patient_name: str
    blood_group: BloodGroup
    urgency_level: UrgencyLevel
    units_needed: int
    required_by: datetime
    hospital_name: str
    doctor_name: str
    primary_contact: str
    emergency_contact: str
    location: str
    medical_reason: str
    additional_information: Optional[str] = None
    details_description: Optional[str] = None


class Report(BaseEntity):
    """Abuse or incident report."""

    user_type: ReporterType
    user_identification: Optional[str] = None
    report_category: ReportCategory
    detailed_description: str
    supporting_evidence: Optional[str] = None
    anonymous: bool = False


class DonorContext(BaseModel):
    """Authenticated donor context for request processing."""

    donor_id: str = Field(..., description="Donor ID from the token subject")
    email: Optional[str] = Field(None, description="Donor email")
    token_payload: Dict[str, Any] = Field(default_factory=dict, description="Decoded token claims")
    ip_address: Optional[str] = Field(None, description="Client IP address")
    user_agent: Optional[str] = Field(None, description="Client user agent")
