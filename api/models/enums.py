# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the blood donation platform.
"""

from enum import Enum


class Gender(str, Enum):
    """Donor gender enumeration."""
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class BloodGroup(str, Enum):
    """ABO/Rh blood group combinations."""
    A_POSITIVE = "A+"
    A_NEGATIVE = "A-"
    B_POSITIVE = "B+"
    B_NEGATIVE = "B-"
    AB_POSITIVE = "AB+"
    AB_NEGATIVE = "AB-"
    O_POSITIVE = "O+"
    O_NEGATIVE = "O-"


class UrgencyLevel(str, Enum):
    """Blood request urgency levels."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class ReporterType(str, Enum):
    """Kind of user filing a report."""
    BLOOD_DONOR = "blood donor"
    RECIPIENT = "recipient"
    OTHER = "other"


class ReportCategory(str, Enum):
    """Abuse report categories."""
    FAKE_PEOPLE = "fake people"
    HARASSMENT = "harassment"
    SPAM = "spam"
    FRAUD = "fraud"
    OTHER = "other"
    RUDE_BEHAVIOR = "rude behavior"
