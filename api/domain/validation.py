# SPDX-License-Identifier: Apache-2.0

"""
Record validation rules shared by the request models and services.

Pure functions only: the current instant is always passed in by the caller
so that age and deadline checks stay deterministic under test.
"""

import re
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

PHONE_PATTERN = re.compile(r'^\+?[\d\s-]{10,}$')
MIN_PHONE_DIGITS = 10
EMAIL_PATTERN = re.compile(r'^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$')

MIN_DONOR_AGE = 18
MAX_DONOR_AGE = 65
MIN_DONOR_WEIGHT = 50


def utc_now() -> datetime:
    """Default clock used by services and token issuing."""
    return datetime.now(timezone.utc)


def is_phone_number(value: str) -> bool:
    """Optional leading '+', then digits, spaces or hyphens with at least ten digits."""
    if not PHONE_PATTERN.match(value):
        return False
    return sum(char.isdigit() for char in value) >= MIN_PHONE_DIGITS


def is_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value))


def is_phone_or_email(value: str) -> bool:
    """Combined check used for contact and identification fields."""
    return is_phone_number(value) or is_email(value)


def ensure_aware(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_datetime(value: Any) -> Any:
    """
    Coerce ISO-8601 strings (date-only or full, with or without 'Z') and
    date objects into timezone-aware datetimes.

    Values of other types are returned untouched so Pydantic can report them.
    """
    if isinstance(value, str):
        text = value.strip()
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError('Invalid date format, expected ISO 8601')
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)

    if isinstance(value, datetime):
        return ensure_aware(value)
    return value


def calculate_age(birth_date: date, today: date) -> int:
    """
    Whole years elapsed between birth_date and today.

    One year is subtracted when the birthday has not yet occurred in the
    current year.
    """
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def is_eligible_age(birth_date: date, today: date) -> bool:
    return MIN_DONOR_AGE <= calculate_age(birth_date, today) <= MAX_DONOR_AGE


def is_in_future(moment: datetime, now: datetime) -> bool:
    """True when moment is strictly after now."""
    return ensure_aware(moment) > ensure_aware(now)


def normalize_email(email: Optional[str]) -> Optional[str]:
    if not isinstance(email, str):
        return None
    return email.strip().lower()


def strip_fields(document: Dict[str, Any], *fields: str) -> Dict[str, Any]:
    """Return a shallow copy of document without the given fields."""
    return {key: value for key, value in document.items() if key not in fields}
