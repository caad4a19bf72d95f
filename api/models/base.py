# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Base models with common configuration, fields and validation helpers.
"""

from datetime import datetime
from typing import Annotated, Optional
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel
from bson import ObjectId

from domain.validation import parse_datetime


def generate_object_id() -> str:
    """Generate a new MongoDB ObjectId as string."""
    return str(ObjectId())


# Strings are trimmed before any length constraint is applied
TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True)]

# Accepts ISO-8601 date or datetime strings; naive values are read as UTC
IsoDateTime = Annotated[datetime, BeforeValidator(parse_datetime)]


class CamelModel(BaseModel):
    """Base model exchanging camelCase JSON while exposing snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        # Allow population by field name or alias
        populate_by_name=True,
        # Use enum values instead of enum objects
        use_enum_values=True,
        validate_assignment=True
    )


class BaseEntity(CamelModel):
    """Base entity with the fields every stored document carries."""

    id: str = Field(default_factory=generate_object_id, description="Unique identifier")
    created_at: Optional[IsoDateTime] = Field(None, description="Creation timestamp")
    updated_at: Optional[IsoDateTime] = Field(None, description="Last update timestamp")
