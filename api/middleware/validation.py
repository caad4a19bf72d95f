# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request validation using Pydantic models.
Converts Pydantic validation failures into ValidationException with
field-level details.
"""

from typing import Type, TypeVar, Dict, Any, List, Optional
from pydantic import BaseModel, ValidationError
from opentelemetry import trace
import logging

from middleware.error_handler import ValidationException
from utils.request import RequestParser

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

VALUE_ERROR_PREFIX = "Value error, "


def format_validation_errors(validation_error: ValidationError) -> List[Dict[str, Any]]:
    """
    Format Pydantic validation errors for API response.

    Args:
        validation_error: Pydantic ValidationError

    Returns:
        List of formatted error dictionaries
    """
    errors = []

    for error in validation_error.errors(include_url=False):
        message = error["msg"]
        if message.startswith(VALUE_ERROR_PREFIX):
            message = message[len(VALUE_ERROR_PREFIX):]

        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": message,
            "type": error["type"]
        })

    return errors


def summarize_errors(errors: List[Dict[str, Any]]) -> str:
    """Build the top-level message from the first violation."""
    if not errors:
        return "Validation failed"
    first = errors[0]
    if first["field"]:
        return f"{first['field']}: {first['message']}"
    return first["message"]


def validate_payload(model_class: Type[ModelT], data: Any,
                     context: Optional[Dict[str, Any]] = None) -> ModelT:
    """
    Validate a payload against a Pydantic model.

    Args:
        model_class: Pydantic model class for validation
        data: Raw payload (usually the parsed JSON body)
        context: Validation context, e.g. the reference instant under "now"

    Returns:
        Validated model instance

    Raises:
        ValidationException: With the first violation as message and all
            violations as details
    """
    with tracer.start_as_current_span("validation.validate_payload") as span:
        span.set_attribute("validation.model", model_class.__name__)

        try:
            validated = model_class.model_validate(data, context=context)
        except ValidationError as e:
            span.set_attribute("validation.result", "validation_error")
            validation_errors = format_validation_errors(e)

            logger.info(
                "Request validation failed",
                extra={
                    "model": model_class.__name__,
                    "fields": [error["field"] for error in validation_errors]
                }
            )

            raise ValidationException(summarize_errors(validation_errors), validation_errors)

        span.set_attribute("validation.result", "success")
        return validated


def json_body() -> Dict[str, Any]:
    """
    Parse the current request's JSON object body.

    Raises:
        ValidationException: If the body is not a JSON object
    """
    try:
        return RequestParser.parse_json_body()
    except ValueError as e:
        raise ValidationException(str(e), [{
            "field": "body",
            "message": str(e),
            "type": "json_error"
        }])
