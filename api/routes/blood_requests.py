# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Blood request endpoints.

Creation and reads are public; updates and deletions require a donor token.
"""

from flask import current_app, g
from flask_openapi3 import APIBlueprint, Tag
from pydantic import BaseModel, Field
import logging

from middleware.auth import require_auth
from middleware.validation import json_body
from models.responses import ErrorResponse, SuccessResponse
from utils.request import RequestParser, ResponseBuilder

logger = logging.getLogger(__name__)

FILTERS = ["urgencyLevel", "bloodGroup"]

blood_requests_tag = Tag(name="Blood Requests", description="Requests for blood donations")
blood_requests_bp = APIBlueprint(
    'blood_requests',
    __name__,
    url_prefix='/api/v1/blood-requests',
    abp_tags=[blood_requests_tag]
)


class BloodRequestPath(BaseModel):
    request_id: str = Field(..., description="Blood request identifier")


@blood_requests_bp.post('', responses={201: SuccessResponse, 400: ErrorResponse})
def create_blood_request():
    """Create a blood request (public)."""
    blood_request = current_app.blood_request_service.create(json_body())
    return ResponseBuilder.success(blood_request, "Blood request created successfully", 201)


@blood_requests_bp.get('', responses={200: SuccessResponse, 400: ErrorResponse})
def list_blood_requests():
    """
    List blood requests newest first.

    Supports exact-match filters on urgencyLevel and bloodGroup and
    page/limit pagination.
    """
    pagination = RequestParser.get_pagination_params()
    result = current_app.blood_request_service.list(
        RequestParser.get_filter_params(FILTERS),
        pagination['page'],
        pagination['limit']
    )
    return ResponseBuilder.paginated(
        result.items,
        result.total,
        result.page,
        result.page_size,
        "Blood requests retrieved successfully"
    )


@blood_requests_bp.get('/<request_id>', responses={200: SuccessResponse, 404: ErrorResponse})
def get_blood_request(path: BloodRequestPath):
    """Get a single blood request (public)."""
    blood_request = current_app.blood_request_service.get(path.request_id)
    return ResponseBuilder.success(blood_request, "Blood request retrieved successfully")


@blood_requests_bp.put(
    '/<request_id>',
    responses={200: SuccessResponse, 400: ErrorResponse, 401: ErrorResponse, 403: ErrorResponse,
               404: ErrorResponse},
    security=[{"bearerAuth": []}]
)
@require_auth
def update_blood_request(path: BloodRequestPath):
    """Update a blood request; supplied fields are re-validated."""
    blood_request = current_app.blood_request_service.update(path.request_id, json_body())
    logger.info(
        "Blood request update by donor",
        extra={"blood_request_id": path.request_id, "donor_id": g.donor_context.donor_id}
    )
    return ResponseBuilder.success(blood_request, "Blood request updated successfully")


@blood_requests_bp.delete(
    '/<request_id>',
    responses={200: SuccessResponse, 401: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    security=[{"bearerAuth": []}]
)
@require_auth
def delete_blood_request(path: BloodRequestPath):
    """Delete a blood request."""
    current_app.blood_request_service.delete(path.request_id)
    logger.info(
        "Blood request deletion by donor",
        extra={"blood_request_id": path.request_id, "donor_id": g.donor_context.donor_id}
    )
    return ResponseBuilder.success(message="Blood request deleted successfully")
