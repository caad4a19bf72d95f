# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Abuse report endpoints.

Anyone may submit or browse reports; reading a single report, updating
and deleting require a donor token. Listings never expose the reporter's
identification.
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

FILTERS = ["category", "anonymous"]

reports_tag = Tag(name="Reports", description="Abuse and misconduct reports")
reports_bp = APIBlueprint(
    'reports',
    __name__,
    url_prefix='/api/v1/reports',
    abp_tags=[reports_tag]
)


class ReportPath(BaseModel):
    report_id: str = Field(..., description="Report identifier")


@reports_bp.post('', responses={201: SuccessResponse, 400: ErrorResponse})
def create_report():
    """
    Submit a report.

    Anonymous submissions discard any identification and are answered
    with id, userType, reportCategory and createdAt only.
    """
    report = current_app.report_service.create(json_body())
    return ResponseBuilder.success(report, "Report submitted successfully", 201)


@reports_bp.get('', responses={200: SuccessResponse, 400: ErrorResponse})
def list_reports():
    """List reports newest first, filtered by category and anonymous."""
    pagination = RequestParser.get_pagination_params()
    result = current_app.report_service.list(
        RequestParser.get_filter_params(FILTERS),
        pagination['page'],
        pagination['limit']
    )
    return ResponseBuilder.paginated(
        result.items,
        result.total,
        result.page,
        result.page_size,
        "Reports retrieved successfully"
    )


@reports_bp.get(
    '/<report_id>',
    responses={200: SuccessResponse, 401: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    security=[{"bearerAuth": []}]
)
@require_auth
def get_report(path: ReportPath):
    report = current_app.report_service.get(path.report_id)
    return ResponseBuilder.success(report, "Report retrieved successfully")


@reports_bp.put(
    '/<report_id>',
    responses={200: SuccessResponse, 400: ErrorResponse, 401: ErrorResponse, 403: ErrorResponse,
               404: ErrorResponse},
    security=[{"bearerAuth": []}]
)
@require_auth
def update_report(path: ReportPath):
    """Update a report; turning it anonymous erases the stored identification."""
    report = current_app.report_service.update(path.report_id, json_body())
    logger.info(
        "Report update by donor",
        extra={"report_id": path.report_id, "donor_id": g.donor_context.donor_id}
    )
    return ResponseBuilder.success(report, "Report updated successfully")


@reports_bp.delete(
    '/<report_id>',
    responses={200: SuccessResponse, 401: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    security=[{"bearerAuth": []}]
)
@require_auth
def delete_report(path: ReportPath):
    current_app.report_service.delete(path.report_id)
    logger.info(
        "Report deletion by donor",
        extra={"report_id": path.report_id, "donor_id": g.donor_context.donor_id}
    )
    return ResponseBuilder.success(message="Report deleted successfully")
