# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Donor account endpoints: registration, login and profile.
"""

from flask import current_app, g
from flask_openapi3 import APIBlueprint, Tag
import logging

from middleware.auth import require_auth
from middleware.validation import json_body
from models.responses import ErrorResponse, SuccessResponse
from utils.request import ResponseBuilder

logger = logging.getLogger(__name__)

donor_tag = Tag(name="Donors", description="Donor registration and authentication")
donor_bp = APIBlueprint(
    'donors',
    __name__,
    url_prefix='/api/v1/donor',
    abp_tags=[donor_tag]
)


@donor_bp.post('/register', responses={201: SuccessResponse, 400: ErrorResponse})
def register():
    """
    Register a donor and return a signed token.

    Fails with 400 when the email or phone number is already registered,
    when the passwords differ, or when any field is invalid (including an
    age outside 18-65).
    """
    result = current_app.donor_service.register(json_body())
    return ResponseBuilder.success(result, "Donor registered successfully", 201)


@donor_bp.post('/login', responses={200: SuccessResponse, 401: ErrorResponse})
def login():
    """
    Authenticate a donor by email and password and return a signed token.
    """
    result = current_app.donor_service.login(json_body())
    return ResponseBuilder.success(result, "Login successful")


@donor_bp.get(
    '/profile',
    responses={200: SuccessResponse, 401: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    security=[{"bearerAuth": []}]
)
@require_auth
def get_profile():
    """Return the authenticated donor's profile without the password digest."""
    donor = current_app.donor_service.get_profile(g.donor_context.donor_id)
    return ResponseBuilder.success(donor, "Donor profile retrieved successfully")
