# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request utilities for extracting request data and building responses.
"""

from flask import request
from typing import Dict, Any, Optional, List
import math
import logging

logger = logging.getLogger(__name__)


class RequestParser:
    """Utility for parsing and extracting request data."""

    @staticmethod
    def get_pagination_params(
        default_page: int = 1,
        default_limit: int = 10,
        max_limit: int = 100
    ) -> Dict[str, int]:
        """
        Extract pagination parameters from request.

        Args:
            default_page: Default page number
            default_limit: Default page size
            max_limit: Maximum allowed page size

        Returns:
            Dictionary with page and limit
        """
        try:
            page = int(request.args.get('page', default_page))
            page = max(1, page)  # Ensure page is at least 1
        except (ValueError, TypeError):
            page = default_page

        try:
            limit = int(request.args.get('limit', default_limit))
            limit = max(1, min(limit, max_limit))  # Clamp between 1 and max
        except (ValueError, TypeError):
            limit = default_limit

        return {
            'page': page,
            'limit': limit
        }

    @staticmethod
    def get_filter_params(allowed_filters: List[str]) -> Dict[str, str]:
        """
        Extract the allowed filter parameters present in the query string.

        Args:
            allowed_filters: Query parameter names that may be used as filters

        Returns:
            Dictionary with the non-empty filters
        """
        filters = {}
        for name in allowed_filters:
            value = request.args.get(name)
            if value not in (None, ''):
                filters[name] = value
        return filters

    @staticmethod
    def parse_json_body() -> Dict[str, Any]:
        """
        Parse a JSON object request body.

        Returns:
            Parsed JSON object; an empty dict when the body is absent

        Raises:
            ValueError: If the body is not valid JSON or not an object
        """
        data = request.get_json(silent=True)
        if data is None:
            if request.get_data(cache=True):
                raise ValueError("Request body must be valid JSON")
            return {}
        if not isinstance(data, dict):
            raise ValueError("Request body must be a JSON object")
        return data


class ResponseBuilder:
    """Utility for building consistent API responses."""

    @staticmethod
    def success(
        data: Any = None,
        message: str = "Success",
        status_code: int = 200,
        headers: Optional[Dict[str, str]] = None
    ) -> tuple:
        """
        Build success response.

        Args:
            data: Response data
            message: Success message
            status_code: HTTP status code
            headers: Additional headers

        Returns:
            Tuple of (response_data, status_code, headers)
        """
        response = {
            'success': True,
            'message': message
        }

        if data is not None:
            response['data'] = data

        return response, status_code, headers or {}

    @staticmethod
    def error(
        message: str,
        status_code: int = 400,
        error_type: str = "error",
        details: Optional[List[Dict[str, Any]]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> tuple:
        """
        Build error response.

        Args:
            message: Error message
            status_code: HTTP status code
            error_type: Error type identifier
            details: Field-level error details
            headers: Additional headers

        Returns:
            Tuple of (response_data, status_code, headers)
        """
        response = {
            'success': False,
            'error': {
                'type': error_type,
                'message': message
            }
        }

        if details:
            response['error']['details'] = details

        return response, status_code, headers or {}

    @staticmethod
    def paginated(
        items: List[Any],
        total: int,
        page: int,
        limit: int,
        message: str = "Success"
    ) -> tuple:
        """
        Build paginated success response.

        Args:
            items: List of items for current page
            total: Total number of matching items
            page: Current page number
            limit: Items per page
            message: Success message

        Returns:
            Tuple of (response_data, status_code, headers)
        """
        total_pages = math.ceil(total / limit) if limit > 0 else 0

        response, status_code, headers = ResponseBuilder.success(items, message)
        response['pagination'] = {
            'page': page,
            'limit': limit,
            'total': total,
            'totalPages': total_pages,
            'hasNext': page < total_pages,
            'hasPrev': page > 1
        }

        return response, status_code, headers


class HeaderUtils:
    """Utilities for working with HTTP headers."""

    @staticmethod
    def get_bearer_token() -> Optional[str]:
        """
        Extract Bearer token from Authorization header.

        Returns:
            Token string or None if not found
        """
        auth_header = request.headers.get('Authorization', '')
        scheme, _, token = auth_header.partition(' ')
        if scheme.lower() == 'bearer' and token.strip():
            return token.strip()
        return None
