# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Services package - storage, authentication and the donation workflows.
"""

from .mongodb import MongoDBService, PaginationResult
from .auth import AuthService, AuthenticationError, TokenValidationError

__all__ = [
    "MongoDBService",
    "PaginationResult",
    "AuthService",
    "AuthenticationError",
    "TokenValidationError"
]
