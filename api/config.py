# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Application configuration read from environment variables.

A ``.env`` file in the working directory is loaded first when present.
MongoDB pool sizing (``MONGODB_MAX_POOL_SIZE`` and friends) is read by
the MongoDB service itself.
"""

import os
import logging
from typing import Any, Dict
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEV_JWT_SECRET = 'dev-secret-key'


class ConfigurationError(RuntimeError):
    """Raised when the environment is unsafe or malformed."""


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


def _int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def load_config() -> Dict[str, Any]:
    """Build the application config dictionary from the environment."""
    load_dotenv()

    environment = os.getenv('ENVIRONMENT', 'development')

    return {
        'ENVIRONMENT': environment,
        'DEBUG': environment == 'development',
        'PORT': _int('PORT', 3000),

        # Database
        'MONGODB_URI': os.getenv('MONGODB_URI', 'mongodb://localhost:27017/blood_donation'),
        'MONGODB_DATABASE': os.getenv('MONGODB_DATABASE', 'blood_donation'),
        'MONGODB_CREATE_INDEXES': _flag('MONGODB_CREATE_INDEXES', 'true'),

        # Security
        'JWT_SECRET': os.getenv('JWT_SECRET', DEV_JWT_SECRET),
        'JWT_EXPIRES_DAYS': _int('JWT_EXPIRES_DAYS', 7),
        'BCRYPT_ROUNDS': _int('BCRYPT_ROUNDS', 12),

        # Observability
        'OTEL_ENABLED': _flag('OTEL_ENABLED', 'true'),
        'OTEL_EXPORTER_OTLP_ENDPOINT': os.getenv('OTEL_EXPORTER_OTLP_ENDPOINT'),
        'SERVICE_VERSION': os.getenv('SERVICE_VERSION', '1.0.0'),
        'LOG_LEVEL': os.getenv('LOG_LEVEL'),
    }


def check_config(config: Dict[str, Any]) -> None:
    """
    Refuse unsafe settings.

    Raises:
        ConfigurationError: If the JWT secret is empty or is the development
            secret in production, or a numeric setting is out of range
    """
    if not config['JWT_SECRET']:
        raise ConfigurationError("JWT_SECRET must not be empty")

    if config['JWT_SECRET'] == DEV_JWT_SECRET:
        if config['ENVIRONMENT'] == 'production':
            raise ConfigurationError("JWT_SECRET must be set in production")
        logger.warning("JWT_SECRET not set, using insecure development secret")

    if config['JWT_EXPIRES_DAYS'] < 1:
        raise ConfigurationError("JWT_EXPIRES_DAYS must be at least 1")

    # bcrypt accepts cost factors 4..31
    if not 4 <= config['BCRYPT_ROUNDS'] <= 31:
        raise ConfigurationError("BCRYPT_ROUNDS must be between 4 and 31")
