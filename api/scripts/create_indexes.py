#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Create the donor, blood request and report indexes before the API is
deployed, then log the index names found on each collection.

Run against every new database before the API serves traffic; the unique
email and phone number indexes on ``donors`` reject duplicate registrations.
"""

import sys
import os
import logging
from typing import Dict, List

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import load_config
from observability.config import setup_structured_logging
from services.mongodb import MongoDBService, DONORS, BLOOD_REQUESTS, REPORTS

logger = logging.getLogger(__name__)

COLLECTIONS = (DONORS, BLOOD_REQUESTS, REPORTS)


def ensure_indexes(mongodb_service: MongoDBService) -> Dict[str, List[str]]:
    """
    Create all indexes and return the index names per collection.

    Raises:
        RuntimeError: If the database does not answer a ping
    """
    health = mongodb_service.health_check()
    if health['status'] != 'healthy':
        raise RuntimeError(f"database {health['database']} is unreachable: {health.get('error')}")

    mongodb_service.create_indexes()

    return {
        name: sorted(mongodb_service.get_collection(name).index_information())
        for name in COLLECTIONS
    }


def main() -> int:
    config = load_config()
    setup_structured_logging(config['ENVIRONMENT'], config['LOG_LEVEL'])

    mongodb_service = MongoDBService(config['MONGODB_URI'], config['MONGODB_DATABASE'])
    try:
        indexes = ensure_indexes(mongodb_service)
    except Exception:
        logger.exception("Index creation failed", extra={"database": config['MONGODB_DATABASE']})
        return 1
    finally:
        mongodb_service.close_connection()

    for collection, names in indexes.items():
        logger.info(f"{collection}: {', '.join(names)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
