# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.

Storage is an in-process mongomock client and time is frozen, so the
suite needs neither a MongoDB server nor a real clock.
"""

import os
import pytest
import mongomock
from datetime import datetime, timezone
from typing import Dict, Any

# Set test environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'
os.environ['MONGODB_DATABASE'] = 'blood_donation_test'

from app import create_app
from services.auth import AuthService
from services.mongodb import MongoDBService

FIXED_NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)
TEST_SECRET = 'test-secret-key'


@pytest.fixture
def fixed_now():
    """The frozen current instant."""
    return FIXED_NOW


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def mongodb_client():
    """In-memory MongoDB client for testing."""
    client = mongomock.MongoClient(tz_aware=True)
    yield client
    client.close()


@pytest.fixture
def mongodb_service(mongodb_client, clock):
    """MongoDB service over mongomock with indexes in place."""
    service = MongoDBService(
        database_name='blood_donation_test',
        client=mongodb_client,
        clock=clock
    )
    service.create_indexes()
    return service


@pytest.fixture
def auth_service(clock):
    """Auth service with a low bcrypt cost to keep tests fast."""
    return AuthService(TEST_SECRET, token_expire_days=7, bcrypt_rounds=4, clock=clock)


@pytest.fixture
def app(mongodb_service, clock):
    """Flask application wired to the test storage and clock."""
    application = create_app(
        config_overrides={
            'JWT_SECRET': TEST_SECRET,
            'BCRYPT_ROUNDS': 4,
            'OTEL_ENABLED': False,
            'MONGODB_CREATE_INDEXES': True
        },
        mongodb_service=mongodb_service,
        clock=clock
    )
    application.config['TESTING'] = True
    return application


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def sample_donor_data() -> Dict[str, Any]:
    """Registration payload for an eligible 34-year-old donor."""
    return {
        "fullName": "Jane Donor",
        "email": "Jane.Donor@Example.com",
        "phoneNumber": "+1 555-123-4567",
        "dateOfBirth": "1990-05-20",
        "gender": "Female",
        "bloodGroup": "O+",
        "weight": 62.5,
        "address": "12 Harbour Street, Springfield",
        "password": "secret123",
        "confirmPassword": "secret123"
    }


@pytest.fixture
def sample_blood_request_data() -> Dict[str, Any]:
    """Blood request payload due five days after the frozen instant."""
    return {
        "patientName": "John Patient",
        "bloodGroup": "A+",
        "urgencyLevel": "High",
        "unitsNeeded": 2,
        "requiredBy": "2024-06-20T10:00:00Z",
        "hospitalName": "City General Hospital",
        "doctorName": "Dr. Smith",
        "primaryContact": "+1 555-987-6543",
        "emergencyContact": "family@example.com",
        "location": "Springfield Downtown",
        "medicalReason": "Scheduled cardiac surgery"
    }


@pytest.fixture
def sample_report_data() -> Dict[str, Any]:
    """Non-anonymous report payload."""
    return {
        "userType": "recipient",
        "userIdentification": "reporter@example.com",
        "reportCategory": "fraud",
        "detailedDescription": "Donor asked for payment before donating",
        "anonymous": False
    }
