"""
Blood Donation API - Flask Application Entry Point

This module builds the Flask application with OpenAPI 3.0 support, wires
the services and middleware, and registers the donor, blood request and
report blueprints.
"""

from datetime import datetime
from typing import Any, Callable, Dict, Optional
from flask_openapi3 import OpenAPI, Info, Tag
import logging

from config import check_config, load_config
from domain.validation import utc_now
from observability.config import setup_observability
from observability.middleware import add_observability_middleware
from middleware.auth import AuthMiddleware
from middleware.error_handler import ErrorHandlerMiddleware
from models.responses import SuccessResponse
from services.auth import AuthService
from services.blood_requests import BloodRequestService
from services.donors import DonorService
from services.mongodb import MongoDBService
from services.reports import ReportService
from utils.request import ResponseBuilder

logger = logging.getLogger(__name__)

info = Info(
    title="Blood Donation API",
    version="1.0.0",
    description="Donor accounts, blood requests and abuse reports"
)

health_tag = Tag(name="Health", description="System health and status")

security_schemes = {
    "bearerAuth": {
        "type": "http",
        "scheme": "bearer",
        "bearerFormat": "JWT"
    }
}


def create_app(config_overrides: Optional[Dict[str, Any]] = None,
               mongodb_service: Optional[MongoDBService] = None,
               clock: Optional[Callable[[], datetime]] = None) -> OpenAPI:
    """
    Create and configure the application.

    Args:
        config_overrides: Values replacing those read from the environment
        mongodb_service: Storage to use instead of connecting to MONGODB_URI
        clock: Returns the current timezone-aware instant

    Returns:
        Configured OpenAPI (Flask) application
    """
    config = load_config()
    config.update(config_overrides or {})
    check_config(config)

    setup_observability(config)

    app = OpenAPI(__name__, info=info, security_schemes=security_schemes)
    app.config.update(config)

    add_observability_middleware(app)

    clock = clock or utc_now
    if mongodb_service is None:
        mongodb_service = MongoDBService(
            app.config['MONGODB_URI'],
            app.config['MONGODB_DATABASE'],
            clock=clock
        )
    auth_service = AuthService(
        app.config['JWT_SECRET'],
        app.config['JWT_EXPIRES_DAYS'],
        app.config['BCRYPT_ROUNDS'],
        clock=clock
    )

    # Make services available to routes
    app.mongodb_service = mongodb_service
    app.auth_service = auth_service
    app.auth_middleware = AuthMiddleware(auth_service)
    app.donor_service = DonorService(mongodb_service, auth_service, clock)
    app.blood_request_service = BloodRequestService(mongodb_service, clock)
    app.report_service = ReportService(mongodb_service)

    ErrorHandlerMiddleware(app)

    if app.config['MONGODB_CREATE_INDEXES']:
        mongodb_service.create_indexes()

    from routes.donors import donor_bp
    from routes.blood_requests import blood_requests_bp
    from routes.reports import reports_bp

    app.register_api(donor_bp)
    app.register_api(blood_requests_bp)
    app.register_api(reports_bp)

    @app.get('/api/healthz', tags=[health_tag], responses={200: SuccessResponse})
    def health_check():
        """Report service health; 503 when MongoDB does not answer a ping."""
        database = mongodb_service.health_check()
        healthy = database['status'] == 'healthy'

        health_data = {
            "status": "healthy" if healthy else "unhealthy",
            "service": "blood-donation-api",
            "version": app.config['SERVICE_VERSION'],
            "environment": app.config['ENVIRONMENT'],
            "timestamp": clock().isoformat(),
            "dependencies": {"mongodb": database}
        }

        if healthy:
            return ResponseBuilder.success(health_data, "Service healthy")
        return ResponseBuilder.error(
            "Service unhealthy",
            503,
            "service-unavailable",
            [{
                "field": "mongodb",
                "message": database.get('error', 'ping failed'),
                "type": "dependency-unavailable"
            }]
        )

    logger.info(
        "Application created",
        extra={"environment": app.config['ENVIRONMENT'], "database": mongodb_service.database_name}
    )
    return app


if __name__ == '__main__':
    # Development server
    application = create_app()
    application.run(
        host='0.0.0.0',
        port=application.config['PORT'],
        debug=application.config['DEBUG']
    )
