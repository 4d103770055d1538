"""
Campus Identity Service Application: registration, email verification and login
for university-affiliated accounts.
"""

from __future__ import annotations

from uapmp_service_libs import UapmpApp
from uapmp_service_libs.logging_utils import (
    configure_service_logging,
    create_service_logger,
)

from services.campus_identity_service.api.auth_routes import bp as auth_bp
from services.campus_identity_service.api.health_routes import bp as health_bp
from services.campus_identity_service.api.registration_routes import bp as registration_bp
from services.campus_identity_service.api.verification_routes import bp as verification_bp
from services.campus_identity_service.config import settings
from services.campus_identity_service.startup_setup import initialize_services, shutdown_services

configure_service_logging("campus-identity-service", log_level=settings.LOG_LEVEL)
logger = create_service_logger("campus_identity_service.app")

app = UapmpApp(__name__)


@app.before_serving
async def startup() -> None:
    await initialize_services(app, settings)
    logger.info("Campus Identity Service startup completed successfully")


@app.after_serving
async def shutdown() -> None:
    await shutdown_services(app)


# Register blueprints
app.register_blueprint(health_bp)  # Health check must be first for monitoring
app.register_blueprint(registration_bp)
app.register_blueprint(verification_bp)
app.register_blueprint(auth_bp)  # Login and current account
