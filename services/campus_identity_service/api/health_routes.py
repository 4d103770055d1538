"""
Health check and metrics endpoints for Campus Identity Service.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dishka import FromDishka
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest
from quart import Blueprint, Response, current_app, jsonify
from quart_dishka import inject
from sqlalchemy import text
from uapmp_service_libs.logging_utils import create_service_logger

from services.campus_identity_service.config import Settings

if TYPE_CHECKING:
    from uapmp_service_libs import UapmpApp

bp = Blueprint("health", __name__)
logger = create_service_logger("campus_identity_service.health_routes")


@bp.route("/healthz")
@inject
async def health_check(settings: FromDishka[Settings]) -> Response | tuple[Response, int]:
    """Standardized health check endpoint."""
    try:
        checks = {"service_responsive": True, "dependencies_available": True}
        dependencies: dict[str, dict[str, str]] = {}

        if TYPE_CHECKING:
            assert isinstance(current_app, UapmpApp)
        engine = current_app.database_engine

        if engine is None:
            dependencies["account_store"] = {"status": "healthy", "kind": settings.ACCOUNT_STORE}
        else:
            try:
                async with engine.begin() as conn:
                    await conn.execute(text("SELECT 1"))
                dependencies["account_store"] = {"status": "healthy", "kind": "database"}
            except Exception as e:
                logger.warning(f"Database health check failed: {e}")
                dependencies["account_store"] = {"status": "unhealthy", "error": str(e)}
                checks["dependencies_available"] = False

        status = "healthy" if all(checks.values()) else "unhealthy"
        response_data = {
            "service": settings.SERVICE_NAME,
            "status": status,
            "environment": settings.ENVIRONMENT.value,
            "message": f"Campus Identity Service is {status}",
            "checks": checks,
            "dependencies": dependencies,
        }

        status_code = 200 if status == "healthy" else 503
        return jsonify(response_data), status_code

    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return jsonify(
            {
                "service": "campus_identity_service",
                "status": "unhealthy",
                "message": "Campus Identity Service is unhealthy",
                "error": str(e),
            }
        ), 503


@bp.route("/metrics")
@inject
async def metrics(registry: FromDishka[CollectorRegistry]) -> Response:
    """Prometheus metrics endpoint."""
    try:
        metrics_data = generate_latest(registry)
        return Response(metrics_data, content_type=CONTENT_TYPE_LATEST)
    except Exception as e:
        logger.error(f"Error generating metrics: {e}")
        return Response("Error generating metrics", status=500)
