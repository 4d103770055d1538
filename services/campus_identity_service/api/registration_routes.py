"""Account registration routes for Campus Identity Service.

All business logic is delegated to RegistrationHandler.
"""

from __future__ import annotations

from uuid import UUID

from dishka import FromDishka
from quart import Blueprint, Response, jsonify
from quart_dishka import inject
from uapmp_service_libs.error_handling import UapmpError
from uapmp_service_libs.logging_utils import create_service_logger

from services.campus_identity_service.api.error_responses import (
    error_response,
    unexpected_error_response,
)
from services.campus_identity_service.api.request_utils import parse_json_body, start_request
from services.campus_identity_service.api.schemas import RegisterRequest
from services.campus_identity_service.domain_handlers.registration_handler import (
    RegistrationHandler,
)

bp = Blueprint("registration", __name__, url_prefix="/v1/auth")
logger = create_service_logger("campus_identity_service.api.registration_routes")


@bp.post("/register")
@inject
async def register(
    registration_handler: FromDishka[RegistrationHandler],
) -> tuple[Response, int]:
    """Register a student or instructor from an institutional email."""
    correlation_id: UUID | None = None
    try:
        correlation_id = start_request("register_account")
        payload = await parse_json_body(RegisterRequest, "register_account", correlation_id)

        registration_result = await registration_handler.register_account(
            register_request=payload,
            correlation_id=correlation_id,
        )
        return jsonify(registration_result.to_dict()), 201

    except UapmpError as e:
        return error_response(e, "Registration error")

    except Exception as e:
        return unexpected_error_response(e, "registration", "register_account", correlation_id)
