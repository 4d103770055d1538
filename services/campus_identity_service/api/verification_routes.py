"""Email verification routes for Campus Identity Service.

The verification link mailed at registration points at
GET /v1/auth/verify/<account_id>. All business logic is delegated to
VerificationHandler.
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
from services.campus_identity_service.api.schemas import ResendVerificationRequest
from services.campus_identity_service.domain_handlers.verification_handler import (
    VerificationHandler,
)

bp = Blueprint("verification", __name__, url_prefix="/v1/auth")
logger = create_service_logger("campus_identity_service.api.verification_routes")


@bp.get("/verify/<account_id>")
@inject
async def verify_email(
    account_id: str,
    verification_handler: FromDishka[VerificationHandler],
) -> Response | tuple[Response, int]:
    correlation_id: UUID | None = None
    try:
        correlation_id = start_request("verify_email")
        verification_result = await verification_handler.verify_email(
            account_id=account_id,
            correlation_id=correlation_id,
        )
        return jsonify(verification_result.to_dict())

    except UapmpError as e:
        return error_response(e, "Email verification error")

    except Exception as e:
        return unexpected_error_response(e, "email verification", "verify_email", correlation_id)


@bp.post("/resend-verification")
@inject
async def resend_verification(
    verification_handler: FromDishka[VerificationHandler],
) -> tuple[Response, int]:
    """Send a fresh verification email for a pending account."""
    correlation_id: UUID | None = None
    try:
        correlation_id = start_request("resend_verification")
        payload = await parse_json_body(
            ResendVerificationRequest, "resend_verification", correlation_id
        )
        resend_result = await verification_handler.resend_verification(
            resend_request=payload,
            correlation_id=correlation_id,
        )
        return jsonify(resend_result.to_dict()), 202

    except UapmpError as e:
        return error_response(e, "Resend verification error")

    except Exception as e:
        return unexpected_error_response(
            e, "resend verification", "resend_verification", correlation_id
        )
