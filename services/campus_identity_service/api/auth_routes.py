"""Authentication routes for Campus Identity Service.

Handles login, the current-account lookup and role checks. All business logic is
delegated to AuthenticationHandler.
"""

from __future__ import annotations

from uuid import UUID

from dishka import FromDishka
from quart import Blueprint, Response, jsonify
from quart_dishka import inject
from uapmp_common.identity_enums import AccountRole
from uapmp_service_libs.error_handling import UapmpError, raise_validation_error
from uapmp_service_libs.logging_utils import create_service_logger

from services.campus_identity_service.api.error_responses import (
    error_response,
    unexpected_error_response,
)
from services.campus_identity_service.api.request_utils import (
    extract_jwt_token,
    parse_json_body,
    start_request,
)
from services.campus_identity_service.api.schemas import LoginRequest, RoleCheckResponse
from services.campus_identity_service.domain_handlers.authentication_handler import (
    AuthenticationHandler,
)
from services.campus_identity_service.domain_handlers.store_calls import SERVICE_NAME

bp = Blueprint("auth", __name__, url_prefix="/v1/auth")
logger = create_service_logger("campus_identity_service.api.auth_routes")


@bp.post("/login")
@inject
async def login(
    auth_handler: FromDishka[AuthenticationHandler],
) -> Response | tuple[Response, int]:
    """Login with email and password; only verified accounts get a token."""
    correlation_id: UUID | None = None
    try:
        correlation_id = start_request("login")
        payload = await parse_json_body(LoginRequest, "login", correlation_id)

        login_result = await auth_handler.login(
            login_request=payload,
            correlation_id=correlation_id,
        )
        return jsonify(login_result.to_dict())

    except UapmpError as e:
        return error_response(e, "Authentication error during login")

    except Exception as e:
        return unexpected_error_response(e, "login", "login", correlation_id)


@bp.get("/me")
@inject
async def me(
    auth_handler: FromDishka[AuthenticationHandler],
) -> Response | tuple[Response, int]:
    """Current account from the bearer token (header or ?token=)."""
    correlation_id: UUID | None = None
    try:
        correlation_id = start_request("who_am_i")
        claims = auth_handler.authenticate_token(extract_jwt_token(), correlation_id)
        me_result = await auth_handler.who_am_i(claims.sub, correlation_id)
        return jsonify(me_result.to_dict())

    except UapmpError as e:
        return error_response(e, "Error resolving current account")

    except Exception as e:
        return unexpected_error_response(e, "me", "who_am_i", correlation_id)


@bp.get("/authorize/<role>")
@inject
async def authorize_role(
    role: str,
    auth_handler: FromDishka[AuthenticationHandler],
) -> Response | tuple[Response, int]:
    """200 when the bearer token belongs to `role`, 403 for any other role."""
    correlation_id: UUID | None = None
    try:
        correlation_id = start_request("require_role")
        claims = auth_handler.authenticate_token(extract_jwt_token(), correlation_id)
        try:
            required_role = AccountRole(role.lower())
        except ValueError:
            raise_validation_error(
                SERVICE_NAME,
                "require_role",
                "role",
                f"Unknown role '{role}'",
                correlation_id,
            )
        claims = auth_handler.require_role(claims, required_role, correlation_id)
        return jsonify(
            RoleCheckResponse(account_id=claims.sub, role=claims.role).model_dump(mode="json")
        )

    except UapmpError as e:
        return error_response(e, "Role check failed")

    except Exception as e:
        return unexpected_error_response(e, "authorize_role", "require_role", correlation_id)
