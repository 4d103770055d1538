"""Translation of UapmpError into JSON HTTP responses."""

from __future__ import annotations

from uuid import UUID

from quart import Response, jsonify
from uapmp_common.error_enums import ErrorCode, IdentityErrorCode
from uapmp_service_libs.error_handling import UapmpError, create_error_detail_with_context
from uapmp_service_libs.logging_utils import create_service_logger

logger = create_service_logger("campus_identity_service.api.error_responses")

STATUS_BY_ERROR_CODE: dict[str, int] = {
    IdentityErrorCode.MISSING_FIELDS.value: 400,
    IdentityErrorCode.PASSWORD_MISMATCH.value: 400,
    IdentityErrorCode.WEAK_PASSWORD.value: 400,
    IdentityErrorCode.INVALID_EMAIL_FORMAT.value: 400,
    IdentityErrorCode.DUPLICATE_ENTRY.value: 409,
    IdentityErrorCode.NOT_FOUND.value: 404,
    IdentityErrorCode.ALREADY_VERIFIED.value: 409,
    IdentityErrorCode.LINK_EXPIRED_ACCOUNT_REMOVED.value: 410,
    IdentityErrorCode.INVALID_CREDENTIALS.value: 401,
    IdentityErrorCode.EMAIL_NOT_VERIFIED.value: 403,
    IdentityErrorCode.UNAUTHORIZED.value: 401,
    IdentityErrorCode.FORBIDDEN.value: 403,
    IdentityErrorCode.INTERNAL_ERROR.value: 500,
    ErrorCode.VALIDATION_ERROR.value: 400,
}


def status_for(error: UapmpError) -> int:
    return STATUS_BY_ERROR_CODE.get(error.error_code, 500)


def error_response(error: UapmpError, context: str) -> tuple[Response, int]:
    status_code = status_for(error)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        f"{context}: {error.error_detail.message}",
        extra={
            "correlation_id": str(error.correlation_id),
            "error_code": error.error_code,
            "operation": error.operation,
        },
    )
    # Stack traces stay in logs
    body = error.error_detail.model_dump(mode="json", exclude={"stack_trace"})
    return jsonify({"error": body}), status_code


def unexpected_error_response(
    exc: Exception, context: str, operation: str, correlation_id: UUID | None
) -> tuple[Response, int]:
    logger.error(
        f"Unexpected error during {context}: {exc}",
        exc_info=True,
        extra={"correlation_id": str(correlation_id) if correlation_id else "unknown"},
    )
    detail = create_error_detail_with_context(
        error_code=IdentityErrorCode.INTERNAL_ERROR,
        message="Internal server error",
        service="campus_identity_service",
        operation=operation,
        correlation_id=correlation_id,
    )
    return jsonify({"error": detail.model_dump(mode="json")}), 500
