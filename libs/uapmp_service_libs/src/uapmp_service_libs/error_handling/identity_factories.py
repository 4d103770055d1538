"""Identity-specific error factories.

One factory per IdentityErrorCode so handlers never build ErrorDetail
instances by hand.
"""

from __future__ import annotations

from typing import Any, NoReturn
from uuid import UUID

from uapmp_common.error_enums import IdentityErrorCode

from .error_detail_factory import create_error_detail_with_context
from .uapmp_error import UapmpError

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


def _raise(
    error_code: IdentityErrorCode,
    message: str,
    service: str,
    operation: str,
    correlation_id: UUID,
    details: dict[str, Any] | None = None,
) -> NoReturn:
    raise UapmpError(
        create_error_detail_with_context(
            error_code=error_code,
            message=message,
            service=service,
            operation=operation,
            correlation_id=correlation_id,
            details=details,
        )
    )


def raise_missing_fields_error(
    service: str, operation: str, missing_fields: list[str], correlation_id: UUID
) -> NoReturn:
    _raise(
        IdentityErrorCode.MISSING_FIELDS,
        "Invalid request: all fields are required",
        service,
        operation,
        correlation_id,
        {"missing_fields": missing_fields},
    )


def raise_password_mismatch_error(service: str, operation: str, correlation_id: UUID) -> NoReturn:
    _raise(
        IdentityErrorCode.PASSWORD_MISMATCH,
        "Password confirmation does not match",
        service,
        operation,
        correlation_id,
    )


def raise_weak_password_error(
    service: str,
    operation: str,
    requirements: dict[str, dict[str, Any]],
    correlation_id: UUID,
) -> NoReturn:
    _raise(
        IdentityErrorCode.WEAK_PASSWORD,
        "Password does not meet security requirements",
        service,
        operation,
        correlation_id,
        {"requirements": requirements},
    )


def raise_invalid_email_format_error(
    service: str, operation: str, reason: str, detail: str, correlation_id: UUID
) -> NoReturn:
    _raise(
        IdentityErrorCode.INVALID_EMAIL_FORMAT,
        "Invalid email format",
        service,
        operation,
        correlation_id,
        {"reason": reason, "detail": detail},
    )


def raise_duplicate_entry_error(
    service: str, operation: str, field: str, correlation_id: UUID
) -> NoReturn:
    _raise(
        IdentityErrorCode.DUPLICATE_ENTRY,
        f"Account with this {field} already exists",
        service,
        operation,
        correlation_id,
        {"field": field},
    )


def raise_account_not_found_error(
    service: str, operation: str, correlation_id: UUID
) -> NoReturn:
    _raise(IdentityErrorCode.NOT_FOUND, "Account not found", service, operation, correlation_id)


def raise_email_already_verified_error(
    service: str, operation: str, correlation_id: UUID
) -> NoReturn:
    _raise(
        IdentityErrorCode.ALREADY_VERIFIED,
        "Email address is already verified",
        service,
        operation,
        correlation_id,
    )


def raise_verification_link_expired_error(
    service: str, operation: str, window_hours: int, correlation_id: UUID
) -> NoReturn:
    _raise(
        IdentityErrorCode.LINK_EXPIRED_ACCOUNT_REMOVED,
        "Verification link expired; the account was removed and must be registered again",
        service,
        operation,
        correlation_id,
        {"verification_window_hours": window_hours},
    )


def raise_invalid_credentials_error(
    service: str, operation: str, correlation_id: UUID
) -> NoReturn:
    # No details: the response must be identical for unknown email and wrong password
    _raise(
        IdentityErrorCode.INVALID_CREDENTIALS,
        INVALID_CREDENTIALS_MESSAGE,
        service,
        operation,
        correlation_id,
    )


def raise_email_not_verified_error(
    service: str, operation: str, correlation_id: UUID
) -> NoReturn:
    _raise(
        IdentityErrorCode.EMAIL_NOT_VERIFIED,
        "Email address has not been verified yet",
        service,
        operation,
        correlation_id,
    )


def raise_unauthorized_error(
    service: str, operation: str, message: str, correlation_id: UUID
) -> NoReturn:
    _raise(IdentityErrorCode.UNAUTHORIZED, message, service, operation, correlation_id)


def raise_forbidden_error(
    service: str, operation: str, required_role: str, correlation_id: UUID
) -> NoReturn:
    _raise(
        IdentityErrorCode.FORBIDDEN,
        "Forbidden: insufficient role",
        service,
        operation,
        correlation_id,
        {"required_role": required_role},
    )
