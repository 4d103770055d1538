"""Generic error factory functions shared by all services."""

from __future__ import annotations

from typing import Any, NoReturn
from uuid import UUID

from uapmp_common.error_enums import ErrorCode, IdentityErrorCode

from .error_detail_factory import create_error_detail_with_context
from .uapmp_error import UapmpError


def raise_validation_error(
    service: str,
    operation: str,
    field: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    """Raise a generic validation error for a single field."""
    error_detail = create_error_detail_with_context(
        error_code=ErrorCode.VALIDATION_ERROR,
        message=message,
        service=service,
        operation=operation,
        correlation_id=correlation_id,
        details={"field": field, **additional_context},
    )
    raise UapmpError(error_detail)


def raise_internal_error(
    service: str,
    operation: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    """Raise INTERNAL_ERROR for unexpected collaborator failures.

    The message returned to callers is fixed; the cause only goes to details
    under 'cause' for logs.
    """
    error_detail = create_error_detail_with_context(
        error_code=IdentityErrorCode.INTERNAL_ERROR,
        message=message,
        service=service,
        operation=operation,
        correlation_id=correlation_id,
        details=additional_context,
        capture_stack=True,
    )
    raise UapmpError(error_detail)


def raise_configuration_error(
    service: str,
    operation: str,
    config_key: str,
    message: str,
    correlation_id: UUID,
) -> NoReturn:
    """Raise when a service refuses to start with the given configuration."""
    error_detail = create_error_detail_with_context(
        error_code=ErrorCode.CONFIGURATION_ERROR,
        message=message,
        service=service,
        operation=operation,
        correlation_id=correlation_id,
        details={"config_key": config_key},
    )
    raise UapmpError(error_detail)
