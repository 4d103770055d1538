"""Factory for ErrorDetail instances with automatic context capture."""

from __future__ import annotations

import traceback
import uuid
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from uapmp_common.models.error_models import ErrorDetail


def create_error_detail_with_context(
    error_code: Enum,
    message: str,
    service: str,
    operation: str,
    correlation_id: UUID | None = None,
    details: dict[str, Any] | None = None,
    capture_stack: bool = False,
) -> ErrorDetail:
    """Create an ErrorDetail, generating a correlation ID when none is given.

    Args:
        error_code: ErrorCode or IdentityErrorCode member
        message: Human-readable message
        service: Service raising the error
        operation: Operation that failed
        correlation_id: Request correlation ID
        details: Structured context for the caller
        capture_stack: Attach the current stack (internal errors only)
    """
    stack_trace = "".join(traceback.format_stack()) if capture_stack else None

    return ErrorDetail(
        error_code=error_code,
        message=message,
        correlation_id=correlation_id or uuid.uuid4(),
        timestamp=datetime.now(UTC),
        service=service,
        operation=operation,
        details=details or {},
        stack_trace=stack_trace,
    )
