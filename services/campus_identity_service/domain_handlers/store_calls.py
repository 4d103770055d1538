"""Timeout and failure policy for collaborator calls made by the handlers.

Every call is bounded by a timeout. Mutations are shielded: once started
they run to completion even if the awaiting request is abandoned. Unexpected
failures surface as INTERNAL_ERROR, while DuplicateAccountKeyError and
UapmpError pass through for the caller to interpret.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar
from uuid import UUID

from uapmp_service_libs.error_handling import UapmpError, raise_internal_error
from uapmp_service_libs.logging_utils import create_service_logger

from services.campus_identity_service.protocols import DuplicateAccountKeyError

logger = create_service_logger("campus_identity_service.domain_handlers.store_calls")

T = TypeVar("T")

SERVICE_NAME = "campus_identity_service"


async def call_store(
    awaitable: Awaitable[T],
    *,
    timeout: float,
    operation: str,
    correlation_id: UUID,
    mutating: bool = False,
) -> T:
    """Await a store call under the configured timeout.

    Raises:
        DuplicateAccountKeyError: unique key conflict on insert
        UapmpError: INTERNAL_ERROR on timeout or any other store failure
    """
    guarded = asyncio.shield(awaitable) if mutating else awaitable
    try:
        return await asyncio.wait_for(guarded, timeout=timeout)
    except (DuplicateAccountKeyError, UapmpError):
        raise
    except TimeoutError:
        logger.error(
            "Account store call timed out",
            extra={
                "operation": operation,
                "timeout_seconds": timeout,
                "correlation_id": str(correlation_id),
            },
        )
        raise_internal_error(
            service=SERVICE_NAME,
            operation=operation,
            message="Account store did not respond in time",
            correlation_id=correlation_id,
            cause="timeout",
        )
    except Exception as e:
        logger.error(
            f"Account store call failed: {e}",
            exc_info=True,
            extra={"operation": operation, "correlation_id": str(correlation_id)},
        )
        raise_internal_error(
            service=SERVICE_NAME,
            operation=operation,
            message="Account store failure",
            correlation_id=correlation_id,
            cause=type(e).__name__,
        )
