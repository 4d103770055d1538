"""Request utility functions for Campus Identity Service API routes."""

from __future__ import annotations

import uuid
from typing import TypeVar
from uuid import UUID

from pydantic import BaseModel, ValidationError
from quart import request
from uapmp_service_libs.error_handling import raise_validation_error
from uapmp_service_libs.logging_utils import bind_request_context, create_service_logger

logger = create_service_logger("campus_identity_service.api.request_utils")

ModelT = TypeVar("ModelT", bound=BaseModel)


def extract_correlation_id() -> UUID:
    """Extract correlation ID from request headers or generate new one.

    Returns:
        UUID: Correlation ID from X-Correlation-ID header or generated UUID
    """
    correlation_header = request.headers.get("X-Correlation-ID")
    if correlation_header:
        try:
            return UUID(correlation_header)
        except ValueError:
            logger.warning(
                f"Invalid correlation ID format in header: {correlation_header}, generating new one"
            )
            return uuid.uuid4()
    return uuid.uuid4()


def start_request(operation: str) -> UUID:
    """Resolve the correlation ID and bind it to every log line of this request."""
    correlation_id = extract_correlation_id()
    bind_request_context(correlation_id, operation)
    return correlation_id


def extract_jwt_token() -> str | None:
    """Bearer token from the Authorization header, else the `token` query parameter."""
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return request.args.get("token") or None


async def parse_json_body(model: type[ModelT], operation: str, correlation_id: UUID) -> ModelT:
    """Validate the JSON body; a missing or non-object body counts as empty."""
    data = await request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    try:
        return model.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "body"
        raise_validation_error(
            service="campus_identity_service",
            operation=operation,
            field=field,
            message=f"Invalid value for '{field}': {first['msg']}",
            correlation_id=correlation_id,
        )
