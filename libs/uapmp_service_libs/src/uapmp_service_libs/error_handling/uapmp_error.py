"""Core exception type carrying a structured ErrorDetail."""

from __future__ import annotations

from typing import Any

from uapmp_common.models.error_models import ErrorDetail


class UapmpError(Exception):
    """Exception raised by UAPMP services for every expected failure.

    The wrapped ErrorDetail is the single source of truth; the properties are
    convenience accessors for logging and HTTP mapping.
    """

    def __init__(self, error_detail: ErrorDetail) -> None:
        super().__init__(f"[{error_detail.error_code.value}] {error_detail.message}")
        self.error_detail = error_detail

    @property
    def correlation_id(self) -> str:
        return str(self.error_detail.correlation_id)

    @property
    def error_code(self) -> str:
        return self.error_detail.error_code.value

    @property
    def service(self) -> str:
        return self.error_detail.service

    @property
    def operation(self) -> str:
        return self.error_detail.operation

    def to_dict(self) -> dict[str, Any]:
        return self.error_detail.model_dump(mode="json")
