"""Error handling utilities for UAPMP services."""

from .error_detail_factory import create_error_detail_with_context
from .factories import (
    raise_configuration_error,
    raise_internal_error,
    raise_validation_error,
)
from .identity_factories import (
    raise_account_not_found_error,
    raise_duplicate_entry_error,
    raise_email_already_verified_error,
    raise_email_not_verified_error,
    raise_forbidden_error,
    raise_invalid_credentials_error,
    raise_invalid_email_format_error,
    raise_missing_fields_error,
    raise_password_mismatch_error,
    raise_unauthorized_error,
    raise_verification_link_expired_error,
    raise_weak_password_error,
)
from .uapmp_error import UapmpError

__all__ = [
    "UapmpError",
    "create_error_detail_with_context",
    "raise_account_not_found_error",
    "raise_configuration_error",
    "raise_duplicate_entry_error",
    "raise_email_already_verified_error",
    "raise_email_not_verified_error",
    "raise_forbidden_error",
    "raise_internal_error",
    "raise_invalid_credentials_error",
    "raise_invalid_email_format_error",
    "raise_missing_fields_error",
    "raise_password_mismatch_error",
    "raise_unauthorized_error",
    "raise_validation_error",
    "raise_verification_link_expired_error",
    "raise_weak_password_error",
]
