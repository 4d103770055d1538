"""
UAPMP Common Core Package.
"""

from .config_enums import Environment
from .error_enums import ErrorCode, IdentityErrorCode
from .identity_enums import AccountRole, EmailResolutionFailure, LoginFailureReason

__all__ = [
    "AccountRole",
    "EmailResolutionFailure",
    "Environment",
    "ErrorCode",
    "IdentityErrorCode",
    "LoginFailureReason",
]
