"""
Identity service specific enums.

Follows the str, Enum inheritance pattern used for every enum in uapmp_common.
"""

from enum import Enum


class AccountRole(str, Enum):
    """Roles derived from the shape of an institutional email address."""

    STUDENT = "student"
    INSTRUCTOR = "instructor"


class EmailResolutionFailure(str, Enum):
    """Sub-reasons carried by INVALID_EMAIL_FORMAT errors."""

    MALFORMED_EMAIL = "malformed_email"
    UNSUPPORTED_UNIVERSITY = "unsupported_university"
    UNSUPPORTED_FACULTY = "unsupported_faculty"
    MALFORMED_STUDENT_PREFIX = "malformed_student_prefix"


class LoginFailureReason(str, Enum):
    """
    Standardized reasons for login failure.

    Only used for logs and metrics; callers see INVALID_CREDENTIALS for both
    USER_NOT_FOUND and INVALID_PASSWORD.
    """

    USER_NOT_FOUND = "user_not_found"
    INVALID_PASSWORD = "invalid_password"
    EMAIL_UNVERIFIED = "email_unverified"
