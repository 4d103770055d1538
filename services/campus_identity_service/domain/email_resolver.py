"""Institutional email resolution.

Role, affiliation and student id are derived from the shape of the address:

    <local>@std.<faculty>.<university-domain>   -> student
    <local>@<faculty>.<university-domain>       -> instructor

Student local parts come in two generations. Current addresses carry a
2-digit admission prefix in front of the 7-digit student id (9 digits total);
legacy addresses are the bare 7-digit id. Both must keep resolving.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from uapmp_common.identity_enums import AccountRole, EmailResolutionFailure

from .university_directory import (
    UniversityDirectory,
    UnsupportedFacultyError,
    UnsupportedUniversityError,
)

STUDENT_MARKER = "std."
STUDENT_ID_LENGTH = 7
ADMISSION_PREFIX_LENGTH = 2

_EMAIL_PATTERN = re.compile(
    r"^(?P<local>[a-z0-9._-]+)@"
    r"(?P<student>std\.)?"
    r"(?P<faculty>[a-z0-9-]+)\."
    r"(?P<domain>[a-z0-9-]+(?:\.[a-z0-9-]+)+)$",
    re.IGNORECASE,
)
_DIGITS = re.compile(r"^\d+$")


@dataclass(frozen=True)
class EmailResolution:
    role: AccountRole
    university: str
    faculty: str
    student_id: str | None


class EmailResolutionError(ValueError):
    """Typed resolution failure; `reason` tells which rule rejected the address."""

    def __init__(self, reason: EmailResolutionFailure, message: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message


def extract_student_id(local_part: str) -> str:
    """Student id from the local part of a student address.

    Raises:
        EmailResolutionError: MALFORMED_STUDENT_PREFIX for any other shape
    """
    if _DIGITS.match(local_part):
        if len(local_part) == ADMISSION_PREFIX_LENGTH + STUDENT_ID_LENGTH:
            return local_part[ADMISSION_PREFIX_LENGTH:]
        if len(local_part) == STUDENT_ID_LENGTH:
            return local_part
    raise EmailResolutionError(
        EmailResolutionFailure.MALFORMED_STUDENT_PREFIX,
        "Student email must start with a 9-digit (or legacy 7-digit) student number",
    )


class InstitutionalEmailResolver:
    """Resolves institutional emails against a shared UniversityDirectory."""

    def __init__(self, directory: UniversityDirectory) -> None:
        self._directory = directory

    def resolve(self, email: str) -> EmailResolution:
        match = _EMAIL_PATTERN.match(email.strip())
        if match is None:
            raise EmailResolutionError(
                EmailResolutionFailure.MALFORMED_EMAIL,
                "Email must be [student-number]@std.<faculty>.<university> (student) "
                "or [name]@<faculty>.<university> (instructor)",
            )

        try:
            affiliation = self._directory.lookup_faculty(
                match.group("domain").lower(), match.group("faculty").lower()
            )
        except UnsupportedUniversityError as exc:
            raise EmailResolutionError(
                EmailResolutionFailure.UNSUPPORTED_UNIVERSITY, str(exc)
            ) from exc
        except UnsupportedFacultyError as exc:
            raise EmailResolutionError(
                EmailResolutionFailure.UNSUPPORTED_FACULTY, str(exc)
            ) from exc

        if match.group("student"):
            return EmailResolution(
                role=AccountRole.STUDENT,
                university=affiliation.university_name,
                faculty=affiliation.faculty_name,
                student_id=extract_student_id(match.group("local")),
            )

        return EmailResolution(
            role=AccountRole.INSTRUCTOR,
            university=affiliation.university_name,
            faculty=affiliation.faculty_name,
            student_id=None,
        )
