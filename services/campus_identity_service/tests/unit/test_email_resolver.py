"""Unit tests for institutional email resolution."""

from __future__ import annotations

import pytest
from uapmp_common.identity_enums import AccountRole, EmailResolutionFailure

from services.campus_identity_service.domain.email_resolver import (
    EmailResolutionError,
    InstitutionalEmailResolver,
    extract_student_id,
)


class TestStudentEmails:
    def test_nine_digit_local_part_drops_admission_prefix(
        self, email_resolver: InstitutionalEmailResolver
    ) -> None:
        resolution = email_resolver.resolve("123456789@std.sci.cu.edu.eg")

        assert resolution.role is AccountRole.STUDENT
        assert resolution.student_id == "3456789"
        assert resolution.university == "Cairo University"
        assert resolution.faculty == "Faculty of Science"

    def test_legacy_seven_digit_local_part_is_kept(
        self, email_resolver: InstitutionalEmailResolver
    ) -> None:
        resolution = email_resolver.resolve("1234567@std.eng.cu.edu.eg")

        assert resolution.student_id == "1234567"
        assert resolution.faculty == "Faculty of Engineering"

    @pytest.mark.parametrize("local_part", ["12345678", "12345", "1234567890", "ab3456789", "mona"])
    def test_other_local_parts_are_rejected(
        self, email_resolver: InstitutionalEmailResolver, local_part: str
    ) -> None:
        with pytest.raises(EmailResolutionError) as exc_info:
            email_resolver.resolve(f"{local_part}@std.sci.cu.edu.eg")

        assert exc_info.value.reason is EmailResolutionFailure.MALFORMED_STUDENT_PREFIX

    def test_extract_student_id(self) -> None:
        assert extract_student_id("209876543") == "9876543"
        assert extract_student_id("9876543") == "9876543"


class TestInstructorEmails:
    def test_no_student_marker_means_instructor(
        self, email_resolver: InstitutionalEmailResolver
    ) -> None:
        resolution = email_resolver.resolve("ahmed.hassan@eng.cu.edu.eg")

        assert resolution.role is AccountRole.INSTRUCTOR
        assert resolution.student_id is None
        assert resolution.faculty == "Faculty of Engineering"

    def test_case_and_whitespace_are_ignored(
        self, email_resolver: InstitutionalEmailResolver
    ) -> None:
        resolution = email_resolver.resolve("  Ahmed.Hassan@ENG.CU.EDU.EG ")

        assert resolution.role is AccountRole.INSTRUCTOR
        assert resolution.university == "Cairo University"


class TestRejectedEmails:
    @pytest.mark.parametrize(
        "email",
        ["not-an-email", "someone@cu", "a b@eng.cu.edu.eg", "@eng.cu.edu.eg", "x@eng.cu.edu.eg."],
    )
    def test_malformed(self, email_resolver: InstitutionalEmailResolver, email: str) -> None:
        with pytest.raises(EmailResolutionError) as exc_info:
            email_resolver.resolve(email)

        assert exc_info.value.reason is EmailResolutionFailure.MALFORMED_EMAIL

    def test_unknown_university(self, email_resolver: InstitutionalEmailResolver) -> None:
        with pytest.raises(EmailResolutionError) as exc_info:
            email_resolver.resolve("123456789@std.sci.mit.edu")

        assert exc_info.value.reason is EmailResolutionFailure.UNSUPPORTED_UNIVERSITY

    def test_unknown_faculty(self, email_resolver: InstitutionalEmailResolver) -> None:
        with pytest.raises(EmailResolutionError) as exc_info:
            email_resolver.resolve("someone@astro.cu.edu.eg")

        assert exc_info.value.reason is EmailResolutionFailure.UNSUPPORTED_FACULTY

    def test_student_marker_on_unknown_faculty(
        self, email_resolver: InstitutionalEmailResolver
    ) -> None:
        with pytest.raises(EmailResolutionError) as exc_info:
            email_resolver.resolve("123456789@std.astro.cu.edu.eg")

        assert exc_info.value.reason is EmailResolutionFailure.UNSUPPORTED_FACULTY
