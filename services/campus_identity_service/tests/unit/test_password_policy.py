"""Unit tests for the password policy."""

from __future__ import annotations

import pytest

from services.campus_identity_service.domain.password_policy import (
    REQUIREMENT_MESSAGES,
    evaluate_password,
)


@pytest.mark.parametrize(
    "password, unmet",
    [
        ("abc12", ["min_length", "has_special_char"]),
        ("abcdef", ["has_digit", "has_special_char"]),
        ("123456!", ["has_letter"]),
        ("abcdef1", ["has_special_char"]),
        ("", ["min_length", "has_letter", "has_digit", "has_special_char"]),
    ],
)
def test_unmet_requirements(password: str, unmet: list[str]) -> None:
    report = evaluate_password(password)

    assert not report.meets_policy
    assert report.unmet_requirements() == unmet


def test_strong_password_passes() -> None:
    report = evaluate_password("abc123!")

    assert report.meets_policy
    assert report.unmet_requirements() == []


def test_non_ascii_letters_do_not_count() -> None:
    report = evaluate_password("١٢٣ابجد!")

    assert not report.has_letter
    assert not report.has_digit


def test_details_carry_status_and_message_for_every_requirement() -> None:
    details = evaluate_password("abcdef").to_details()

    assert set(details) == set(REQUIREMENT_MESSAGES)
    assert details["has_digit"] == {"status": False, "message": REQUIREMENT_MESSAGES["has_digit"]}
    assert details["min_length"]["status"] is True
