"""Password strength policy with an itemized requirement report."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

MIN_PASSWORD_LENGTH = 6
SPECIAL_CHARACTERS = frozenset('!@#$%^&*(),.?":{}|<>')

REQUIREMENT_MESSAGES: dict[str, str] = {
    "min_length": f"Minimum {MIN_PASSWORD_LENGTH} characters",
    "has_letter": "Must contain letters (a-z, A-Z)",
    "has_digit": "Must contain numbers (0-9)",
    "has_special_char": "Must contain special character (!@#$%^&*)",
}


@dataclass(frozen=True)
class PasswordPolicyReport:
    min_length: bool
    has_letter: bool
    has_digit: bool
    has_special_char: bool

    @property
    def meets_policy(self) -> bool:
        return self.min_length and self.has_letter and self.has_digit and self.has_special_char

    def unmet_requirements(self) -> list[str]:
        return [name for name, status in self.as_flags().items() if not status]

    def as_flags(self) -> dict[str, bool]:
        return {
            "min_length": self.min_length,
            "has_letter": self.has_letter,
            "has_digit": self.has_digit,
            "has_special_char": self.has_special_char,
        }

    def to_details(self) -> dict[str, dict[str, Any]]:
        """Per-requirement status plus the remediation message shown to users."""
        return {
            name: {"status": status, "message": REQUIREMENT_MESSAGES[name]}
            for name, status in self.as_flags().items()
        }


def _is_ascii_letter(char: str) -> bool:
    return char.isascii() and char.isalpha()


def evaluate_password(password: str) -> PasswordPolicyReport:
    return PasswordPolicyReport(
        min_length=len(password) >= MIN_PASSWORD_LENGTH,
        has_letter=any(_is_ascii_letter(char) for char in password),
        has_digit=any(char.isdigit() and char.isascii() for char in password),
        has_special_char=any(char in SPECIAL_CHARACTERS for char in password),
    )
