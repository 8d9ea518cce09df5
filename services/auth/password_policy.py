"""Password composition rules and strength scoring."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Tuple

from core.auth.constants import (
    DEFAULT_PASSWORD_MIN_LENGTH,
    MEDIUM_MAX_CHECKS,
    PASSWORD_SYMBOLS,
    WEAK_MAX_CHECKS,
    StrengthLabel,
)

_LOWER_REGEX = re.compile(r"[a-z]")
_UPPER_REGEX = re.compile(r"[A-Z]")
_DIGIT_REGEX = re.compile(r"\d")


@dataclass(frozen=True)
class PasswordChecks:
    min_length: bool
    has_lowercase: bool
    has_uppercase: bool
    has_digit: bool
    has_symbol: bool

    def as_tuple(self) -> Tuple[bool, bool, bool, bool, bool]:
        return (self.min_length, self.has_lowercase, self.has_uppercase, self.has_digit, self.has_symbol)

    @property
    def passed(self) -> int:
        return sum(1 for check in self.as_tuple() if check)


@dataclass(frozen=True)
class CredentialStrengthResult:
    checks: PasswordChecks
    errors: Tuple[str, ...]
    strength: StrengthLabel

    @property
    def is_valid(self) -> bool:
        return all(self.checks.as_tuple())


def strength_for(passed_checks: int) -> StrengthLabel:
    """Map the number of satisfied rules to a label, independent of which rules passed."""
    if passed_checks <= WEAK_MAX_CHECKS:
        return "weak"
    if passed_checks <= MEDIUM_MAX_CHECKS:
        return "medium"
    return "strong"


class PasswordPolicy:
    """Evaluate candidate passwords against the configured composition rules."""

    def __init__(self, min_length: int = DEFAULT_PASSWORD_MIN_LENGTH, symbols: str = PASSWORD_SYMBOLS) -> None:
        if min_length < 1:
            raise ValueError("min_length must be positive")
        self.min_length = min_length
        self.symbols = frozenset(symbols)

    def evaluate(self, candidate: str) -> CredentialStrengthResult:
        value = candidate or ""
        checks = PasswordChecks(
            min_length=len(value) >= self.min_length,
            has_lowercase=bool(_LOWER_REGEX.search(value)),
            has_uppercase=bool(_UPPER_REGEX.search(value)),
            has_digit=bool(_DIGIT_REGEX.search(value)),
            has_symbol=any(char in self.symbols for char in value),
        )

        errors: List[str] = []
        if not checks.min_length:
            errors.append(f"Password must be at least {self.min_length} characters")
        if not checks.has_lowercase:
            errors.append("Password must contain at least one lowercase letter")
        if not checks.has_uppercase:
            errors.append("Password must contain at least one uppercase letter")
        if not checks.has_digit:
            errors.append("Password must contain at least one number")
        if not checks.has_symbol:
            errors.append("Password must contain at least one special character")

        return CredentialStrengthResult(checks=checks, errors=tuple(errors), strength=strength_for(checks.passed))

    def requirements(self) -> List[str]:
        """Requirement strings for display next to a password field."""
        return [
            f"At least {self.min_length} characters",
            "At least one lowercase letter",
            "At least one uppercase letter",
            "At least one number",
            "At least one special character (!@#$%^&*...)",
        ]


__all__ = ["CredentialStrengthResult", "PasswordChecks", "PasswordPolicy", "strength_for"]
