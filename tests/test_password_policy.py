from __future__ import annotations

import pytest

from services.auth.password_policy import PasswordPolicy, strength_for


def test_strong_password_passes_every_rule() -> None:
    result = PasswordPolicy().evaluate("Str0ng!Passw0rd")
    assert result.is_valid is True
    assert result.errors == ()
    assert result.strength == "strong"


def test_errors_follow_rule_order() -> None:
    result = PasswordPolicy().evaluate("abc")
    assert result.is_valid is False
    assert result.errors == (
        "Password must be at least 12 characters",
        "Password must contain at least one uppercase letter",
        "Password must contain at least one number",
        "Password must contain at least one special character",
    )


def test_empty_password_fails_everything() -> None:
    result = PasswordPolicy().evaluate("")
    assert len(result.errors) == 5
    assert result.checks.passed == 0
    assert result.strength == "weak"


def test_minimum_length_is_configurable() -> None:
    policy = PasswordPolicy(min_length=8)
    assert policy.evaluate("Ab1!efgh").is_valid is True
    assert policy.evaluate("Ab1!efg").errors == ("Password must be at least 8 characters",)


def test_symbol_set_is_fixed() -> None:
    policy = PasswordPolicy()
    # Non-ASCII punctuation is not in the accepted set.
    assert policy.evaluate("Abcdefghijk1§").checks.has_symbol is False
    assert policy.evaluate("Abcdefghijk1~").checks.has_symbol is True


def test_strength_depends_only_on_count() -> None:
    policy = PasswordPolicy()
    # Long, lower, upper: three checks.
    assert policy.evaluate("abcdefghijkL").strength == "medium"
    # Lower, upper, digit, symbol, but short: four checks.
    assert policy.evaluate("aB1!").strength == "medium"
    # Lower and digit only.
    assert policy.evaluate("a1").strength == "weak"


@pytest.mark.parametrize(
    ("passed", "label"),
    [(0, "weak"), (1, "weak"), (2, "weak"), (3, "medium"), (4, "medium"), (5, "strong")],
)
def test_strength_thresholds(passed: int, label: str) -> None:
    assert strength_for(passed) == label


def test_requirements_reflect_min_length() -> None:
    assert PasswordPolicy(min_length=16).requirements()[0] == "At least 16 characters"


def test_non_positive_minimum_is_rejected() -> None:
    with pytest.raises(ValueError):
        PasswordPolicy(min_length=0)
