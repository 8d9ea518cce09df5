"""Centralized constants for authentication flows."""

from __future__ import annotations

from typing import FrozenSet, Literal

ProofMethod = Literal["code", "token", "session"]
StrengthLabel = Literal["weak", "medium", "strong"]
VerifyErrorReason = Literal["expired_token", "invalid_token", "missing_token", "server_error"]

DEFAULT_PASSWORD_MIN_LENGTH = 12
PASSWORD_SYMBOLS = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?`~"
# Satisfied-check counts at or below these thresholds map to weak / medium.
WEAK_MAX_CHECKS = 2
MEDIUM_MAX_CHECKS = 4

DEFAULT_REDIRECT = "/dashboard"
DEFAULT_ERROR_REDIRECT = "/auth/error"
DEFAULT_LOGIN_PATH = "/login"
DEFAULT_VERIFICATION_TOKEN_KIND = "email"

# Provider error codes that mean the user-supplied secret itself was rejected.
PROVIDER_VALIDATION_CODES: FrozenSet[str] = frozenset(
    ["weak_password", "same_password", "validation_failed", "email_address_invalid"]
)
PROVIDER_SESSION_CODES: FrozenSet[str] = frozenset(
    ["session_expired", "session_not_found", "invalid_session", "no_session", "refresh_token_not_found"]
)
EMAIL_NOT_CONFIRMED_CODE = "email_not_confirmed"

SIGNUP_SUCCESS_MESSAGE = "Please check your email to verify your account"
RESET_REQUEST_SUCCESS_MESSAGE = "If an account exists, a password reset email has been sent"
PASSWORD_UPDATED_MESSAGE = "Password updated successfully"
SESSION_REFRESHED_MESSAGE = "Session refreshed successfully"

__all__ = [
    "DEFAULT_ERROR_REDIRECT",
    "DEFAULT_LOGIN_PATH",
    "DEFAULT_PASSWORD_MIN_LENGTH",
    "DEFAULT_REDIRECT",
    "DEFAULT_VERIFICATION_TOKEN_KIND",
    "EMAIL_NOT_CONFIRMED_CODE",
    "MEDIUM_MAX_CHECKS",
    "PASSWORD_SYMBOLS",
    "PASSWORD_UPDATED_MESSAGE",
    "PROVIDER_SESSION_CODES",
    "PROVIDER_VALIDATION_CODES",
    "ProofMethod",
    "RESET_REQUEST_SUCCESS_MESSAGE",
    "SESSION_REFRESHED_MESSAGE",
    "SIGNUP_SUCCESS_MESSAGE",
    "StrengthLabel",
    "VerifyErrorReason",
    "WEAK_MAX_CHECKS",
]
