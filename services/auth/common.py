"""Shared request context, result types and validation helpers for auth flows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.auth.constants import PASSWORD_UPDATED_MESSAGE
from core.auth.settings import AuthSettings
from services.auth.errors import ErrorDetail, validation_error
from services.auth.password_policy import CredentialStrengthResult, PasswordPolicy
from services.auth.provider import Principal
from services.auth.redirects import RedirectValidator


@dataclass(frozen=True)
class RequestContext:
    ip: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class LoginResult:
    principal: Principal
    redirect_to: str


@dataclass(frozen=True)
class SessionStatus:
    authenticated: bool
    principal: Optional[Principal] = None


@dataclass(frozen=True)
class PasswordUpdateResult:
    message: str = PASSWORD_UPDATED_MESSAGE
    redirect_to: Optional[str] = None
    session_invalidated: bool = True


@dataclass(frozen=True)
class VerifyResult:
    verified: bool
    redirect_to: str
    reason: Optional[str] = None
    principal: Optional[Principal] = None


def password_policy(settings: AuthSettings) -> PasswordPolicy:
    return PasswordPolicy(min_length=settings.password_min_length)


def redirect_validator(settings: AuthSettings) -> RedirectValidator:
    return RedirectValidator(default=settings.default_redirect)


def normalize_email(email: str) -> str:
    value = (email or "").strip().lower()
    if not value:
        raise validation_error([ErrorDetail("email", "Email is required")])
    return value


def ensure_password_strength(
    settings: AuthSettings, password: str, *, field: str = "password"
) -> CredentialStrengthResult:
    """Reject weak passwords with one detail per unmet rule, before any provider call."""

    result = password_policy(settings).evaluate(password)
    if not result.is_valid:
        raise validation_error([ErrorDetail(field, message) for message in result.errors])
    return result


__all__ = [
    "LoginResult",
    "PasswordUpdateResult",
    "RequestContext",
    "SessionStatus",
    "VerifyResult",
    "ensure_password_strength",
    "normalize_email",
    "password_policy",
    "redirect_validator",
]
