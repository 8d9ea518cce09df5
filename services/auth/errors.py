"""Closed error taxonomy for authentication flows.

Provider failures arrive as free text plus an optional code. ``classify``
folds them into one of five kinds, picks a short user-facing sentence, and
writes a single operator log line. The log line carries the operation name
and a masked email; secrets, codes and tokens are scrubbed from it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Literal, Optional

from core.auth.constants import (
    EMAIL_NOT_CONFIRMED_CODE,
    PROVIDER_SESSION_CODES,
    PROVIDER_VALIDATION_CODES,
    ProofMethod,
)
from services.auth.provider import IdentityProviderError, IdentityProviderUnavailable

logger = logging.getLogger(__name__)

FailureStage = Literal["proof", "verify", "update", "login", "request", "refresh"]


class AuthErrorKind(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_PROOF = "INVALID_PROOF"
    EXPIRED_PROOF = "EXPIRED_PROOF"
    AUTH_REQUIRED = "AUTH_REQUIRED"
    SERVER_ERROR = "SERVER_ERROR"

    def __str__(self) -> str:  # pragma: no cover - convenience
        return self.value


HTTP_STATUS_BY_KIND: Dict[AuthErrorKind, int] = {
    AuthErrorKind.VALIDATION_ERROR: 400,
    AuthErrorKind.INVALID_PROOF: 401,
    AuthErrorKind.EXPIRED_PROOF: 401,
    AuthErrorKind.AUTH_REQUIRED: 401,
    AuthErrorKind.SERVER_ERROR: 500,
}

VALIDATION_MESSAGE = "Validation failed. Please correct the highlighted fields."
AUTH_REQUIRED_MESSAGE = "Authentication required. Please log in and try again."
SERVER_ERROR_MESSAGE = "An unexpected error occurred. Please try again."
INVALID_LINK_MESSAGE = "This link is invalid. Please request a new one."
EXPIRED_LINK_MESSAGE = "This link has expired. Please request a new one."
EXPIRED_SESSION_MESSAGE = "Your session has expired. Please log in again."
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password."
WRONG_CURRENT_PASSWORD_MESSAGE = "Current password is incorrect."
EMAIL_NOT_CONFIRMED_MESSAGE = "Please verify your email before logging in."


@dataclass(frozen=True)
class ErrorDetail:
    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}


@dataclass(frozen=True)
class ClassifiedError:
    kind: AuthErrorKind
    message: str
    detail: str = ""

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]


class AuthServiceError(Exception):
    """Raised by the flows; carries a classified, user-safe error."""

    def __init__(self, error: ClassifiedError, *, details: Optional[Iterable[ErrorDetail]] = None) -> None:
        super().__init__(error.message)
        self.error = error
        self.details: List[ErrorDetail] = list(details or [])

    @property
    def kind(self) -> AuthErrorKind:
        return self.error.kind

    @property
    def code(self) -> str:
        return self.error.kind.value

    @property
    def status_code(self) -> int:
        return self.error.status_code

    def to_response(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"code": self.code, "message": str(self)}
        if self.details:
            body["details"] = [detail.to_dict() for detail in self.details]
        return {"success": False, "error": body}


class InvalidProofMaterial(ValueError):
    """Proof material is structurally unusable (e.g. a token with the wrong kind)."""


class NoProofSupplied(Exception):
    """No code, no token and no usable session were available."""


def validation_error(details: Iterable[ErrorDetail], *, message: str = VALIDATION_MESSAGE) -> AuthServiceError:
    """Build a VALIDATION_ERROR raised before any provider call."""
    return AuthServiceError(ClassifiedError(AuthErrorKind.VALIDATION_ERROR, message, "input validation"), details=details)


def mask_email(email: Optional[str]) -> str:
    """Keep the first two characters of the local part and the domain: ``te***@example.com``."""
    local, _, domain = (email or "").partition("@")
    return f"{local[:2]}***@{domain or 'unknown'}"


def _scrub(text: str, sensitive: Iterable[Optional[str]], identifier: Optional[str]) -> str:
    for value in sensitive:
        if value:
            text = text.replace(value, "***")
    if identifier:
        text = text.replace(identifier, mask_email(identifier))
    return text


def _mentions_expiry(failure: IdentityProviderError) -> bool:
    code = (failure.code or "").lower()
    return "expired" in code or "expired" in str(failure).lower()


def _is_session_failure(failure: IdentityProviderError) -> bool:
    code = (failure.code or "").lower()
    return code in PROVIDER_SESSION_CODES or "session" in str(failure).lower()


def _kind_for(
    failure: BaseException, stage: FailureStage, method: Optional[ProofMethod]
) -> tuple[AuthErrorKind, str]:
    if isinstance(failure, AuthServiceError):
        return failure.kind, str(failure)
    if isinstance(failure, InvalidProofMaterial):
        return AuthErrorKind.VALIDATION_ERROR, VALIDATION_MESSAGE
    if isinstance(failure, NoProofSupplied):
        return AuthErrorKind.AUTH_REQUIRED, AUTH_REQUIRED_MESSAGE
    if stage == "refresh" and isinstance(failure, IdentityProviderError):
        # Every refresh rejection ends the session, an unreachable provider included.
        return AuthErrorKind.EXPIRED_PROOF, EXPIRED_SESSION_MESSAGE
    if isinstance(failure, IdentityProviderUnavailable) or not isinstance(failure, IdentityProviderError):
        return AuthErrorKind.SERVER_ERROR, SERVER_ERROR_MESSAGE

    code = (failure.code or "").lower()
    if code in PROVIDER_VALIDATION_CODES:
        return AuthErrorKind.VALIDATION_ERROR, VALIDATION_MESSAGE

    if stage == "update":
        if _mentions_expiry(failure) or _is_session_failure(failure):
            return AuthErrorKind.EXPIRED_PROOF, EXPIRED_SESSION_MESSAGE
        return AuthErrorKind.SERVER_ERROR, SERVER_ERROR_MESSAGE

    if stage == "login":
        if code == EMAIL_NOT_CONFIRMED_CODE or "not confirmed" in str(failure).lower():
            return AuthErrorKind.INVALID_PROOF, EMAIL_NOT_CONFIRMED_MESSAGE
        return AuthErrorKind.INVALID_PROOF, INVALID_CREDENTIALS_MESSAGE

    if stage == "verify":
        return AuthErrorKind.INVALID_PROOF, WRONG_CURRENT_PASSWORD_MESSAGE

    if method == "session":
        if _mentions_expiry(failure):
            return AuthErrorKind.EXPIRED_PROOF, EXPIRED_SESSION_MESSAGE
        return AuthErrorKind.AUTH_REQUIRED, AUTH_REQUIRED_MESSAGE

    if _mentions_expiry(failure):
        return AuthErrorKind.EXPIRED_PROOF, EXPIRED_LINK_MESSAGE
    return AuthErrorKind.INVALID_PROOF, INVALID_LINK_MESSAGE


def classify(
    failure: BaseException,
    *,
    operation: str,
    identifier: Optional[str] = None,
    stage: FailureStage = "proof",
    method: Optional[ProofMethod] = None,
    sensitive: Iterable[Optional[str]] = (),
) -> ClassifiedError:
    """Map a raw failure onto the closed taxonomy and log it once."""

    kind, message = _kind_for(failure, stage, method)
    code = getattr(failure, "code", None)
    raw_detail = (
        f"stage={stage} method={method or '-'} type={type(failure).__name__} "
        f"code={code or '-'} reason={failure}"
    )
    detail = _scrub(raw_detail, sensitive, identifier)
    level = logging.ERROR if kind is AuthErrorKind.SERVER_ERROR else logging.WARNING
    logger.log(level, "[%s] %s for %s: %s", operation, kind.value, mask_email(identifier) if identifier else "-", detail)
    return ClassifiedError(kind=kind, message=message, detail=detail)


def raise_classified(failure: BaseException, **kwargs: Any) -> None:
    """Classify ``failure`` and raise it as an ``AuthServiceError``."""
    raise AuthServiceError(classify(failure, **kwargs)) from failure


__all__ = [
    "AUTH_REQUIRED_MESSAGE",
    "AuthErrorKind",
    "AuthServiceError",
    "ClassifiedError",
    "ErrorDetail",
    "FailureStage",
    "HTTP_STATUS_BY_KIND",
    "InvalidProofMaterial",
    "NoProofSupplied",
    "classify",
    "mask_email",
    "raise_classified",
    "validation_error",
]
