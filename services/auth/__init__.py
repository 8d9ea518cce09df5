"""Auth service submodule exports."""

from __future__ import annotations

from .common import (
    LoginResult,
    PasswordUpdateResult,
    RequestContext,
    SessionStatus,
    VerifyResult,
)
from .enumeration import EnumerationSafeResponder, PublicResponse
from .errors import AuthErrorKind, AuthServiceError, ClassifiedError, ErrorDetail, classify, mask_email
from .orchestrator import OrchestratorState, ResetOrchestrator, ResetResult
from .password import change_password, get_session, login, logout, refresh_session, register_account
from .password_policy import CredentialStrengthResult, PasswordPolicy
from .provider import IdentityProvider, IdentityProviderError, IdentityProviderUnavailable, Principal
from .redirects import RedirectValidator, is_valid_redirect
from .resolver import AuthMethodResolver, CredentialChangeRequest, ProofOutcome, select_proof
from .tokens import complete_password_reset, request_password_reset, verify_email

__all__ = [
    "AuthErrorKind",
    "AuthMethodResolver",
    "AuthServiceError",
    "ClassifiedError",
    "CredentialChangeRequest",
    "CredentialStrengthResult",
    "EnumerationSafeResponder",
    "ErrorDetail",
    "IdentityProvider",
    "IdentityProviderError",
    "IdentityProviderUnavailable",
    "LoginResult",
    "OrchestratorState",
    "PasswordPolicy",
    "PasswordUpdateResult",
    "Principal",
    "ProofOutcome",
    "PublicResponse",
    "RedirectValidator",
    "RequestContext",
    "ResetOrchestrator",
    "ResetResult",
    "SessionStatus",
    "VerifyResult",
    "change_password",
    "classify",
    "complete_password_reset",
    "get_session",
    "is_valid_redirect",
    "login",
    "logout",
    "mask_email",
    "refresh_session",
    "register_account",
    "request_password_reset",
    "select_proof",
    "verify_email",
]
