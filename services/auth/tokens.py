"""Token-based flows: password reset and email verification links."""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlencode

from core.auth.constants import RESET_REQUEST_SUCCESS_MESSAGE, VerifyErrorReason
from core.auth.settings import AuthSettings
from services.auth.common import (
    PasswordUpdateResult,
    RequestContext,
    VerifyResult,
    ensure_password_strength,
    normalize_email,
    redirect_validator,
)
from services.auth.enumeration import EnumerationSafeResponder, PublicResponse
from services.auth.errors import AuthErrorKind, classify, mask_email
from services.auth.orchestrator import ResetOrchestrator
from services.auth.provider import IdentityProvider
from services.auth.resolver import AuthMethodResolver, CredentialChangeRequest

logger = logging.getLogger(__name__)

_RESET_RESPONDER = EnumerationSafeResponder("auth.password_reset", message=RESET_REQUEST_SUCCESS_MESSAGE)


async def send_reset_email(
    provider: IdentityProvider,
    *,
    email: str,
    settings: AuthSettings,
) -> None:
    redirect_to = settings.absolute_url(settings.reset_redirect_path)
    await provider.request_credential_reset(email, redirect_to=redirect_to)


async def request_password_reset(
    provider: IdentityProvider,
    *,
    email: str,
    settings: AuthSettings,
    context: Optional[RequestContext] = None,
) -> PublicResponse:
    normalized = normalize_email(email)
    logger.info(
        "[auth.password_reset] reset requested for %s from %s",
        mask_email(normalized),
        (context.ip if context else None) or "unknown",
    )
    return await _RESET_RESPONDER.respond(
        lambda: send_reset_email(provider, email=normalized, settings=settings),
        identifier=normalized,
    )


async def complete_password_reset(
    provider: IdentityProvider,
    *,
    password: str,
    settings: AuthSettings,
    code: Optional[str] = None,
    token_hash: Optional[str] = None,
    token_type: Optional[str] = None,
) -> PasswordUpdateResult:
    """Prove identity with the reset code, token or current session, then set the new password."""

    ensure_password_strength(settings, password)
    resolver = AuthMethodResolver(provider, token_kind=settings.verification_token_kind)
    orchestrator = ResetOrchestrator(provider, resolver, operation="auth.password_reset_complete")
    result = await orchestrator.run(
        CredentialChangeRequest(new_secret=password, exchange_code=code, token=token_hash, token_kind=token_type)
    )
    return PasswordUpdateResult(redirect_to=settings.login_path, session_invalidated=result.session_invalidated)


_REASON_BY_KIND = {
    AuthErrorKind.EXPIRED_PROOF: "expired_token",
    AuthErrorKind.SERVER_ERROR: "server_error",
}


def _error_redirect(settings: AuthSettings, reason: VerifyErrorReason) -> str:
    return f"{settings.error_redirect}?{urlencode({'error': reason})}"


async def verify_email(
    provider: IdentityProvider,
    *,
    settings: AuthSettings,
    code: Optional[str] = None,
    token_hash: Optional[str] = None,
    token_type: Optional[str] = None,
    next_path: Optional[str] = None,
) -> VerifyResult:
    """Confirm an email link. Always answers with a redirect target, never raises for bad links."""

    if not code and not token_hash:
        logger.warning("[auth.verify] verification link without code or token")
        return VerifyResult(verified=False, redirect_to=_error_redirect(settings, "missing_token"), reason="missing_token")

    resolver = AuthMethodResolver(provider, token_kind=settings.verification_token_kind)
    # new_secret is unused here: verification stops after the proof step.
    outcome = await resolver.resolve(
        CredentialChangeRequest(new_secret="", exchange_code=code, token=token_hash, token_kind=token_type)
    )
    if not outcome.ok:
        assert outcome.failure is not None
        error = classify(
            outcome.failure,
            operation="auth.verify",
            method=outcome.method,
            sensitive=(code, token_hash),
        )
        reason: VerifyErrorReason = _REASON_BY_KIND.get(error.kind, "invalid_token")  # type: ignore[assignment]
        return VerifyResult(verified=False, redirect_to=_error_redirect(settings, reason), reason=reason)

    principal = outcome.principal
    logger.info("[auth.verify] email verified for %s via %s", mask_email(principal.email if principal else None), outcome.method)
    return VerifyResult(
        verified=True,
        redirect_to=redirect_validator(settings).validate(next_path),
        principal=principal,
    )


__all__ = [
    "complete_password_reset",
    "request_password_reset",
    "send_reset_email",
    "verify_email",
]
