"""Email/password authentication flows."""

from __future__ import annotations

import logging
from typing import Optional

from core.auth.constants import SIGNUP_SUCCESS_MESSAGE
from core.auth.settings import AuthSettings
from services.auth.common import (
    LoginResult,
    PasswordUpdateResult,
    RequestContext,
    SessionStatus,
    ensure_password_strength,
    normalize_email,
    redirect_validator,
)
from services.auth.enumeration import EnumerationSafeResponder, PublicResponse
from services.auth.errors import ErrorDetail, mask_email, raise_classified, validation_error
from services.auth.orchestrator import ResetOrchestrator
from services.auth.provider import IdentityProvider, IdentityProviderError, Principal
from services.auth.resolver import AuthMethodResolver, CredentialChangeRequest

logger = logging.getLogger(__name__)

_SIGNUP_RESPONDER = EnumerationSafeResponder("auth.signup", message=SIGNUP_SUCCESS_MESSAGE, status_code=201)


async def create_account(
    provider: IdentityProvider,
    *,
    email: str,
    password: str,
    settings: AuthSettings,
) -> Optional[Principal]:
    """Raw signup attempt; its outcome is only ever exposed through ``register_account``."""
    redirect_to = settings.absolute_url(settings.verify_redirect_path)
    return await provider.sign_up(email, password, redirect_to=redirect_to)


async def register_account(
    provider: IdentityProvider,
    *,
    email: str,
    password: str,
    settings: AuthSettings,
    context: Optional[RequestContext] = None,
) -> PublicResponse:
    normalized = normalize_email(email)
    ensure_password_strength(settings, password)
    logger.info(
        "[auth.signup] signup attempt for %s from %s",
        mask_email(normalized),
        (context.ip if context else None) or "unknown",
    )
    return await _SIGNUP_RESPONDER.respond(
        lambda: create_account(provider, email=normalized, password=password, settings=settings),
        identifier=normalized,
        sensitive=(password,),
    )


async def login(
    provider: IdentityProvider,
    *,
    email: str,
    password: str,
    settings: AuthSettings,
    redirect_to: Optional[str] = None,
) -> LoginResult:
    normalized = normalize_email(email)
    if not password:
        raise validation_error([ErrorDetail("password", "Password is required")])
    logger.info("[auth.login] login attempt for %s", mask_email(normalized))
    try:
        principal = await provider.sign_in(normalized, password)
    except IdentityProviderError as exc:
        raise_classified(exc, operation="auth.login", identifier=normalized, stage="login", sensitive=(password,))
    logger.info("[auth.login] login succeeded for %s", mask_email(normalized))
    return LoginResult(principal=principal, redirect_to=redirect_validator(settings).validate(redirect_to))


async def logout(provider: IdentityProvider) -> None:
    """End the current session. Idempotent: provider failures are logged, never raised."""
    try:
        await provider.sign_out()
    except IdentityProviderError as exc:
        logger.warning("[auth.logout] provider sign-out failed: %s (%s)", type(exc).__name__, exc.code or "-")


async def get_session(provider: IdentityProvider) -> SessionStatus:
    try:
        principal = await provider.current_session()
    except IdentityProviderError as exc:
        logger.debug("[auth.session] session lookup rejected: %s", exc.code or type(exc).__name__)
        return SessionStatus(authenticated=False)
    if principal is None:
        return SessionStatus(authenticated=False)
    return SessionStatus(authenticated=True, principal=principal)


async def refresh_session(provider: IdentityProvider, *, refresh_token: Optional[str]) -> Principal:
    """Trade the refresh token for a new session; every failure is an expired session."""

    if not refresh_token:
        raise_classified(
            IdentityProviderError("No refresh token was presented.", code="refresh_token_not_found"),
            operation="auth.refresh",
            stage="refresh",
            method="session",
        )
    try:
        principal = await provider.refresh_session(refresh_token)
    except IdentityProviderError as exc:
        raise_classified(exc, operation="auth.refresh", stage="refresh", method="session", sensitive=(refresh_token,))
    if not principal.access_token:
        raise_classified(
            IdentityProviderError("No session returned after refresh.", code="session_not_found"),
            operation="auth.refresh",
            identifier=principal.email,
            stage="refresh",
            method="session",
        )
    logger.info("[auth.refresh] session refreshed for %s", mask_email(principal.email))
    return principal


async def change_password(
    provider: IdentityProvider,
    *,
    current_password: str,
    password: str,
    settings: AuthSettings,
) -> PasswordUpdateResult:
    """Authenticated change: strength check, session, current password, update, invalidate."""

    if not current_password:
        raise validation_error([ErrorDetail("currentPassword", "Current password is required")])
    ensure_password_strength(settings, password)

    resolver = AuthMethodResolver(provider, token_kind=settings.verification_token_kind)
    orchestrator = ResetOrchestrator(provider, resolver, operation="auth.password_change")
    result = await orchestrator.run(CredentialChangeRequest(new_secret=password, current_secret=current_password))
    return PasswordUpdateResult(redirect_to=settings.login_path, session_invalidated=result.session_invalidated)


__all__ = [
    "change_password",
    "create_account",
    "get_session",
    "login",
    "logout",
    "refresh_session",
    "register_account",
]
