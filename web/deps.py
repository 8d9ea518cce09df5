"""Shared FastAPI dependencies."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request, status

from core.auth.settings import AuthSettings, get_auth_settings
from core.logging import get_logger
from services.auth.gotrue import build_gotrue_provider
from services.auth.provider import IdentityProvider

logger = get_logger(__name__)


def get_settings() -> AuthSettings:
    return get_auth_settings()


def _bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return None


def get_identity_provider(
    request: Request,
    settings: AuthSettings = Depends(get_settings),
) -> IdentityProvider:
    """Per-request provider client bound to the caller's session cookie (or bearer token)."""
    access_token = request.cookies.get(settings.access_cookie_name) or _bearer_token(request)
    code_verifier = request.cookies.get(settings.code_verifier_cookie_name)
    try:
        return build_gotrue_provider(settings, access_token=access_token, code_verifier=code_verifier)
    except RuntimeError as exc:
        logger.error("Identity provider is not configured: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"code": "auth.provider_unconfigured", "message": "Authentication is temporarily unavailable."},
        ) from exc
