"""Runtime configuration for the authentication core."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from core.auth.constants import (
    DEFAULT_ERROR_REDIRECT,
    DEFAULT_LOGIN_PATH,
    DEFAULT_PASSWORD_MIN_LENGTH,
    DEFAULT_REDIRECT,
    DEFAULT_VERIFICATION_TOKEN_KIND,
)
from core.env import env_bool, env_float, env_int, env_str, load_dotenv_if_available


@dataclass(frozen=True)
class AuthSettings:
    """Values the validators and flows receive explicitly instead of reading globals."""

    password_min_length: int = DEFAULT_PASSWORD_MIN_LENGTH
    default_redirect: str = DEFAULT_REDIRECT
    error_redirect: str = DEFAULT_ERROR_REDIRECT
    login_path: str = DEFAULT_LOGIN_PATH
    verification_token_kind: str = DEFAULT_VERIFICATION_TOKEN_KIND
    app_url: str = ""
    reset_redirect_path: str = "/auth/reset-password"
    verify_redirect_path: str = "/api/v1/auth/verify"
    provider_url: Optional[str] = None
    provider_api_key: Optional[str] = None
    provider_timeout_seconds: float = 10.0
    access_cookie_name: str = "yf-access-token"
    refresh_cookie_name: str = "yf-refresh-token"
    code_verifier_cookie_name: str = "yf-code-verifier"
    cookie_secure: bool = True

    def absolute_url(self, path: str) -> str:
        """Join ``path`` onto the configured app URL. Request headers never choose the host."""
        base = (self.app_url or "").rstrip("/")
        return f"{base}{path}"


def load_auth_settings() -> AuthSettings:
    """Build settings from the environment (and an optional .env file)."""

    load_dotenv_if_available()
    return AuthSettings(
        password_min_length=env_int("AUTH_PASSWORD_MIN_LENGTH", DEFAULT_PASSWORD_MIN_LENGTH, minimum=8),
        default_redirect=env_str("AUTH_DEFAULT_REDIRECT", DEFAULT_REDIRECT) or DEFAULT_REDIRECT,
        error_redirect=env_str("AUTH_ERROR_REDIRECT", DEFAULT_ERROR_REDIRECT) or DEFAULT_ERROR_REDIRECT,
        login_path=env_str("AUTH_LOGIN_PATH", DEFAULT_LOGIN_PATH) or DEFAULT_LOGIN_PATH,
        verification_token_kind=env_str("AUTH_VERIFICATION_TOKEN_KIND", DEFAULT_VERIFICATION_TOKEN_KIND)
        or DEFAULT_VERIFICATION_TOKEN_KIND,
        app_url=env_str("APP_URL", "") or "",
        reset_redirect_path=env_str("AUTH_RESET_REDIRECT_PATH", "/auth/reset-password") or "/auth/reset-password",
        verify_redirect_path=env_str("AUTH_VERIFY_REDIRECT_PATH", "/api/v1/auth/verify") or "/api/v1/auth/verify",
        provider_url=env_str("IDENTITY_PROVIDER_URL"),
        provider_api_key=env_str("IDENTITY_PROVIDER_API_KEY"),
        provider_timeout_seconds=env_float("IDENTITY_PROVIDER_TIMEOUT_SECONDS", 10.0, minimum=1.0),
        access_cookie_name=env_str("AUTH_ACCESS_COOKIE", "yf-access-token") or "yf-access-token",
        refresh_cookie_name=env_str("AUTH_REFRESH_COOKIE", "yf-refresh-token") or "yf-refresh-token",
        code_verifier_cookie_name=env_str("AUTH_CODE_VERIFIER_COOKIE", "yf-code-verifier") or "yf-code-verifier",
        cookie_secure=env_bool("AUTH_COOKIE_SECURE", True),
    )


@lru_cache(maxsize=1)
def get_auth_settings() -> AuthSettings:
    """Process-wide settings, loaded on first use."""
    return load_auth_settings()


__all__ = ["AuthSettings", "get_auth_settings", "load_auth_settings"]
