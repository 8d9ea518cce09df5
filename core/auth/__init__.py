"""Auth-related shared utilities."""

from .constants import (
    DEFAULT_REDIRECT,
    DEFAULT_VERIFICATION_TOKEN_KIND,
    PASSWORD_SYMBOLS,
    ProofMethod,
    StrengthLabel,
)
from .settings import AuthSettings, get_auth_settings, load_auth_settings

__all__ = [
    "AuthSettings",
    "DEFAULT_REDIRECT",
    "DEFAULT_VERIFICATION_TOKEN_KIND",
    "PASSWORD_SYMBOLS",
    "ProofMethod",
    "StrengthLabel",
    "get_auth_settings",
    "load_auth_settings",
]
