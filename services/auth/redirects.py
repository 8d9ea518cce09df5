"""Open-redirect protection for client supplied "return to" paths."""

from __future__ import annotations

import re
from typing import Any, Optional
from urllib.parse import unquote

from core.auth.constants import DEFAULT_REDIRECT

_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
# Browsers read a backslash as a slash and drop tab, CR and LF from URLs.
_FORBIDDEN_CHARS = frozenset("\x00\\\t\r\n")


def _decode_once(value: str) -> str:
    if _MALFORMED_ESCAPE.search(value):
        raise ValueError("malformed percent-encoding")
    return unquote(value, errors="strict")


def _is_safe_path(value: str) -> bool:
    if not value.startswith("/") or value.startswith("//"):
        return False
    if any(char in _FORBIDDEN_CHARS for char in value):
        return False
    # A colon ahead of the first path separator reads as a scheme (javascript:, data:).
    path = value[1:]
    colon = path.find(":")
    slash = path.find("/")
    if colon != -1 and (slash == -1 or colon < slash):
        return False
    return True


def is_valid_redirect(candidate: Any) -> bool:
    """Return True when ``candidate`` is a same-origin path safe to redirect to."""

    if not candidate or not isinstance(candidate, str):
        return False
    trimmed = candidate.strip()
    if not _is_safe_path(trimmed):
        return False

    try:
        decoded = _decode_once(trimmed)
    except ValueError:
        return False
    if decoded == trimmed:
        return True

    try:
        if _decode_once(decoded) != decoded:
            return False
    except ValueError:
        # Undecodable leftovers are not a second encoding layer.
        pass
    return _is_safe_path(decoded)


class RedirectValidator:
    """Resolve untrusted redirect targets to a safe destination."""

    def __init__(self, default: str = DEFAULT_REDIRECT) -> None:
        if not _is_safe_path(default):
            raise ValueError(f"Default redirect must be a same-origin path, got {default!r}")
        self.default = default

    def validate(self, candidate: Optional[str]) -> str:
        """Return the trimmed candidate when it is safe, otherwise the default. Never raises."""
        if is_valid_redirect(candidate):
            return candidate.strip()  # type: ignore[union-attr]
        return self.default


__all__ = ["RedirectValidator", "is_valid_redirect"]
