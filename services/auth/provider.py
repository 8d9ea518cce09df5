"""Identity provider port consumed by the authentication core."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol


class IdentityProviderError(RuntimeError):
    """Raised when the identity provider rejects a call."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code
        self.payload = dict(payload or {})


class IdentityProviderUnavailable(IdentityProviderError):
    """Raised when the identity provider cannot be reached or answers with a 5xx."""


@dataclass(frozen=True)
class Principal:
    """A provider-issued identity. Session tokens are opaque and never logged."""

    id: str
    email: Optional[str] = None
    email_verified: bool = False
    access_token: Optional[str] = field(default=None, repr=False)
    refresh_token: Optional[str] = field(default=None, repr=False)
    expires_in: Optional[int] = None


class IdentityProvider(Protocol):
    """Capabilities the authentication core relies on.

    Every method either returns its documented value or raises
    ``IdentityProviderError`` (``IdentityProviderUnavailable`` for transport
    failures). Calls are awaited one at a time within a request.
    """

    async def exchange_code(self, code: str) -> Principal:
        ...

    async def verify_token(self, token: str, kind: str) -> Principal:
        ...

    async def current_session(self) -> Optional[Principal]:
        ...

    async def reauthenticate(self, identifier: str, secret: str) -> Principal:
        ...

    async def set_credential(self, principal: Principal, new_secret: str) -> None:
        ...

    async def invalidate_session(self, principal: Principal) -> None:
        ...

    async def request_credential_reset(self, identifier: str, *, redirect_to: Optional[str] = None) -> None:
        ...

    async def sign_up(self, identifier: str, secret: str, *, redirect_to: Optional[str] = None) -> Optional[Principal]:
        ...

    async def sign_in(self, identifier: str, secret: str) -> Principal:
        ...

    async def refresh_session(self, refresh_token: str) -> Principal:
        ...

    async def sign_out(self) -> None:
        ...


__all__ = ["IdentityProvider", "IdentityProviderError", "IdentityProviderUnavailable", "Principal"]
