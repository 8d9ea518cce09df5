"""GoTrue (Supabase Auth) REST adapter for the identity provider port."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import httpx

from core.auth.settings import AuthSettings
from services.auth.provider import IdentityProviderError, IdentityProviderUnavailable, Principal

logger = logging.getLogger(__name__)


def _principal_from_user(user: Mapping[str, Any], session: Optional[Mapping[str, Any]] = None) -> Principal:
    session = session or {}
    return Principal(
        id=str(user.get("id") or ""),
        email=user.get("email"),
        email_verified=bool(user.get("email_confirmed_at") or user.get("confirmed_at")),
        access_token=session.get("access_token"),
        refresh_token=session.get("refresh_token"),
        expires_in=session.get("expires_in"),
    )


def _principal_from_session(payload: Mapping[str, Any]) -> Principal:
    user = payload.get("user")
    if not isinstance(user, Mapping):
        raise IdentityProviderError("Identity provider returned a session without a user.", code="malformed_session")
    return _principal_from_user(user, payload)


def _error_from_response(response: httpx.Response) -> IdentityProviderError:
    try:
        payload = response.json()
    except ValueError:
        payload = {"body": response.text}
    if not isinstance(payload, dict):
        payload = {"body": payload}
    message = (
        payload.get("msg")
        or payload.get("error_description")
        or payload.get("message")
        or payload.get("error")
        or f"Identity provider request failed with status {response.status_code}."
    )
    code = payload.get("error_code") or payload.get("error")
    error_cls = IdentityProviderUnavailable if response.status_code >= 500 else IdentityProviderError
    return error_cls(str(message), code=str(code) if code else None, status_code=response.status_code, payload=payload)


@dataclass(slots=True)
class GoTrueIdentityProvider:
    """Per-request client; ``access_token`` and ``code_verifier`` come from the caller's cookies."""

    base_url: str
    api_key: str
    access_token: Optional[str] = field(default=None, repr=False)
    code_verifier: Optional[str] = field(default=None, repr=False)
    timeout: float = 10.0

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
        bearer: Optional[str] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {bearer or self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(method, url, headers=headers, json=json, params=params)
        except httpx.HTTPError as exc:
            logger.warning("Identity provider %s %s unreachable: %s", method, path, type(exc).__name__)
            raise IdentityProviderUnavailable("Identity provider is unreachable.", code="unreachable") from exc
        if response.status_code >= 400:
            error = _error_from_response(response)
            logger.debug("Identity provider %s %s answered %s (%s)", method, path, response.status_code, error.code)
            raise error
        if not response.content:
            return {}
        payload = response.json()
        return payload if isinstance(payload, dict) else {}

    async def exchange_code(self, code: str) -> Principal:
        payload = await self._request(
            "POST",
            "/token",
            params={"grant_type": "pkce"},
            json={"auth_code": code, "code_verifier": self.code_verifier or ""},
        )
        return _principal_from_session(payload)

    async def verify_token(self, token: str, kind: str) -> Principal:
        payload = await self._request("POST", "/verify", json={"type": kind, "token_hash": token})
        return _principal_from_session(payload)

    async def current_session(self) -> Optional[Principal]:
        if not self.access_token:
            return None
        user = await self._request("GET", "/user", bearer=self.access_token)
        return _principal_from_user(user, {"access_token": self.access_token})

    async def reauthenticate(self, identifier: str, secret: str) -> Principal:
        return await self.sign_in(identifier, secret)

    async def refresh_session(self, refresh_token: str) -> Principal:
        payload = await self._request(
            "POST",
            "/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )
        return _principal_from_session(payload)

    async def set_credential(self, principal: Principal, new_secret: str) -> None:
        await self._request("PUT", "/user", json={"password": new_secret}, bearer=principal.access_token)

    async def invalidate_session(self, principal: Principal) -> None:
        if not principal.access_token:
            raise IdentityProviderError("No session is attached to the principal.", code="no_session")
        await self._request("POST", "/logout", params={"scope": "local"}, bearer=principal.access_token)

    async def request_credential_reset(self, identifier: str, *, redirect_to: Optional[str] = None) -> None:
        params = {"redirect_to": redirect_to} if redirect_to else None
        await self._request("POST", "/recover", json={"email": identifier}, params=params)

    async def sign_up(self, identifier: str, secret: str, *, redirect_to: Optional[str] = None) -> Optional[Principal]:
        params = {"redirect_to": redirect_to} if redirect_to else None
        payload = await self._request("POST", "/signup", json={"email": identifier, "password": secret}, params=params)
        if payload.get("access_token"):
            return _principal_from_session(payload)
        # Email confirmation pending: the provider answers with a bare user and no session.
        return None

    async def sign_in(self, identifier: str, secret: str) -> Principal:
        payload = await self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": identifier, "password": secret},
        )
        return _principal_from_session(payload)

    async def sign_out(self) -> None:
        if not self.access_token:
            return
        await self._request("POST", "/logout", bearer=self.access_token)


def build_gotrue_provider(
    settings: AuthSettings,
    *,
    access_token: Optional[str] = None,
    code_verifier: Optional[str] = None,
) -> GoTrueIdentityProvider:
    if not settings.provider_url or not settings.provider_api_key:
        raise RuntimeError("IDENTITY_PROVIDER_URL and IDENTITY_PROVIDER_API_KEY must be configured.")
    return GoTrueIdentityProvider(
        base_url=settings.provider_url,
        api_key=settings.provider_api_key,
        access_token=access_token,
        code_verifier=code_verifier,
        timeout=settings.provider_timeout_seconds,
    )


__all__ = ["GoTrueIdentityProvider", "build_gotrue_provider"]
