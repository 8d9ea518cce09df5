from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from core.auth.settings import AuthSettings
from services.auth.provider import IdentityProviderError, Principal


class FakeIdentityProvider:
    """In-memory identity provider that records every call it receives.

    ``failures`` maps a method name to the exception that method raises.
    """

    def __init__(
        self,
        *,
        session: Optional[Principal] = None,
        principal: Optional[Principal] = None,
        accounts: Optional[Dict[str, str]] = None,
        failures: Optional[Dict[str, BaseException]] = None,
    ) -> None:
        self.session = session
        self.principal = principal or Principal(
            id="user-1",
            email="user@example.com",
            email_verified=True,
            access_token="provider-access",
            refresh_token="provider-refresh",
            expires_in=3600,
        )
        self.accounts = dict(accounts or {})
        self.failures = dict(failures or {})
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        failure = self.failures.get(name)
        if failure is not None:
            raise failure

    def called(self, name: str) -> List[Tuple[Any, ...]]:
        return [args for method, args in self.calls if method == name]

    @property
    def method_names(self) -> List[str]:
        return [method for method, _ in self.calls]

    async def exchange_code(self, code: str) -> Principal:
        self._record("exchange_code", code)
        return self.principal

    async def verify_token(self, token: str, kind: str) -> Principal:
        self._record("verify_token", token, kind)
        return self.principal

    async def current_session(self) -> Optional[Principal]:
        self._record("current_session")
        return self.session

    async def reauthenticate(self, identifier: str, secret: str) -> Principal:
        self._record("reauthenticate", identifier, secret)
        return self.principal

    async def set_credential(self, principal: Principal, new_secret: str) -> None:
        self._record("set_credential", principal, new_secret)

    async def invalidate_session(self, principal: Principal) -> None:
        self._record("invalidate_session", principal)

    async def request_credential_reset(self, identifier: str, *, redirect_to: Optional[str] = None) -> None:
        self._record("request_credential_reset", identifier, redirect_to)

    async def sign_up(self, identifier: str, secret: str, *, redirect_to: Optional[str] = None) -> Optional[Principal]:
        self._record("sign_up", identifier, redirect_to)
        if identifier in self.accounts:
            raise IdentityProviderError("User already registered", code="user_already_exists", status_code=422)
        self.accounts[identifier] = secret
        return None

    async def sign_in(self, identifier: str, secret: str) -> Principal:
        self._record("sign_in", identifier)
        return self.principal

    async def refresh_session(self, refresh_token: str) -> Principal:
        self._record("refresh_session", refresh_token)
        return self.principal

    async def sign_out(self) -> None:
        self._record("sign_out")


@pytest.fixture()
def auth_settings() -> AuthSettings:
    return AuthSettings(
        app_url="https://app.example.com",
        provider_url="https://idp.example.com/auth/v1",
        provider_api_key="anon-key",
        cookie_secure=False,
    )


@pytest.fixture()
def fake_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture()
def auth_api_client(fake_provider: FakeIdentityProvider, auth_settings: AuthSettings):
    from web.deps import get_identity_provider, get_settings
    from web.main import create_app

    app = create_app()
    app.dependency_overrides[get_identity_provider] = lambda: fake_provider
    app.dependency_overrides[get_settings] = lambda: auth_settings
    client = TestClient(app)
    try:
        yield client
    finally:
        client.close()
