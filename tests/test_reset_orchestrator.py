from __future__ import annotations

import logging

import pytest

from services.auth.errors import AuthErrorKind, AuthServiceError
from services.auth.orchestrator import OrchestratorState, ResetOrchestrator
from services.auth.provider import IdentityProviderError, IdentityProviderUnavailable, Principal
from services.auth.resolver import AuthMethodResolver, CredentialChangeRequest

NEW_SECRET = "N3w!Password99"


def _orchestrator(provider, operation: str = "auth.test") -> ResetOrchestrator:
    return ResetOrchestrator(provider, AuthMethodResolver(provider), operation=operation)


@pytest.mark.asyncio
async def test_reset_with_code_runs_every_step_in_order(fake_provider) -> None:
    result = await _orchestrator(fake_provider).run(CredentialChangeRequest(new_secret=NEW_SECRET, exchange_code="c1"))

    assert fake_provider.method_names == ["exchange_code", "set_credential", "invalidate_session"]
    assert fake_provider.called("set_credential")[0][1] == NEW_SECRET
    assert result.method == "code"
    assert result.session_invalidated is True
    assert result.states == [
        OrchestratorState.IDLE,
        OrchestratorState.RESOLVING,
        OrchestratorState.RESOLVED,
        OrchestratorState.UPDATING,
        OrchestratorState.UPDATED,
        OrchestratorState.INVALIDATING,
        OrchestratorState.DONE,
    ]


@pytest.mark.asyncio
async def test_direct_change_reauthenticates_before_update(fake_provider) -> None:
    fake_provider.session = Principal(id="user-1", email="user@example.com", access_token="a")
    result = await _orchestrator(fake_provider).run(
        CredentialChangeRequest(new_secret=NEW_SECRET, current_secret="Old!Password1")
    )

    assert fake_provider.method_names == [
        "current_session",
        "reauthenticate",
        "set_credential",
        "invalidate_session",
        "invalidate_session",
    ]
    assert fake_provider.called("reauthenticate") == [("user@example.com", "Old!Password1")]
    assert OrchestratorState.VERIFYING in result.states


@pytest.mark.asyncio
async def test_direct_change_revokes_reauthentication_session(fake_provider) -> None:
    session = Principal(id="user-1", email="user@example.com", access_token="a")
    fake_provider.session = session
    await _orchestrator(fake_provider).run(CredentialChangeRequest(new_secret=NEW_SECRET, current_secret="Old!Password1"))

    revoked = [args[0].access_token for args in fake_provider.called("invalidate_session")]
    assert revoked == ["a", "provider-access"]


@pytest.mark.asyncio
async def test_reauthentication_sharing_proof_session_revokes_once(fake_provider) -> None:
    fake_provider.session = Principal(id="user-1", email="user@example.com", access_token="a")
    fake_provider.principal = Principal(id="user-1", email="user@example.com", access_token="a")
    result = await _orchestrator(fake_provider).run(
        CredentialChangeRequest(new_secret=NEW_SECRET, current_secret="Old!Password1")
    )

    assert fake_provider.method_names.count("invalidate_session") == 1
    assert result.session_invalidated is True


@pytest.mark.asyncio
async def test_direct_change_without_email_is_server_error(fake_provider) -> None:
    fake_provider.session = Principal(id="user-1", email=None, access_token="a")
    orchestrator = _orchestrator(fake_provider)

    with pytest.raises(AuthServiceError) as exc:
        await orchestrator.run(CredentialChangeRequest(new_secret=NEW_SECRET, current_secret="Old!Password1"))

    assert exc.value.kind is AuthErrorKind.SERVER_ERROR
    assert exc.value.status_code == 500
    assert fake_provider.method_names == ["current_session"]
    assert orchestrator.states[-2:] == [OrchestratorState.VERIFYING, OrchestratorState.REJECTED]


@pytest.mark.asyncio
async def test_wrong_current_password_stops_before_update(fake_provider) -> None:
    fake_provider.session = Principal(id="user-1", email="user@example.com", access_token="a")
    fake_provider.failures["reauthenticate"] = IdentityProviderError("Invalid login credentials", code="invalid_credentials")
    orchestrator = _orchestrator(fake_provider)

    with pytest.raises(AuthServiceError) as exc:
        await orchestrator.run(CredentialChangeRequest(new_secret=NEW_SECRET, current_secret="wrong"))

    assert exc.value.kind is AuthErrorKind.INVALID_PROOF
    assert str(exc.value) == "Current password is incorrect."
    assert "set_credential" not in fake_provider.method_names
    assert orchestrator.state is OrchestratorState.REJECTED


@pytest.mark.asyncio
async def test_failed_proof_is_rejected_without_update(fake_provider) -> None:
    fake_provider.failures["verify_token"] = IdentityProviderError("Email link is invalid or has expired", code="otp_expired")

    with pytest.raises(AuthServiceError) as exc:
        await _orchestrator(fake_provider).run(
            CredentialChangeRequest(new_secret=NEW_SECRET, token="tok", token_kind="email")
        )

    assert exc.value.kind is AuthErrorKind.EXPIRED_PROOF
    assert fake_provider.method_names == ["verify_token"]


@pytest.mark.asyncio
async def test_no_proof_requires_authentication(fake_provider) -> None:
    with pytest.raises(AuthServiceError) as exc:
        await _orchestrator(fake_provider).run(CredentialChangeRequest(new_secret=NEW_SECRET))
    assert exc.value.kind is AuthErrorKind.AUTH_REQUIRED
    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_update_failure_is_classified(fake_provider) -> None:
    fake_provider.failures["set_credential"] = IdentityProviderUnavailable("Identity provider is unreachable.")
    with pytest.raises(AuthServiceError) as exc:
        await _orchestrator(fake_provider).run(CredentialChangeRequest(new_secret=NEW_SECRET, exchange_code="c1"))
    assert exc.value.kind is AuthErrorKind.SERVER_ERROR
    assert "invalidate_session" not in fake_provider.method_names


@pytest.mark.asyncio
async def test_invalidation_failure_still_succeeds(fake_provider, caplog: pytest.LogCaptureFixture) -> None:
    fake_provider.failures["invalidate_session"] = IdentityProviderError("Session not found", code="session_not_found")

    with caplog.at_level(logging.WARNING, logger="services.auth.orchestrator"):
        result = await _orchestrator(fake_provider).run(
            CredentialChangeRequest(new_secret=NEW_SECRET, exchange_code="c1")
        )

    assert result.session_invalidated is False
    assert result.invalidation_error == "IdentityProviderError: session_not_found"
    assert result.states[-1] is OrchestratorState.DONE
    assert any("session invalidation failed" in record.getMessage() for record in caplog.records)


@pytest.mark.asyncio
async def test_orchestrator_is_single_use(fake_provider) -> None:
    orchestrator = _orchestrator(fake_provider)
    await orchestrator.run(CredentialChangeRequest(new_secret=NEW_SECRET, exchange_code="c1"))
    with pytest.raises(RuntimeError):
        await orchestrator.run(CredentialChangeRequest(new_secret=NEW_SECRET, exchange_code="c2"))
