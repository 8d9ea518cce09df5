from __future__ import annotations

import logging

import pytest

from services.auth.enumeration import EnumerationSafeResponder
from services.auth.provider import IdentityProviderError, IdentityProviderUnavailable


async def _succeeds():
    return None


def _raising(exc: BaseException):
    async def attempt():
        raise exc

    return attempt


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "attempt",
    [
        _succeeds,
        _raising(IdentityProviderError("User already registered", code="user_already_exists")),
        _raising(IdentityProviderError("User not found", code="user_not_found")),
        _raising(IdentityProviderUnavailable("Identity provider is unreachable.")),
        _raising(RuntimeError("boom")),
    ],
)
async def test_every_outcome_yields_the_same_response(attempt) -> None:
    responder = EnumerationSafeResponder("auth.password_reset", message="If an account exists, an email has been sent")
    response = await responder.respond(attempt, identifier="someone@example.com")
    assert response == responder.response()
    assert response.status_code == 200
    assert response.body == {"success": True, "message": "If an account exists, an email has been sent"}


@pytest.mark.asyncio
async def test_status_code_is_configurable() -> None:
    responder = EnumerationSafeResponder("auth.signup", message="Check your inbox", status_code=201)
    response = await responder.respond(_succeeds, identifier="new@example.com")
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_real_outcome_is_logged_for_operators(caplog: pytest.LogCaptureFixture) -> None:
    responder = EnumerationSafeResponder("auth.signup", message="Check your inbox")
    failure = IdentityProviderError("User already registered", code="user_already_exists")

    with caplog.at_level(logging.INFO):
        await responder.respond(_raising(failure), identifier="existing@example.com", sensitive=("S3cret!pass",))

    messages = [record.getMessage() for record in caplog.records]
    assert any("[auth.signup]" in message and "user_already_exists" in message for message in messages)
    assert not any("existing@example.com" in message for message in messages)
