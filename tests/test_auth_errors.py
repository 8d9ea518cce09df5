from __future__ import annotations

import logging

import pytest

from services.auth.errors import (
    AuthErrorKind,
    AuthServiceError,
    ErrorDetail,
    InvalidProofMaterial,
    NoProofSupplied,
    classify,
    mask_email,
    validation_error,
)
from services.auth.provider import IdentityProviderError, IdentityProviderUnavailable


def test_local_failures_map_to_fixed_kinds() -> None:
    assert classify(InvalidProofMaterial("bad kind"), operation="t").kind is AuthErrorKind.VALIDATION_ERROR
    assert classify(NoProofSupplied(), operation="t").kind is AuthErrorKind.AUTH_REQUIRED
    assert classify(RuntimeError("boom"), operation="t").kind is AuthErrorKind.SERVER_ERROR
    assert classify(IdentityProviderUnavailable("down"), operation="t").kind is AuthErrorKind.SERVER_ERROR


def test_provider_validation_codes_map_to_validation_error() -> None:
    failure = IdentityProviderError("Password should be stronger", code="weak_password")
    error = classify(failure, operation="t", stage="update")
    assert error.kind is AuthErrorKind.VALIDATION_ERROR
    assert error.status_code == 400


def test_expired_link_is_distinguished_from_invalid_link() -> None:
    expired = classify(
        IdentityProviderError("Email link is invalid or has expired", code="otp_expired"),
        operation="t",
        method="token",
    )
    invalid = classify(IdentityProviderError("invalid flow state", code="bad_code_verifier"), operation="t", method="code")
    assert expired.kind is AuthErrorKind.EXPIRED_PROOF
    assert expired.message == "This link has expired. Please request a new one."
    assert invalid.kind is AuthErrorKind.INVALID_PROOF
    assert invalid.status_code == 401


def test_session_failures_require_authentication() -> None:
    error = classify(IdentityProviderError("Invalid JWT", code="bad_jwt"), operation="t", method="session")
    assert error.kind is AuthErrorKind.AUTH_REQUIRED


def test_update_stage_failures() -> None:
    expired = classify(IdentityProviderError("Session not found", code="session_not_found"), operation="t", stage="update")
    other = classify(IdentityProviderError("database write failed", code="unexpected"), operation="t", stage="update")
    assert expired.kind is AuthErrorKind.EXPIRED_PROOF
    assert other.kind is AuthErrorKind.SERVER_ERROR


def test_login_failures_never_reveal_which_part_was_wrong() -> None:
    unknown = classify(IdentityProviderError("Invalid login credentials", code="invalid_credentials"), operation="t", stage="login")
    unconfirmed = classify(IdentityProviderError("Email not confirmed", code="email_not_confirmed"), operation="t", stage="login")
    assert unknown.kind is AuthErrorKind.INVALID_PROOF
    assert unknown.message == "Invalid email or password."
    assert unconfirmed.kind is AuthErrorKind.INVALID_PROOF
    assert unconfirmed.message == "Please verify your email before logging in."


def test_wrong_current_password() -> None:
    error = classify(IdentityProviderError("Invalid login credentials"), operation="t", stage="verify")
    assert error.kind is AuthErrorKind.INVALID_PROOF
    assert error.message == "Current password is incorrect."


def test_refresh_failures_always_expire_the_session() -> None:
    for failure in (
        IdentityProviderError("Invalid Refresh Token: Already Used", code="refresh_token_already_used"),
        IdentityProviderUnavailable("down"),
    ):
        error = classify(failure, operation="t", stage="refresh", method="session")
        assert error.kind is AuthErrorKind.EXPIRED_PROOF
        assert error.message == "Your session has expired. Please log in again."
    assert classify(RuntimeError("boom"), operation="t", stage="refresh").kind is AuthErrorKind.SERVER_ERROR


def test_classify_logs_once_with_masked_identifier(caplog: pytest.LogCaptureFixture) -> None:
    failure = IdentityProviderError("rejected hunter2 for tester@example.com", code="invalid_credentials")
    with caplog.at_level(logging.WARNING, logger="services.auth.errors"):
        classify(
            failure,
            operation="auth.login",
            identifier="tester@example.com",
            stage="login",
            sensitive=("hunter2",),
        )

    records = [record for record in caplog.records if record.name == "services.auth.errors"]
    assert len(records) == 1
    assert records[0].levelno == logging.WARNING
    text = records[0].getMessage()
    assert "[auth.login] INVALID_PROOF" in text
    assert "te***@example.com" in text
    assert "tester@example.com" not in text
    assert "hunter2" not in text


def test_server_errors_log_at_error_level(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="services.auth.errors"):
        classify(RuntimeError("boom"), operation="auth.signup")
    assert [record.levelno for record in caplog.records if record.name == "services.auth.errors"] == [logging.ERROR]


def test_error_envelope_shape() -> None:
    exc = validation_error([ErrorDetail("password", "Password must contain at least one number")])
    assert exc.status_code == 400
    assert exc.to_response() == {
        "success": False,
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Validation failed. Please correct the highlighted fields.",
            "details": [{"field": "password", "message": "Password must contain at least one number"}],
        },
    }


def test_error_envelope_omits_empty_details() -> None:
    exc = AuthServiceError(classify(NoProofSupplied(), operation="t"))
    assert "details" not in exc.to_response()["error"]


@pytest.mark.parametrize(
    ("email", "masked"),
    [
        ("tester@example.com", "te***@example.com"),
        ("a@b.co", "a***@b.co"),
        ("no-at-sign", "no***@unknown"),
        (None, "***@unknown"),
    ],
)
def test_mask_email(email, masked) -> None:
    assert mask_email(email) == masked
