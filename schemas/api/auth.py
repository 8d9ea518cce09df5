"""Pydantic schemas for the credential authentication API."""

from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator

AuthErrorCode = Literal[
    "VALIDATION_ERROR",
    "INVALID_PROOF",
    "EXPIRED_PROOF",
    "AUTH_REQUIRED",
    "SERVER_ERROR",
]


def _normalize_email(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


def _require_match(value: str, info: ValidationInfo) -> str:
    if value != info.data.get("password"):
        raise ValueError("Passwords do not match")
    return value


class _EmailRequest(BaseModel):
    email: EmailStr = Field(..., description="Account email, trimmed and lower-cased.")

    @field_validator("email", mode="before")
    @classmethod
    def clean_email(cls, value: Any) -> Any:
        return _normalize_email(value)


class SignupRequest(_EmailRequest):
    password: str = Field(..., min_length=1, description="Candidate password; strength is checked by the service.")


class LoginRequest(_EmailRequest):
    password: str = Field(..., min_length=1)
    redirectTo: Optional[str] = Field(default=None, description="Same-origin path to land on after login.")


class PasswordResetRequest(_EmailRequest):
    pass


class PasswordResetCompleteRequest(BaseModel):
    password: str = Field(..., min_length=1)
    confirmPassword: str
    code: Optional[str] = Field(default=None, description="One-time exchange code from the reset email.")
    tokenHash: Optional[str] = Field(default=None, description="Verification token from the reset email.")
    type: Optional[str] = Field(default=None, description="Verification token kind.")

    @field_validator("confirmPassword")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        return _require_match(value, info)


class PasswordChangeRequest(BaseModel):
    currentPassword: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    confirmPassword: str

    @field_validator("confirmPassword")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        return _require_match(value, info)


class AuthMessageResponse(BaseModel):
    success: bool = True
    message: str


class LoginResponse(BaseModel):
    success: bool = True
    redirectTo: str


class LogoutResponse(BaseModel):
    success: bool = True


class PasswordUpdateResponse(BaseModel):
    success: bool = True
    message: str
    redirectTo: Optional[str] = None


class RefreshResponse(BaseModel):
    success: bool = True
    message: str
    expiresIn: Optional[int] = None


class AuthUserSchema(BaseModel):
    id: str
    email: Optional[str] = None
    emailVerified: bool = False


class SessionResponse(BaseModel):
    authenticated: bool
    user: Optional[AuthUserSchema] = None


class AuthErrorDetailSchema(BaseModel):
    field: str
    message: str


class AuthErrorBody(BaseModel):
    code: AuthErrorCode
    message: str
    details: Optional[List[AuthErrorDetailSchema]] = None


class AuthErrorResponse(BaseModel):
    success: Literal[False] = False
    error: AuthErrorBody
