"""Email/password authentication endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse

from core.auth.constants import SESSION_REFRESHED_MESSAGE
from core.auth.settings import AuthSettings
from core.logging import get_logger
from schemas.api.auth import (
    AuthErrorResponse,
    AuthMessageResponse,
    AuthUserSchema,
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    PasswordChangeRequest,
    PasswordResetCompleteRequest,
    PasswordResetRequest,
    PasswordUpdateResponse,
    RefreshResponse,
    SessionResponse,
    SignupRequest,
)
from services.auth import (
    AuthServiceError,
    PasswordUpdateResult,
    Principal,
    RequestContext,
    change_password,
    classify,
    complete_password_reset,
    get_session,
    login,
    logout,
    refresh_session,
    register_account,
    request_password_reset,
    verify_email,
)
from services.auth.enumeration import PublicResponse
from services.auth.provider import IdentityProvider
from web.deps import get_identity_provider, get_settings

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

_ERROR_RESPONSES = {
    400: {"model": AuthErrorResponse},
    401: {"model": AuthErrorResponse},
    500: {"model": AuthErrorResponse},
}


def _ctx(request: Request) -> RequestContext:
    client_host = request.client.host if request.client else None
    return RequestContext(
        ip=client_host,
        user_agent=request.headers.get("user-agent"),
    )


def _error_response(exc: AuthServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


def _unexpected(exc: Exception, operation: str) -> JSONResponse:
    return _error_response(AuthServiceError(classify(exc, operation=operation)))


def _public(result: PublicResponse) -> JSONResponse:
    return JSONResponse(status_code=result.status_code, content=result.body)


def _set_session_cookies(response: Response, principal: Principal, settings: AuthSettings) -> None:
    if principal.access_token:
        response.set_cookie(
            settings.access_cookie_name,
            principal.access_token,
            max_age=principal.expires_in,
            httponly=True,
            secure=settings.cookie_secure,
            samesite="lax",
        )
    if principal.refresh_token:
        response.set_cookie(
            settings.refresh_cookie_name,
            principal.refresh_token,
            httponly=True,
            secure=settings.cookie_secure,
            samesite="lax",
        )


def _clear_session_cookies(response: Response, settings: AuthSettings) -> None:
    for name in (settings.access_cookie_name, settings.refresh_cookie_name):
        response.delete_cookie(name, httponly=True, secure=settings.cookie_secure, samesite="lax")


def _password_updated(result: PasswordUpdateResult, settings: AuthSettings) -> JSONResponse:
    body = PasswordUpdateResponse(message=result.message, redirectTo=result.redirect_to)
    response = JSONResponse(content=body.model_dump())
    # The provider session is gone (or about to be); the browser must log in again.
    _clear_session_cookies(response, settings)
    return response


@router.post(
    "/signup",
    response_model=AuthMessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERROR_RESPONSES,
    summary="Email/password signup",
)
async def signup_route(
    payload: SignupRequest,
    request: Request,
    provider: IdentityProvider = Depends(get_identity_provider),
    settings: AuthSettings = Depends(get_settings),
):
    try:
        result = await register_account(
            provider,
            email=payload.email,
            password=payload.password,
            settings=settings,
            context=_ctx(request),
        )
    except AuthServiceError as exc:
        return _error_response(exc)
    except Exception as exc:
        return _unexpected(exc, "auth.signup")
    return _public(result)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses=_ERROR_RESPONSES,
    summary="Email/password login",
)
async def login_route(
    payload: LoginRequest,
    provider: IdentityProvider = Depends(get_identity_provider),
    settings: AuthSettings = Depends(get_settings),
):
    try:
        result = await login(
            provider,
            email=payload.email,
            password=payload.password,
            settings=settings,
            redirect_to=payload.redirectTo,
        )
    except AuthServiceError as exc:
        return _error_response(exc)
    except Exception as exc:
        return _unexpected(exc, "auth.login")
    response = JSONResponse(content=LoginResponse(redirectTo=result.redirect_to).model_dump())
    _set_session_cookies(response, result.principal, settings)
    return response


@router.post(
    "/logout",
    response_model=LogoutResponse,
    summary="End the current session",
)
async def logout_route(
    provider: IdentityProvider = Depends(get_identity_provider),
    settings: AuthSettings = Depends(get_settings),
):
    await logout(provider)
    response = JSONResponse(content=LogoutResponse().model_dump())
    _clear_session_cookies(response, settings)
    return response


@router.get(
    "/session",
    response_model=SessionResponse,
    summary="Current session status",
)
async def session_route(provider: IdentityProvider = Depends(get_identity_provider)) -> SessionResponse:
    result = await get_session(provider)
    if not result.authenticated or result.principal is None:
        return SessionResponse(authenticated=False)
    principal = result.principal
    return SessionResponse(
        authenticated=True,
        user=AuthUserSchema(id=principal.id, email=principal.email, emailVerified=principal.email_verified),
    )


@router.post(
    "/refresh",
    response_model=RefreshResponse,
    responses=_ERROR_RESPONSES,
    summary="Refresh the session from the refresh-token cookie",
)
async def refresh_route(
    request: Request,
    provider: IdentityProvider = Depends(get_identity_provider),
    settings: AuthSettings = Depends(get_settings),
):
    try:
        principal = await refresh_session(provider, refresh_token=request.cookies.get(settings.refresh_cookie_name))
    except AuthServiceError as exc:
        response = _error_response(exc)
        _clear_session_cookies(response, settings)
        return response
    except Exception as exc:
        return _unexpected(exc, "auth.refresh")
    body = RefreshResponse(message=SESSION_REFRESHED_MESSAGE, expiresIn=principal.expires_in)
    response = JSONResponse(content=body.model_dump())
    _set_session_cookies(response, principal, settings)
    return response


@router.post(
    "/password/reset",
    response_model=AuthMessageResponse,
    responses=_ERROR_RESPONSES,
    summary="Send a password reset email",
)
async def password_reset_request_route(
    payload: PasswordResetRequest,
    request: Request,
    provider: IdentityProvider = Depends(get_identity_provider),
    settings: AuthSettings = Depends(get_settings),
):
    try:
        result = await request_password_reset(provider, email=payload.email, settings=settings, context=_ctx(request))
    except AuthServiceError as exc:
        return _error_response(exc)
    except Exception as exc:
        return _unexpected(exc, "auth.password_reset")
    return _public(result)


@router.post(
    "/password/reset/complete",
    response_model=PasswordUpdateResponse,
    responses=_ERROR_RESPONSES,
    summary="Set a new password from a reset link",
)
async def password_reset_complete_route(
    payload: PasswordResetCompleteRequest,
    provider: IdentityProvider = Depends(get_identity_provider),
    settings: AuthSettings = Depends(get_settings),
):
    try:
        result = await complete_password_reset(
            provider,
            password=payload.password,
            settings=settings,
            code=payload.code,
            token_hash=payload.tokenHash,
            token_type=payload.type,
        )
    except AuthServiceError as exc:
        return _error_response(exc)
    except Exception as exc:
        return _unexpected(exc, "auth.password_reset_complete")
    return _password_updated(result, settings)


@router.put(
    "/password",
    response_model=PasswordUpdateResponse,
    responses=_ERROR_RESPONSES,
    summary="Change the password of the signed-in user",
)
async def password_change_route(
    payload: PasswordChangeRequest,
    provider: IdentityProvider = Depends(get_identity_provider),
    settings: AuthSettings = Depends(get_settings),
):
    try:
        result = await change_password(
            provider,
            current_password=payload.currentPassword,
            password=payload.password,
            settings=settings,
        )
    except AuthServiceError as exc:
        return _error_response(exc)
    except Exception as exc:
        return _unexpected(exc, "auth.password_change")
    return _password_updated(result, settings)


@router.get(
    "/verify",
    status_code=status.HTTP_302_FOUND,
    response_class=RedirectResponse,
    summary="Confirm an email link and redirect",
)
async def verify_route(
    code: Optional[str] = Query(default=None),
    token_hash: Optional[str] = Query(default=None),
    token_type: Optional[str] = Query(default=None, alias="type"),
    next_path: Optional[str] = Query(default=None, alias="next"),
    provider: IdentityProvider = Depends(get_identity_provider),
    settings: AuthSettings = Depends(get_settings),
) -> RedirectResponse:
    try:
        result = await verify_email(
            provider,
            settings=settings,
            code=code,
            token_hash=token_hash,
            token_type=token_type,
            next_path=next_path,
        )
    except Exception:
        logger.exception("[auth.verify] unhandled failure")
        return RedirectResponse(f"{settings.error_redirect}?error=server_error", status_code=status.HTTP_302_FOUND)
    response = RedirectResponse(result.redirect_to, status_code=status.HTTP_302_FOUND)
    if result.principal is not None:
        _set_session_cookies(response, result.principal, settings)
    return response
