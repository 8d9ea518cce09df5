"""FastAPI application entry point for the authentication API."""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.logging import get_logger, setup_logging
from services.auth.errors import VALIDATION_MESSAGE
from web import routers

logger = get_logger(__name__)

_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}
_VALUE_ERROR_PREFIX = "Value error, "


def _field_name(loc: Any) -> str:
    parts = [str(part) for part in (loc or ()) if not isinstance(part, int)]
    if parts and parts[0] in _LOCATION_PREFIXES:
        parts = parts[1:]
    return ".".join(parts) or "request"


def _error_details(exc: RequestValidationError) -> List[Dict[str, str]]:
    details: List[Dict[str, str]] = []
    for error in exc.errors():
        message = str(error.get("msg") or "Invalid value")
        if message.startswith(_VALUE_ERROR_PREFIX):
            message = message[len(_VALUE_ERROR_PREFIX):]
        details.append({"field": _field_name(error.get("loc")), "message": message})
    return details


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed bodies in the same envelope the auth flows use."""
    details = _error_details(exc)
    logger.info("Rejected %s %s: %d invalid field(s)", request.method, request.url.path, len(details))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "error": {"code": "VALIDATION_ERROR", "message": VALIDATION_MESSAGE, "details": details},
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(
        title="YourFavs Auth API",
        description="Credential verification, password reset and email confirmation.",
        version="1.0.0",
    )
    register_exception_handlers(app)

    @app.get("/", summary="Health Check", tags=["Default"])
    def health_check():
        """Liveness probe."""
        return {"status": "ok", "message": "YourFavs Auth API is running."}

    app.include_router(routers.auth.router, prefix="/api/v1")
    return app


app = create_app()
