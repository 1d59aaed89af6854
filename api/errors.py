"""
Exception handlers that render every error as ``{"error": ...}``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

_REQUIRED_MESSAGES = {
    "name": "Name is required",
    "email": "Email is required",
    "password": "Password is required",
}


def _field_name(error: Dict[str, Any]) -> str:
    return ".".join(str(part) for part in error.get("loc", ()) if part != "body")


def _message(error: Dict[str, Any]) -> str:
    field = _field_name(error)
    kind = error.get("type", "")
    if kind == "missing":
        if not field:
            return "Request body is required"
        return _REQUIRED_MESSAGES.get(field, f"{field} is required")
    if kind == "json_invalid":
        return "Invalid JSON body"
    msg = str(error.get("msg") or "Invalid input")
    if kind == "value_error":
        return msg.removeprefix("Value error, ")
    return f"{field}: {msg}" if field else msg


def validation_details(exc: RequestValidationError) -> List[str]:
    """Flatten pydantic errors into user-facing messages, first-seen order."""
    details: List[str] = []
    for error in exc.errors():
        message = _message(error)
        if message not in details:
            details.append(message)
    return details


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        details = validation_details(exc)
        logger.debug("%s %s — validation failed: %s", request.method, request.url.path, details)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Validation failed", "details": details},
        )
