# -*- coding: utf-8 -*-
"""Error taxonomy + JSON exception handlers.

Every error leaves the server as ``{"error": <message>, "code": <code>}``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

_STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    413: "PAYLOAD_TOO_LARGE",
}


class ApiError(HTTPException):
    """HTTP error with a stable machine-readable code."""

    def __init__(self, status_code: int, message: str, code: str, details: Optional[str] = None) -> None:
        super().__init__(status_code=status_code, detail=message)
        self.code = code
        self.details = details


def internal_error(message: str, exc: BaseException) -> ApiError:
    logger.error("%s: %s", message, exc)
    return ApiError(500, message, "INTERNAL_ERROR", details=str(exc))


def _show_details(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return bool(settings is not None and settings.is_development)


def _body(request: Request, message: str, code: str, details: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": message, "code": code}
    if details and _show_details(request):
        body["details"] = details
    return body


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=_body(request, str(exc.detail), exc.code, exc.details))


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = _STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
    if exc.status_code == 404:
        content = {"error": "Endpoint not found", "code": code, "path": request.url.path}
    else:
        content = _body(request, str(exc.detail), code)
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=_body(request, "Invalid request body", "INVALID_REQUEST", str(exc.errors())),
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=_body(request, "Internal server error", "INTERNAL_ERROR", repr(exc)))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
