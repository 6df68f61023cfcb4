"""Error kinds raised by the stores and the auth gateway.

Each kind carries the HTTP status it maps to and a public message that is
safe to show to the end user. Backend error text never reaches a response.
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse

from . import config

log = logging.getLogger(__name__)


class CoreError(Exception):
    status_code = 500
    detail = "request failed"

    def __init__(self, detail: str | None = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)

    @property
    def kind(self) -> str:
        return type(self).__name__


class DuplicateIdentity(CoreError):
    status_code = 409
    detail = "username or email already exists"


class InvalidCredentials(CoreError):
    status_code = 401
    detail = "invalid credentials"


class Unauthenticated(CoreError):
    status_code = 401
    detail = "not logged in"


class NotFound(CoreError):
    status_code = 404
    detail = "not found"


class InvalidInput(CoreError):
    status_code = 400
    detail = "invalid input"


class StorageUnavailable(CoreError):
    status_code = 503
    detail = "service temporarily unavailable, try again"


def _wants_html(request: Request) -> bool:
    return "text/html" in (request.headers.get("accept") or "")


def register_error_handlers(app) -> None:
    @app.exception_handler(CoreError)
    async def core_error_handler(request: Request, exc: CoreError):
        if isinstance(exc, Unauthenticated) and _wants_html(request):
            return RedirectResponse(config.LOGIN_URL, status_code=303)
        return JSONResponse({"error": exc.kind, "detail": exc.detail}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        log.exception("unhandled error on %s %s", request.method, request.url.path)
        detail = "an error occurred"
        if config.APP_ENV == "dev":
            detail = f"{detail}: {exc.__class__.__name__}"
        return JSONResponse({"error": "InternalError", "detail": detail}, status_code=500)
