from __future__ import annotations

import logging
import time
from logging.handlers import RotatingFileHandler

from starlette.middleware.base import BaseHTTPMiddleware

from . import config

FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging() -> None:
    root = logging.getLogger("todo_api")
    if root.handlers:
        return

    formatter = logging.Formatter(FORMAT)
    stream = logging.StreamHandler()
    stream.setFormatter(formatter)
    root.addHandler(stream)

    if config.LOG_FILE:
        fh = RotatingFileHandler(config.LOG_FILE, maxBytes=2_000_000, backupCount=3)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    root.setLevel(config.LOG_LEVEL)


class AccessLogMiddleware(BaseHTTPMiddleware):
    def __init__(self, app):
        super().__init__(app)
        self.logger = logging.getLogger("todo_api.access")

    async def dispatch(self, request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        self.logger.info(
            "method=%s path=%s status=%s user_id=%s duration_ms=%.1f",
            request.method,
            request.url.path,
            response.status_code,
            getattr(request.state, "user_id", None),
            (time.perf_counter() - started) * 1000,
        )
        return response
