from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from app.config import settings

LOGGER_NAME = "funding_memory"


class RequestIdFilter(logging.Filter):
    """Ensure every record has a request_id attribute for JSON formatting."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = "-"
        return True


def setup_json_logging(logger_name: str = LOGGER_NAME) -> logging.Logger:
    """
    Configure the service logger with one JSON object per line:

      {"ts":"...","level":"...","msg":"...","request_id":"..."}

    Idempotent: safe to call multiple times.
    """
    logger = logging.getLogger(logger_name)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    fmt = logging.Formatter(
        '{"ts":"%(asctime)s","level":"%(levelname)s","msg":"%(message)s","request_id":"%(request_id)s"}'
    )
    handler.setFormatter(fmt)
    handler.addFilter(RequestIdFilter())

    logger.addHandler(handler)
    logger.setLevel(settings.LOG_LEVEL.upper())
    logger.propagate = False
    return logger


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Propagate/assign X-Request-ID and write one access line per request.

    Query strings are never logged: sdkMeta blobs are large and opaque.
    """

    def __init__(self, app, logger: logging.Logger):
        super().__init__(app)
        self.log = logger

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        start = time.time()
        try:
            response = await call_next(request)
        except Exception:
            self.log.exception(
                'unhandled_exception method="%s" path="%s" duration_ms=%d',
                request.method,
                request.url.path,
                int((time.time() - start) * 1000),
                extra={"request_id": rid},
            )
            raise

        response.headers["X-Request-ID"] = rid
        self.log.info(
            'access method="%s" path="%s" status=%d duration_ms=%d',
            request.method,
            request.url.path,
            response.status_code,
            int((time.time() - start) * 1000),
            extra={"request_id": rid},
        )
        return response
