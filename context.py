import logging
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

request_context: ContextVar[Optional[Request]] = ContextVar("request_context", default=None)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Expose the current request through `request_context` for the duration of a call"""

    async def dispatch(self, request: Request, call_next):
        token = request_context.set(request)
        logger.debug("Request received")
        try:
            return await call_next(request)
        finally:
            request_context.reset(token)


class RequestContextFilter(logging.Filter):
    """Stamp log records with the method and path of the request being served"""

    def filter(self, record: logging.LogRecord) -> bool:
        request = request_context.get()
        if request is None:
            record.request = "-"
        else:
            record.request = f"{request.method} {request.url.path}"
        return True
