"""Request tracing, rate limiting and HTTP error middleware"""

import time
import uuid
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from clinic_stock.core.config import settings
from clinic_stock.logging_config import get_logger

logger = get_logger("middleware")

REQUEST_ID_HEADER = "X-Request-ID"
WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_per_minute}/minute"],
    enabled=settings.rate_limit_enabled
)


def _client(request: Request) -> str:
    return request.client.host if request.client else "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Tag every request with an id and log its outcome.

    Stock-changing requests are logged at INFO, reads at DEBUG. The id is
    taken from an incoming X-Request-ID header when the caller sends one and
    echoed back on the response along with X-Process-Time.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()
        level = "info" if request.method in WRITE_METHODS else "debug"

        try:
            response = await call_next(request)
        except Exception:
            elapsed = (time.perf_counter() - started) * 1000
            logger.error(
                f"[{request_id}] {request.method} {request.url.path} failed after {elapsed:.2f}ms",
                exc_info=True
            )
            raise

        elapsed = (time.perf_counter() - started) * 1000
        getattr(logger, level)(
            f"[{request_id}] {request.method} {request.url.path} "
            f"client={_client(request)} status={response.status_code} {elapsed:.2f}ms"
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = f"{elapsed:.2f}ms"
        return response


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"Rate limit hit by {_client(request)} on {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=429,
        content={
            "error": "Rate limit exceeded",
            "details": {"limit": str(exc.detail)},
            "path": str(request.url.path)
        },
        headers={"Retry-After": "60"}
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """Render framework HTTP errors (401, 403, 404 routes, 405) in the API error shape."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    else:
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.detail if isinstance(exc.detail, str) else "HTTP error",
            "status_code": exc.status_code,
            "path": str(request.url.path)
        },
        headers=getattr(exc, "headers", None)
    )
