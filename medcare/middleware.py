import time
import logging
from typing import Optional
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .core.config import settings
from .exceptions import create_error_response
from .application.ports.rate_limiter import RateLimiter
from .infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Caps requests per client IP over a sliding window on the /api/ routes."""

    def __init__(self, app: ASGIApp, limiter: Optional[RateLimiter] = None):
        super().__init__(app)
        self.limiter = limiter or InMemoryRateLimiter()

    async def dispatch(self, request: Request, call_next):
        if not settings.RATE_LIMIT_ENABLED or not request.url.path.startswith("/api/"):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        if not self.limiter.allow(client_ip, settings.RATE_LIMIT_MAX_REQUESTS, settings.RATE_LIMIT_WINDOW_SEC):
            logger.warning(f"Rate limit exceeded for IP: {client_ip}")
            return JSONResponse(
                status_code=429,
                content=create_error_response(
                    "Too many requests from this IP, please try again later.", "RATE_LIMITED"
                ),
                headers={"Retry-After": str(settings.RATE_LIMIT_WINDOW_SEC)},
            )
        return await call_next(request)


class SecurityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        client_host = request.client.host if request.client else "unknown"

        response = await call_next(request)

        duration = time.time() - start_time
        identity = getattr(request.state, "identity", None)
        user = f" user={identity.user_id}" if identity else ""
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"in {duration:.3f}s from {client_host}{user}"
        )
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Unhandled error on {request.method} {request.url.path}: {e}", exc_info=True)
            # Never echo internals back to the client
            return JSONResponse(
                status_code=500,
                content=create_error_response("Internal server error", "INTERNAL_ERROR"),
            )


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length is not None:
            try:
                size = int(content_length)
            except ValueError:
                return JSONResponse(
                    status_code=400,
                    content=create_error_response("Invalid Content-Length header", "VALIDATION_ERROR"),
                )
            if size > settings.MAX_REQUEST_SIZE:
                return JSONResponse(
                    status_code=413,
                    content=create_error_response("Request entity too large", "PAYLOAD_TOO_LARGE"),
                )
        return await call_next(request)
