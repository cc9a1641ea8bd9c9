import time
import logging
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
    def __init__(self, app: ASGIApp, limiter: RateLimiter = None, per_minute: int = None):
        super().__init__(app)
        self.limiter = limiter or InMemoryRateLimiter()
        self.rate_limit = per_minute or settings.RATE_LIMIT_PER_MINUTE

    async def dispatch(self, request: Request, call_next):
        client_ip = request.client.host if request.client else "unknown"

        if not self.limiter.allow(client_ip, max_requests=self.rate_limit, window_seconds=60):
            logger.warning(f"Rate limit exceeded for IP: {client_ip}")
            return JSONResponse(
                status_code=429,
                content=create_error_response("Rate limit exceeded. Please try again later.", 429)
            )

        return await call_next(request)


class SecurityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        client_host = request.client.host if request.client else "unknown"
        logger.info(f"Request: {request.method} {request.url.path} from {client_host}")

        response = await call_next(request)

        duration = time.time() - start_time
        logger.info(f"Response: {response.status_code} in {duration:.3f}s")

        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Unhandled error: {str(e)}", exc_info=True)
            detail = f"Internal server error: {str(e)}" if settings.DEBUG else "Internal server error"
            return JSONResponse(status_code=500, content=create_error_response(detail, 500))


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        # Hard cap on request size using Content-Length when available
        content_length = request.headers.get("content-length")
        if content_length is not None:
            try:
                size = int(content_length)
            except ValueError:
                # Malformed header; downstream file checks still apply
                size = 0
            if size > settings.MAX_REQUEST_SIZE:
                return JSONResponse(
                    status_code=413,
                    content=create_error_response("Request entity too large", 413)
                )
        return await call_next(request)
