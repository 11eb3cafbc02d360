"""
FastAPI middleware for request logging and timing.
"""
import logging
import time

from fastapi import Request

logger = logging.getLogger(__name__)

# Health checks are polled often and not worth a log line
LOGGED_PREFIXES = ("/v1/", "/responses", "/models", "/auth/")


async def log_requests_middleware(request: Request, call_next):
    """Log method, path, status and duration; adds an X-Process-Time header"""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started

    response.headers["X-Process-Time"] = f"{elapsed:.3f}"
    if request.url.path.startswith(LOGGED_PREFIXES):
        logger.info(f"{request.method} {request.url.path} - {response.status_code} - {elapsed:.3f}s")

    return response
