import logging
import time

from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware

from subtrack.config import settings
from subtrack.schemas.envelope import create_failure, envelope_response

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Redis-backed sliding window rate limiter."""

    async def dispatch(self, request: Request, call_next):
        # Skip rate limiting for health check
        if request.url.path == "/health":
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        key = f"rate_limit:{client_ip}"

        redis_client = getattr(request.app.state, "redis", None)
        if redis_client is None:
            return await call_next(request)

        try:
            now = time.time()
            window = 60  # 1-minute window

            pipe = redis_client.pipeline()
            pipe.zremrangebyscore(key, 0, now - window)
            pipe.zadd(key, {str(now): now})
            pipe.zcard(key)
            pipe.expire(key, window)
            results = await pipe.execute()
            request_count = results[2]
        except Exception as exc:
            # Redis trouble must not take the API down
            logger.warning("Rate limiter unavailable, allowing request: %s", exc)
            return await call_next(request)

        if request_count > settings.RATE_LIMIT_PER_MINUTE:
            return envelope_response(
                create_failure(
                    "Rate limit exceeded. Try again later.",
                    status.HTTP_429_TOO_MANY_REQUESTS,
                )
            )

        return await call_next(request)
