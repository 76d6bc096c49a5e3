"""
Rate limiting middleware using Redis counters on wager routes
"""

import logging
from typing import Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from jose import JWTError, jwt
from starlette.middleware.base import BaseHTTPMiddleware

from gamewallet.core.config import settings

# Configure logging
logger = logging.getLogger(__name__)

# Path fragments that move money
WAGER_PATH_MARKERS = ("/tickets", "/sports/bets", "/sports/combos", "/play", "/prediction/markets/", "/wallet/withdraw")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-user request budget for routes that stake or withdraw funds"""

    def __init__(self, app, redis_client=None):
        super().__init__(app)
        self.redis_client = redis_client
        self.rate_limit_requests = settings.rate_limit_requests
        self.rate_limit_window = settings.rate_limit_window_seconds

    async def dispatch(self, request: Request, call_next):
        """Process request with rate limiting"""

        # Skip rate limiting if Redis is not available
        if not self.redis_client:
            return await call_next(request)

        rate_limit_key = self._get_rate_limit_key(request)
        if not rate_limit_key:
            return await call_next(request)

        is_allowed, retry_after = await self._check_rate_limit(rate_limit_key)
        if not is_allowed:
            logger.warning(f"Rate limit exceeded for key: {rate_limit_key}")
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "error": "rate_limited",
                    "detail": "Rate limit exceeded",
                    "retry_after": retry_after
                },
                headers={"Retry-After": str(retry_after)}
            )

        response = await call_next(request)
        await self._record_request(rate_limit_key)
        return response

    def _get_rate_limit_key(self, request: Request) -> Optional[str]:
        """Key wager requests by user id, falling back to client IP"""
        if request.method != "POST":
            return None
        path = request.url.path
        if not path.startswith(settings.api_v1_prefix) or path.startswith(f"{settings.api_v1_prefix}/admin"):
            return None
        if not any(marker in path for marker in WAGER_PATH_MARKERS):
            return None

        subject = self._token_subject(request)
        if subject:
            return f"rate_limit:wager:user:{subject}"
        client_ip = request.client.host if request.client else "unknown"
        return f"rate_limit:wager:ip:{client_ip}"

    @staticmethod
    def _token_subject(request: Request) -> Optional[str]:
        header = request.headers.get("authorization", "")
        if not header.lower().startswith("bearer "):
            return None
        try:
            payload = jwt.decode(header[7:], settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        except JWTError:
            return None
        return payload.get("sub")

    async def _check_rate_limit(self, key: str) -> tuple:
        """Check if request is within rate limit"""
        try:
            request_count = await self.redis_client.get(key)
            request_count = int(request_count) if request_count else 0

            if request_count >= self.rate_limit_requests:
                ttl = await self.redis_client.ttl(key)
                retry_after = max(1, ttl) if ttl > 0 else self.rate_limit_window
                return False, retry_after

            return True, 0

        except Exception as e:
            logger.error(f"Error checking rate limit for key {key}: {e}")
            # Allow request if rate limiting fails
            return True, 0

    async def _record_request(self, key: str):
        """Record a request for rate limiting"""
        try:
            pipe = self.redis_client.pipeline()
            pipe.incr(key)
            pipe.expire(key, self.rate_limit_window)
            await pipe.execute()
        except Exception as e:
            logger.error(f"Error recording request for key {key}: {e}")
