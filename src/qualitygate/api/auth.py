"""Admin request guards: client identity, rate limit, bearer key and origin.

CRITICAL: Checks run in order rate limit, authentication, origin
GOTCHA: API keys are compared in constant time
"""

import hmac
import logging
from typing import Optional

from fastapi import Request

from ..config.admin_config import AdminAuthConfig
from ..exceptions import AdminAPIError, RateLimitExceeded
from .rate_limiter import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
USER_AGENT_CHARS = 50


def client_ip(request: Request) -> str:
    """Client address from X-Forwarded-For, X-Real-IP or the peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def client_identifier(request: Request) -> str:
    user_agent = request.headers.get("user-agent", "unknown")
    return f"{client_ip(request)}-{user_agent[:USER_AGENT_CHARS]}"


def verify_api_key(authorization: Optional[str], config: AdminAuthConfig) -> None:
    """
    Validate a bearer authorization header.

    Raises:
        AdminAPIError: 401 when missing, malformed or not an accepted key
    """
    if not authorization:
        raise AdminAPIError(401, "Missing authorization header")

    if not authorization.startswith(BEARER_PREFIX):
        raise AdminAPIError(401, "Invalid authorization format. Use: Bearer <api-key>")

    provided = authorization[len(BEARER_PREFIX):].strip().encode("utf-8")
    for key in config.api_keys:
        if hmac.compare_digest(provided, key.encode("utf-8")):
            return

    logger.warning("Rejected admin request with invalid API key")
    raise AdminAPIError(401, "Invalid API key")


def verify_origin(origin: Optional[str], config: AdminAuthConfig) -> None:
    """Reject browser requests from origins outside the allow list."""
    if origin and origin not in config.allowed_origins:
        logger.warning(f"Rejected admin request from origin {origin}")
        raise AdminAPIError(403, "Origin not allowed")


class AdminGuard:
    """
    FastAPI dependency enforcing admin access rules.

    PATTERN: One guard instance per application, shared rate limiter
    """

    def __init__(
        self,
        config: AdminAuthConfig,
        rate_limiter: Optional[SlidingWindowRateLimiter] = None,
    ):
        self.config = config
        if rate_limiter is None:
            rate_limiter = SlidingWindowRateLimiter(
                limit=config.rate_limit_per_minute,
                window=60.0,
                max_clients=config.rate_limit_max_clients,
            )
        self.rate_limiter = rate_limiter

    async def __call__(self, request: Request) -> str:
        client_id = client_identifier(request)

        decision = self.rate_limiter.check(client_id)
        if not decision.allowed:
            raise RateLimitExceeded(decision.retry_after)

        verify_api_key(request.headers.get("authorization"), self.config)
        verify_origin(request.headers.get("origin"), self.config)
        return client_id
