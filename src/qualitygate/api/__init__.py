"""HTTP API: remote log-level administration, health and metrics."""

from .app import create_app
from .rate_limiter import SlidingWindowRateLimiter

__all__ = ["SlidingWindowRateLimiter", "create_app"]
