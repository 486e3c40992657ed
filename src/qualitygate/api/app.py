"""FastAPI application factory for the admin and health API."""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .. import __version__
from ..config.admin_config import AdminAuthConfig, ServerConfig, StorageConfig
from ..exceptions import AdminAPIError, RateLimitExceeded
from ..remote_config.kv_storage import KVStorage, create_kv_storage
from ..remote_config.remote_config import RemoteConfigService
from . import admin_log_level, health, metrics
from .auth import AdminGuard
from .metrics import RequestMetrics
from .rate_limiter import SlidingWindowRateLimiter
from .responses import error_response

logger = logging.getLogger(__name__)


def create_app(
    auth_config: Optional[AdminAuthConfig] = None,
    storage: Optional[KVStorage] = None,
    server_config: Optional[ServerConfig] = None,
    rate_limiter: Optional[SlidingWindowRateLimiter] = None,
) -> FastAPI:
    """
    Build the API application.

    Args:
        auth_config: Admin keys, origins and rate limits
        storage: Key-value backend; selected from environment when omitted
        server_config: Version, environment and exporter port
        rate_limiter: Shared limiter; built from ``auth_config`` when omitted

    Returns:
        Configured FastAPI app
    """
    auth_config = auth_config if auth_config is not None else AdminAuthConfig()
    server_config = server_config if server_config is not None else ServerConfig()
    storage = storage if storage is not None else create_kv_storage(StorageConfig())

    if not auth_config.api_keys:
        logger.warning("No admin API keys configured; admin routes will reject all requests")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await storage.close()

    app = FastAPI(title="Quality Gate Admin API", version=__version__, lifespan=lifespan)
    app.state.started_at = time.time()
    app.state.server_config = server_config
    app.state.storage = storage
    app.state.config_service = RemoteConfigService(storage)
    app.state.admin_guard = AdminGuard(auth_config, rate_limiter)
    app.state.request_metrics = RequestMetrics()

    @app.middleware("http")
    async def record_request(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        app.state.request_metrics.record(
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    @app.exception_handler(AdminAPIError)
    async def admin_error_handler(request: Request, exc: AdminAPIError) -> JSONResponse:
        extra = {"retry_after": exc.retry_after} if isinstance(exc, RateLimitExceeded) else {}
        return error_response(exc.status_code, exc.message, exc.details, exc.headers, **extra)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return error_response(500, "Internal server error")

    app.include_router(admin_log_level.router)
    app.include_router(health.router)
    app.include_router(metrics.router)
    return app
