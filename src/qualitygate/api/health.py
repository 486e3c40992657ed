"""Health check route."""

import logging
import os
import platform
import time
from datetime import datetime, timezone

import psutil
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

router = APIRouter()


def _megabytes(value: int) -> float:
    return round(value / 1024 / 1024, 2)


@router.get("/api/health")
async def health(request: Request) -> JSONResponse:
    """
    Report process liveness, uptime and memory.

    GOTCHA: Any failure gathering process info yields 503
    """
    timestamp = datetime.now(timezone.utc).isoformat()
    server_config = request.app.state.server_config

    try:
        memory = psutil.Process(os.getpid()).memory_info()
        body = {
            "status": "ok",
            "timestamp": timestamp,
            "uptime": round(time.time() - request.app.state.started_at, 3),
            "version": server_config.app_version,
            "environment": server_config.environment,
            "system": {
                "memory": {"rss": _megabytes(memory.rss), "vms": _megabytes(memory.vms)},
                "pid": os.getpid(),
                "python_version": platform.python_version(),
            },
        }
    except (psutil.Error, OSError) as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            {"status": "error", "timestamp": timestamp, "error": "Health check failed"},
            status_code=503,
            headers=NO_CACHE_HEADERS,
        )

    return JSONResponse(body, headers=NO_CACHE_HEADERS)
