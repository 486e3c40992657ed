"""In-process request metrics and the metrics status route."""

import threading
import time
from collections import Counter
from typing import Any, Dict

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse


class RequestMetrics:
    """Thread-safe request counters keyed by method, path and status."""

    def __init__(self):
        self._lock = threading.Lock()
        self._requests: Counter = Counter()
        self._durations_ms: Dict[str, float] = {}
        self.started_at = time.time()

    def record(self, method: str, path: str, status_code: int, duration_ms: float) -> None:
        key = f"{method} {path} {status_code}"
        with self._lock:
            self._requests[key] += 1
            self._durations_ms[key] = self._durations_ms.get(key, 0.0) + duration_ms

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "total_requests": sum(self._requests.values()),
                "requests": dict(self._requests),
                "average_duration_ms": {
                    key: round(total / self._requests[key], 2)
                    for key, total in self._durations_ms.items()
                },
            }


router = APIRouter()


@router.get("/api/metrics")
async def metrics_status(request: Request) -> JSONResponse:
    state = request.app.state
    return JSONResponse(
        {
            "status": "active",
            "endpoint": "/api/metrics",
            "format": "json",
            "port": state.server_config.metrics_port,
            "metrics_initialized": state.request_metrics is not None,
            "requests": state.request_metrics.snapshot(),
        }
    )


@router.head("/api/metrics")
async def metrics_head() -> Response:
    return Response(status_code=200)
