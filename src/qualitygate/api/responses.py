"""Response envelopes for the admin API."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class SuccessBody(BaseModel):
    success: bool = True
    data: Any = None
    message: Optional[str] = None
    timestamp: str


class ErrorBody(BaseModel):
    model_config = ConfigDict(extra="allow")

    success: bool = False
    error: str
    details: Optional[Dict[str, Any]] = None
    timestamp: str


def success_response(
    data: Any = None, message: Optional[str] = None, status_code: int = 200
) -> JSONResponse:
    body = SuccessBody(data=data, message=message, timestamp=_timestamp())
    content = body.model_dump(mode="json")
    if message is None:
        content.pop("message")
    return JSONResponse(content, status_code=status_code)


def error_response(
    status_code: int,
    error: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    **extra: Any,
) -> JSONResponse:
    body = ErrorBody(error=error, details=details, timestamp=_timestamp(), **extra)
    content = body.model_dump(mode="json")
    if details is None:
        content.pop("details")
    return JSONResponse(
        content,
        status_code=status_code,
        headers=headers,
    )
