"""Admin routes for reading and changing the remote log configuration.

PATTERN: Guard dependency, then service call, then envelope
CRITICAL: Every successful write clears the cache and applies the new levels
"""

import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..exceptions import AdminAPIError, ConfigValidationError
from ..models.log_config_models import ConfigUpdateResult, RemoteLogConfig
from ..remote_config.remote_config import (
    RemoteConfigService,
    apply_log_config,
    get_config_summary,
    merge_configurations,
    validate_remote_config,
)
from .responses import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin")


async def require_admin(request: Request) -> str:
    return await request.app.state.admin_guard(request)


def get_service(request: Request) -> RemoteConfigService:
    return request.app.state.config_service


async def _read_json(request: Request) -> Any:
    raw = await request.body()
    try:
        return json.loads(raw or b"null")
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise AdminAPIError(400, "Invalid JSON in request body") from e


def _validate(payload: Any) -> Dict[str, Any]:
    validation = validate_remote_config(payload)
    if not validation.valid:
        raise ConfigValidationError(validation.errors)
    return payload


def _merge(current: RemoteLogConfig, override: Dict[str, Any]) -> RemoteLogConfig:
    try:
        return merge_configurations(current, override)
    except ValidationError as e:
        raise ConfigValidationError([err["msg"] for err in e.errors()]) from e


async def _persist(service: RemoteConfigService, config: RemoteLogConfig) -> ConfigUpdateResult:
    result = await service.save_remote_config(config.model_dump(mode="json"))
    if not result.success:
        if result.errors:
            raise ConfigValidationError(result.errors)
        raise AdminAPIError(500, result.error or "Failed to save configuration")

    await service.clear_config_cache()
    apply_log_config(result.config)
    return result


def _update_body(result: ConfigUpdateResult, **extra: Any) -> Dict[str, Any]:
    return {
        "config": result.config.model_dump(mode="json"),
        "previous_version": result.previous_version,
        "summary": get_config_summary(result.config),
        **extra,
    }


@router.get("/log-level")
async def get_log_level(
    request: Request,
    _client: str = Depends(require_admin),
    service: RemoteConfigService = Depends(get_service),
) -> JSONResponse:
    result = await service.get_config_with_fallback()
    data: Dict[str, Any] = {
        "config": result.config.model_dump(mode="json"),
        "source": result.source,
        "cached": result.cached,
    }
    if request.query_params.get("summary") == "true":
        data["summary"] = get_config_summary(result.config)
    return success_response(data)


@router.post("/log-level")
async def replace_log_level(
    request: Request,
    _client: str = Depends(require_admin),
    service: RemoteConfigService = Depends(get_service),
) -> JSONResponse:
    payload = _validate(await _read_json(request))
    current = (await service.get_config_with_fallback()).config

    result = await _persist(service, _merge(current, payload))
    logger.info(f"Log configuration replaced (v{result.config.version})")
    return success_response(_update_body(result), message="Log configuration updated")


@router.patch("/log-level")
async def update_log_level(
    request: Request,
    _client: str = Depends(require_admin),
    service: RemoteConfigService = Depends(get_service),
) -> JSONResponse:
    changes = await _read_json(request)
    if not isinstance(changes, dict):
        raise ConfigValidationError(["Configuration must be an object"])

    current = (await service.get_config_with_fallback()).config
    _validate({**current.model_dump(mode="json"), **changes})

    result = await _persist(service, _merge(current, changes))
    logger.info(f"Log configuration patched (v{result.config.version})")
    return success_response(
        _update_body(result, changes=changes), message="Log configuration patched"
    )


@router.delete("/log-level")
async def reset_log_level(
    _client: str = Depends(require_admin),
    service: RemoteConfigService = Depends(get_service),
) -> JSONResponse:
    result = await service.reset_to_defaults()
    if not result.success:
        raise AdminAPIError(500, result.error or "Failed to reset configuration")

    await service.clear_config_cache()
    apply_log_config(result.config)
    logger.info(f"Log configuration reset to defaults (v{result.config.version})")
    return success_response(_update_body(result), message="Log configuration reset to defaults")
