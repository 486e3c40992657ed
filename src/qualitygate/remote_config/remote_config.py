"""Remote log-level configuration.

Validation, merging, caching and retrieval of the runtime log configuration
kept in the key-value store, plus application of the levels to Python
logging.
"""

import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ValidationError

from ..config.logging_config import TRACE
from ..exceptions import StorageError
from ..models.log_config_models import (
    ConfigFetchResult,
    ConfigSource,
    ConfigUpdateResult,
    LogLevelName,
    RemoteLogConfig,
    ValidationResult,
)
from .kv_storage import KVStorage, MemoryStorage

logger = logging.getLogger(__name__)

CONFIG_KEY = "logger_remote_config"
CACHE_KEY = "logger_config_cache"
DEFAULT_CACHE_TTL = 300
MAX_CACHE_AGE = 3600

DEFAULT_RATE_LIMITS: Dict[str, int] = {
    "error_logs": 100,
    "warn_logs": 500,
    "info_logs": 1000,
    "debug_logs": 50,
}

PYTHON_LEVELS: Dict[str, int] = {
    LogLevelName.TRACE.value: TRACE,
    LogLevelName.DEBUG.value: logging.DEBUG,
    LogLevelName.INFO.value: logging.INFO,
    LogLevelName.WARN.value: logging.WARNING,
    LogLevelName.ERROR.value: logging.ERROR,
    LogLevelName.FATAL.value: logging.CRITICAL,
}

ROOT_LOGGER = "qualitygate"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def create_default_config() -> RemoteLogConfig:
    """Default configuration: info level, standard rate limits, version 1."""
    return RemoteLogConfig(
        global_level=LogLevelName.INFO,
        service_levels={},
        rate_limits=dict(DEFAULT_RATE_LIMITS),
        last_updated=_now(),
        version=1,
        enabled=True,
    )


def _format_error(error: Dict[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()))
    message = error.get("msg", "invalid value")
    if location:
        return f"{location}: {message}"
    return message


def validate_remote_config(raw: Any) -> ValidationResult:
    """
    Validate an untrusted configuration payload.

    Args:
        raw: Decoded JSON value

    Returns:
        ValidationResult listing every problem found
    """
    if not isinstance(raw, dict):
        return ValidationResult(valid=False, errors=["Configuration must be an object"])

    try:
        RemoteLogConfig.model_validate(raw)
    except ValidationError as e:
        return ValidationResult(
            valid=False,
            errors=[_format_error(err) for err in e.errors()],
        )
    return ValidationResult(valid=True)


def sanitize_config(partial: Dict[str, Any]) -> RemoteLogConfig:
    """
    Fill a partial configuration with defaults.

    Service levels and rate limits are merged over the defaults.

    Raises:
        ValidationError: If the merged result is invalid
    """
    defaults = create_default_config()
    return RemoteLogConfig(
        global_level=partial.get("global_level") or defaults.global_level,
        service_levels={**defaults.service_levels, **(partial.get("service_levels") or {})},
        rate_limits={**defaults.rate_limits, **(partial.get("rate_limits") or {})},
        last_updated=partial.get("last_updated") or _now(),
        version=partial.get("version") or defaults.version,
        enabled=partial["enabled"] if partial.get("enabled") is not None else defaults.enabled,
    )


def merge_configurations(base: RemoteLogConfig, override: Dict[str, Any]) -> RemoteLogConfig:
    """
    Apply a partial override on top of a configuration.

    CRITICAL: The resulting version is one above the base (or override) version

    Args:
        base: Current configuration
        override: Fields to change

    Returns:
        New merged configuration

    Raises:
        ValidationError: If the merged result is invalid
    """
    version = override.get("version")
    return sanitize_config(
        {
            "global_level": override.get("global_level") or base.global_level,
            "service_levels": {
                **base.service_levels,
                **(override.get("service_levels") or {}),
            },
            "rate_limits": {**base.rate_limits, **(override.get("rate_limits") or {})},
            "last_updated": override.get("last_updated") or _now(),
            "version": (version if isinstance(version, int) else base.version) + 1,
            "enabled": (
                override["enabled"] if override.get("enabled") is not None else base.enabled
            ),
        }
    )


def get_effective_log_level(config: RemoteLogConfig, service: Optional[str] = None) -> str:
    """Level for a service: its override, else the global level; info when disabled."""
    if not config.enabled:
        return LogLevelName.INFO.value
    if service and service in config.service_levels:
        return config.service_levels[service]
    return config.global_level


def get_config_summary(config: RemoteLogConfig) -> Dict[str, Any]:
    return {
        "global_level": config.global_level,
        "service_count": len(config.service_levels),
        "rate_limit_count": len(config.rate_limits),
        "version": config.version,
        "enabled": config.enabled,
        "last_updated": config.last_updated.isoformat(),
    }


def should_update_config(current: RemoteLogConfig, remote: RemoteLogConfig) -> bool:
    return remote.version > current.version


def apply_log_config(config: RemoteLogConfig, root: str = ROOT_LOGGER) -> None:
    """
    Apply configured levels to Python logging.

    The global level is set on ``root``; service levels on the named
    loggers. A disabled configuration resets ``root`` to INFO.
    """
    root_logger = logging.getLogger(root)
    root_logger.setLevel(PYTHON_LEVELS[get_effective_log_level(config)])

    if not config.enabled:
        return

    for service, level in config.service_levels.items():
        logging.getLogger(service).setLevel(PYTHON_LEVELS[level])

    logger.info(
        f"Applied log configuration v{config.version}: global={config.global_level}, "
        f"{len(config.service_levels)} service overrides"
    )


class CacheEntry(BaseModel):
    config: RemoteLogConfig
    cached_at: float
    expires_at: float

    def is_valid(self, max_age: float = MAX_CACHE_AGE) -> bool:
        now = time.time()
        return now < self.expires_at and (now - self.cached_at) < max_age


class RemoteConfigService:
    """
    Reads and writes the remote log configuration.

    PATTERN: Cache-aside over the key-value store
    CRITICAL: Saves always bump the version past the stored one
    GOTCHA: Cache failures are logged and never fail the operation
    """

    def __init__(
        self,
        storage: Optional[KVStorage] = None,
        cache_ttl: int = DEFAULT_CACHE_TTL,
        max_cache_age: int = MAX_CACHE_AGE,
    ):
        """
        Initialize service.

        Args:
            storage: Backend; in-memory when omitted
            cache_ttl: Cache entry lifetime (seconds)
            max_cache_age: Hard upper bound on cache entry age (seconds)
        """
        self.storage = storage if storage is not None else MemoryStorage()
        self.cache_ttl = cache_ttl
        self.max_cache_age = max_cache_age
        self.logger = logger

    async def _fetch_from_cache(self) -> Optional[RemoteLogConfig]:
        raw = await self.storage.get(CACHE_KEY)
        if not raw:
            return None

        try:
            entry = CacheEntry.model_validate_json(raw)
        except ValidationError as e:
            self.logger.warning(f"Discarding invalid config cache entry: {e}")
            return None

        if not entry.is_valid(self.max_cache_age):
            self.logger.debug("Cached configuration expired")
            return None
        return entry.config

    async def _save_to_cache(self, config: RemoteLogConfig) -> None:
        now = time.time()
        entry = CacheEntry(config=config, cached_at=now, expires_at=now + self.cache_ttl)
        try:
            await self.storage.set(CACHE_KEY, entry.model_dump_json(), self.cache_ttl)
        except StorageError as e:
            self.logger.warning(f"Failed to save configuration to cache: {e}")

    async def fetch_remote_config(self, use_cache: bool = True) -> ConfigFetchResult:
        """
        Fetch the configuration, from cache first when allowed.

        Returns:
            ConfigFetchResult; ``config`` is None with ``error`` set on failure
        """
        if use_cache:
            cached = await self._fetch_from_cache()
            if cached is not None:
                return ConfigFetchResult(config=cached, source=ConfigSource.CACHE, cached=True)

        raw = await self.storage.get(CONFIG_KEY)
        if not raw:
            return ConfigFetchResult(
                source=ConfigSource.REMOTE, error="Remote configuration not found"
            )

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            return ConfigFetchResult(
                source=ConfigSource.REMOTE, error=f"Remote fetch failed: {e}"
            )

        validation = validate_remote_config(data)
        if not validation.valid:
            return ConfigFetchResult(
                source=ConfigSource.REMOTE,
                error=f"Invalid configuration: {', '.join(validation.errors)}",
            )

        config = sanitize_config(data)
        if use_cache:
            await self._save_to_cache(config)
        return ConfigFetchResult(config=config, source=ConfigSource.REMOTE)

    async def save_remote_config(self, config: Dict[str, Any]) -> ConfigUpdateResult:
        """
        Validate and persist a configuration, bumping its version.

        Args:
            config: Full configuration payload

        Returns:
            ConfigUpdateResult with the stored config and previous version
        """
        validation = validate_remote_config(config)
        if not validation.valid:
            return ConfigUpdateResult(
                success=False,
                error="Configuration validation failed",
                errors=validation.errors,
            )

        current = await self.fetch_remote_config(use_cache=False)
        previous_version = current.config.version if current.config else 0

        new_config = sanitize_config(
            {**config, "version": previous_version + 1, "last_updated": _now()}
        )

        try:
            await self.storage.set(CONFIG_KEY, new_config.model_dump_json(), ttl=0)
        except StorageError as e:
            self.logger.error(f"Failed to save configuration: {e}")
            return ConfigUpdateResult(success=False, error=f"Failed to save configuration: {e}")

        await self._save_to_cache(new_config)
        self.logger.info(f"Saved log configuration v{new_config.version}")
        return ConfigUpdateResult(
            success=True, config=new_config, previous_version=previous_version
        )

    async def get_config_with_fallback(self) -> ConfigFetchResult:
        """Fetch the configuration, falling back to defaults when unavailable."""
        result = await self.fetch_remote_config(use_cache=True)
        if result.config is not None:
            return result

        self.logger.debug(f"Using default log configuration: {result.error}")
        return ConfigFetchResult(config=create_default_config(), source=ConfigSource.DEFAULT)

    async def clear_config_cache(self) -> None:
        try:
            await self.storage.delete(CACHE_KEY)
        except StorageError as e:
            self.logger.warning(f"Failed to clear configuration cache: {e}")

    async def reset_to_defaults(self) -> ConfigUpdateResult:
        """Store the default configuration as a new version."""
        return await self.save_remote_config(
            create_default_config().model_dump(mode="json")
        )