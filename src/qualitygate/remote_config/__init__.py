"""Remote log configuration backed by a key-value store."""

from .kv_storage import KVStorage, MemoryStorage, RedisStorage, create_kv_storage
from .remote_config import (
    CACHE_KEY,
    CONFIG_KEY,
    RemoteConfigService,
    apply_log_config,
    create_default_config,
    get_config_summary,
    get_effective_log_level,
    merge_configurations,
    sanitize_config,
    validate_remote_config,
)

__all__ = [
    "CACHE_KEY",
    "CONFIG_KEY",
    "KVStorage",
    "MemoryStorage",
    "RedisStorage",
    "RemoteConfigService",
    "apply_log_config",
    "create_default_config",
    "create_kv_storage",
    "get_config_summary",
    "get_effective_log_level",
    "merge_configurations",
    "sanitize_config",
    "validate_remote_config",
]
