"""Admin API, storage and server configuration."""

import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class AdminAuthConfig(BaseModel):
    """Authentication, origin and rate limit settings for admin routes."""

    api_keys: List[str] = Field(
        default_factory=lambda: _split_list(os.getenv("ADMIN_API_KEYS", "")),
        description="Accepted bearer tokens",
    )
    allowed_origins: List[str] = Field(
        default_factory=lambda: _split_list(
            os.getenv("ADMIN_ALLOWED_ORIGINS", "http://localhost:3000")
        ),
        description="Origins allowed to call admin routes",
    )
    rate_limit_per_minute: int = Field(
        default_factory=lambda: int(os.getenv("ADMIN_RATE_LIMIT_PER_MINUTE", "60")),
        ge=1,
        description="Requests per client per sliding minute",
    )
    rate_limit_max_clients: int = Field(
        default_factory=lambda: int(os.getenv("ADMIN_RATE_LIMIT_MAX_CLIENTS", "10000")),
        ge=1,
        description="Upper bound on tracked client fingerprints",
    )


class StorageConfig(BaseModel):
    """Key-value storage backend for the remote log configuration."""

    storage_type: str = Field(
        default_factory=lambda: os.getenv("KV_STORAGE_TYPE", "memory"),
        description="memory or redis",
    )
    redis_url: str = Field(
        default_factory=lambda: os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        description="Redis connection URL",
    )
    default_ttl: int = Field(
        default_factory=lambda: int(os.getenv("KV_TTL_DEFAULT", "3600")),
        description="Default key TTL (seconds)",
    )
    timeout_ms: int = Field(
        default_factory=lambda: int(os.getenv("KV_TIMEOUT_MS", "5000")),
        description="Backend operation timeout (milliseconds)",
    )
    key_prefix: Optional[str] = Field(
        default_factory=lambda: os.getenv("KV_KEY_PREFIX"),
        description="Optional namespace prepended to keys",
    )


class ServerConfig(BaseModel):
    """HTTP service settings."""

    app_version: str = Field(default_factory=lambda: os.getenv("APP_VERSION", "1.0.0"))
    environment: str = Field(default_factory=lambda: os.getenv("APP_ENV", "development"))
    host: str = Field(default_factory=lambda: os.getenv("QUALITY_API_HOST", "127.0.0.1"))
    port: int = Field(default_factory=lambda: int(os.getenv("QUALITY_API_PORT", "8000")))
    metrics_port: int = Field(
        default_factory=lambda: int(os.getenv("METRICS_EXPORTER_PORT", "9464")),
        description="Port of the Prometheus-format metrics exporter",
    )
