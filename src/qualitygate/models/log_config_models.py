"""Models for the remote log-level configuration."""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt


class LogLevelName(str, Enum):
    """Log level names accepted by the remote configuration."""

    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"


class RemoteLogConfig(BaseModel):
    """
    Runtime log configuration stored in the key-value backend.

    CRITICAL: ``version`` increases by one on every save or merge
    """

    model_config = ConfigDict(use_enum_values=True, extra="forbid")

    global_level: LogLevelName = Field(description="Default level for all loggers")
    service_levels: Dict[str, LogLevelName] = Field(
        default_factory=dict, description="Per-logger level overrides"
    )
    rate_limits: Dict[str, NonNegativeInt] = Field(
        default_factory=dict, description="Per-level log rate limits (per minute)"
    )
    last_updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: int = Field(default=1, ge=1)
    enabled: bool = True


class ValidationResult(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)


class ConfigSource(str, Enum):
    REMOTE = "remote"
    CACHE = "cache"
    DEFAULT = "default"


class ConfigFetchResult(BaseModel):
    """Result of reading the configuration."""

    model_config = ConfigDict(use_enum_values=True)

    config: Optional[RemoteLogConfig] = None
    source: ConfigSource = ConfigSource.REMOTE
    cached: bool = False
    error: Optional[str] = None


class ConfigUpdateResult(BaseModel):
    """Result of writing the configuration."""

    success: bool
    config: Optional[RemoteLogConfig] = None
    previous_version: Optional[int] = None
    error: Optional[str] = None
    errors: List[str] = Field(default_factory=list)
