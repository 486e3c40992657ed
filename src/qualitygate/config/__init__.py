"""Configuration package."""

from .admin_config import AdminAuthConfig, ServerConfig, StorageConfig
from .logging_config import setup_logging
from .quality_config import QualityGateConfig, get_quality_config

__all__ = [
    "AdminAuthConfig",
    "QualityGateConfig",
    "ServerConfig",
    "StorageConfig",
    "get_quality_config",
    "setup_logging",
]
