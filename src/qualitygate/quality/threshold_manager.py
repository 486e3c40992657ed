"""Threshold manager for configurable quality gates.

PATTERN: Configuration management with YAML/JSON support
CRITICAL: Support per-project overrides with precedence rules
GOTCHA: Overrides are validated against the threshold schema before use
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError
from pydantic.alias_generators import to_snake

from ..models.quality_models import DEFAULT_THRESHOLDS, QualityThresholds

logger = logging.getLogger(__name__)


def _normalize_keys(data: Any) -> Any:
    """Convert camelCase mapping keys to snake_case, recursively."""
    if isinstance(data, dict):
        return {to_snake(str(k)): _normalize_keys(v) for k, v in data.items()}
    return data


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ThresholdManager:
    """
    Manages quality thresholds with hierarchical overrides.

    PATTERN: Configuration loading with project override support
    CRITICAL: Precedence: project > global > built-in defaults
    GOTCHA: A broken config file is logged and ignored, defaults stay active

    Configuration layout (YAML or JSON, camelCase or snake_case keys)::

        global:
          coverage: {minimum: 70, warning: 80}
          bundleSize: {enforcement: error}
        projects:
          web:
            thresholds:
              buildTime: {maximum: 200000}
    """

    def __init__(
        self,
        config_path: Optional[Union[str, Path]] = None,
        defaults: Optional[QualityThresholds] = None,
    ):
        """
        Initialize threshold manager.

        Args:
            config_path: Path to configuration file (YAML or JSON)
            defaults: Base thresholds; DEFAULT_THRESHOLDS when omitted
        """
        self.logger = logger
        self.config_path = Path(config_path) if config_path else None
        self.defaults = defaults or DEFAULT_THRESHOLDS

        self.global_overrides: Dict[str, Any] = {}
        self.project_overrides: Dict[str, Dict[str, Any]] = {}

        if self.config_path:
            self.load_configuration(self.config_path)

    def load_configuration(self, config_path: Union[str, Path]) -> bool:
        """
        Load threshold overrides from a configuration file.

        Args:
            config_path: Path to configuration file

        Returns:
            True when the file was loaded and validated
        """
        config_path = Path(config_path)

        if not config_path.exists():
            self.logger.warning(f"Config file not found: {config_path}")
            return False

        try:
            if config_path.suffix in [".yaml", ".yml"]:
                with open(config_path, "r", encoding="utf-8") as f:
                    config = yaml.safe_load(f) or {}
            elif config_path.suffix == ".json":
                with open(config_path, "r", encoding="utf-8") as f:
                    config = json.load(f)
            else:
                raise ValueError(f"Unsupported config format: {config_path.suffix}")

            if not isinstance(config, dict):
                raise ValueError("Configuration root must be a mapping")

            self._parse_configuration(config)
            self.logger.info(f"Loaded thresholds from {config_path}")
            return True

        except (OSError, ValueError, yaml.YAMLError, ValidationError) as e:
            self.logger.error(f"Failed to load configuration from {config_path}: {e}")
            self.global_overrides = {}
            self.project_overrides = {}
            return False

    def _parse_configuration(self, config: Dict[str, Any]) -> None:
        """
        Parse and validate the configuration structure.

        Raises:
            ValidationError: If any override level produces invalid thresholds
        """
        global_section = config.get("global", config.get("thresholds", {})) or {}
        global_overrides = _normalize_keys(global_section)
        self._build(global_overrides)

        project_overrides: Dict[str, Dict[str, Any]] = {}
        for name, project_config in (config.get("projects") or {}).items():
            overrides = _normalize_keys((project_config or {}).get("thresholds", {}))
            self._build(_deep_merge(global_overrides, overrides))
            project_overrides[name] = overrides

        self.global_overrides = global_overrides
        self.project_overrides = project_overrides

    def _build(self, overrides: Dict[str, Any]) -> QualityThresholds:
        base = self.defaults.model_dump()
        return QualityThresholds.model_validate(_deep_merge(base, overrides))

    def get_thresholds(self, project: Optional[str] = None) -> QualityThresholds:
        """
        Resolve thresholds with override precedence.

        Args:
            project: Optional project name for project-specific overrides

        Returns:
            Effective QualityThresholds
        """
        overrides = self.global_overrides
        if project and project in self.project_overrides:
            overrides = _deep_merge(overrides, self.project_overrides[project])
        elif project:
            self.logger.debug(f"No overrides for project {project}, using global")
        return self._build(overrides)

    def add_override(
        self,
        section: str,
        values: Dict[str, Any],
        project: Optional[str] = None,
    ) -> None:
        """
        Add or update an override at runtime.

        GOTCHA: Runtime changes are not persisted to config

        Args:
            section: Threshold block name, e.g. ``coverage`` or ``bundleSize``
            values: Fields to override within the block
            project: Optional project name

        Raises:
            ValidationError: If the override produces invalid thresholds
        """
        patch = _normalize_keys({section: values})
        if project:
            current = self.project_overrides.get(project, {})
            updated = _deep_merge(current, patch)
            self._build(_deep_merge(self.global_overrides, updated))
            self.project_overrides[project] = updated
        else:
            updated = _deep_merge(self.global_overrides, patch)
            self._build(updated)
            self.global_overrides = updated

        self.logger.info(f"Added override: {section} (level: {'project' if project else 'global'})")

    def export_configuration(self, format: str = "yaml", project: Optional[str] = None) -> str:
        """
        Export effective thresholds.

        Args:
            format: Output format ('yaml' or 'json')
            project: Optional project whose overrides are applied

        Returns:
            Serialized configuration string
        """
        config = {
            "global": self.get_thresholds(project).model_dump(mode="json", by_alias=True)
        }

        if format == "json":
            return json.dumps(config, indent=2)
        if format in ("yaml", "yml"):
            return yaml.safe_dump(config, sort_keys=False)
        raise ValueError(f"Unsupported export format: {format}")
