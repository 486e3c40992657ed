"""Quality gate configuration with environment variable loading."""

import os
import shlex
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()


def _split_command(value: str) -> List[str]:
    return shlex.split(value)


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class QualityGateConfig(BaseModel):
    """Paths and tool commands used to collect quality metrics."""

    project_root: Path = Field(
        default_factory=lambda: Path(os.getenv("QUALITY_PROJECT_ROOT", ".")),
        description="Root of the analyzed project",
    )
    source_dir: str = Field(
        default_factory=lambda: os.getenv("QUALITY_SOURCE_DIR", "src"),
        description="Source directory relative to the project root",
    )
    metrics_dir: str = Field(
        default_factory=lambda: os.getenv("QUALITY_METRICS_DIR", "metrics"),
        description="Directory for persisted metrics files",
    )
    coverage_summary: str = Field(
        default_factory=lambda: os.getenv(
            "QUALITY_COVERAGE_SUMMARY", "coverage/coverage-summary.json"
        ),
        description="Coverage summary JSON relative to the project root",
    )
    build_output_dir: str = Field(
        default_factory=lambda: os.getenv("QUALITY_BUILD_OUTPUT_DIR", ".next"),
        description="Bundler output directory sized for bundle metrics",
    )
    ui_components_dir: str = Field(
        default_factory=lambda: os.getenv("QUALITY_UI_COMPONENTS_DIR", "src/components/ui/"),
        description="Generated UI component path excluded from complexity analysis",
    )
    exclude_paths: List[str] = Field(
        default_factory=lambda: _split_list(os.getenv("QUALITY_EXCLUDE_PATHS", "")),
        description="Extra path substrings excluded from analysis",
    )

    # Tool commands
    typecheck_command: List[str] = Field(
        default_factory=lambda: _split_command(os.getenv("QUALITY_TYPECHECK_CMD", "pnpm typecheck")),
    )
    lint_command: List[str] = Field(
        default_factory=lambda: _split_command(
            os.getenv("QUALITY_LINT_CMD", "pnpm lint --format json")
        ),
    )
    eslint_complexity_command: List[str] = Field(
        default_factory=lambda: _split_command(
            os.getenv("QUALITY_ESLINT_COMPLEXITY_CMD", "pnpm exec eslint --format json")
        ),
        description="ESLint invocation whose sonarjs results feed complexity counts",
    )
    eslintcc_command: List[str] = Field(
        default_factory=lambda: _split_command(
            os.getenv("QUALITY_ESLINTCC_CMD", "pnpm exec eslintcc --format json")
        ),
    )
    build_command: List[str] = Field(
        default_factory=lambda: _split_command(os.getenv("QUALITY_BUILD_CMD", "pnpm build")),
    )
    test_command: List[str] = Field(
        default_factory=lambda: _split_command(os.getenv("QUALITY_TEST_CMD", "pnpm test")),
    )

    command_timeout: float = Field(
        default_factory=lambda: float(os.getenv("QUALITY_COMMAND_TIMEOUT", "600")),
        description="Timeout for a single collector command (seconds)",
    )
    thresholds_file: Optional[Path] = Field(
        default_factory=lambda: (
            Path(os.environ["QUALITY_THRESHOLDS_FILE"])
            if os.getenv("QUALITY_THRESHOLDS_FILE")
            else None
        ),
        description="Optional YAML/JSON threshold overrides",
    )
    project_name: Optional[str] = Field(
        default_factory=lambda: os.getenv("QUALITY_PROJECT_NAME"),
        description="Project key for per-project threshold overrides",
    )

    def resolve(self, relative: str) -> Path:
        """Resolve a path relative to the project root."""
        return self.project_root / relative

    @property
    def metrics_path(self) -> Path:
        return self.resolve(self.metrics_dir)

    @property
    def latest_metrics_file(self) -> Path:
        return self.metrics_path / "latest.json"

    @property
    def code_quality_file(self) -> Path:
        return self.metrics_path / "code-quality-latest.json"


def get_quality_config(**overrides) -> QualityGateConfig:
    """
    Get quality gate configuration from the environment.

    Args:
        **overrides: Field values taking precedence over the environment

    Returns:
        QualityGateConfig instance
    """
    return QualityGateConfig(**{k: v for k, v in overrides.items() if v is not None})
