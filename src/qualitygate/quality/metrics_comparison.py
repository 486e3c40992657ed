"""Build metrics comparison against the base branch.

Loads ``metrics/latest.json`` and the base branch record
(``metrics/base-<sha>.json``), renders the comparison and publishes it to
``metrics/report.md`` and the step summary.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from ..config.quality_config import QualityGateConfig
from ..models.quality_models import DEFAULT_THRESHOLDS, BuildMetricsRecord, QualityThresholds
from .github_output import write_step_summary
from .reporters.comparison_reporter import ComparisonReporter

logger = logging.getLogger(__name__)

REPORT_FILE = "report.md"


def load_metrics_record(path: Path) -> Optional[BuildMetricsRecord]:
    """Read a persisted build metrics record; None when missing or unreadable."""
    if not path.exists():
        logger.info(f"No build metrics at {path}")
        return None

    try:
        return BuildMetricsRecord.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as e:
        logger.warning(f"Ignoring unreadable build metrics {path}: {e}")
        return None


class MetricsComparison:
    """
    Compare the latest build metrics with a base branch record.

    GOTCHA: Missing records are not errors. Without a current record every
    row reads N/A, and without a base record no changes are shown.
    """

    def __init__(
        self,
        config: Optional[QualityGateConfig] = None,
        thresholds: QualityThresholds = DEFAULT_THRESHOLDS,
    ):
        self.config = config if config is not None else QualityGateConfig()
        self.reporter = ComparisonReporter(thresholds)
        self.logger = logger

    def base_metrics_file(self, base_sha: str) -> Path:
        return self.config.metrics_path / f"base-{base_sha}.json"

    def resolve_base(
        self, base_sha: Optional[str] = None, base_file: Optional[Path] = None
    ) -> Optional[Path]:
        """
        Pick the base record path.

        Args:
            base_sha: Base commit; defaults to ``GITHUB_BASE_SHA``
            base_file: Explicit base record, takes precedence over the SHA

        Returns:
            Path to the base record, or None when no base is known
        """
        if base_file is not None:
            return Path(base_file)
        base_sha = base_sha or os.getenv("GITHUB_BASE_SHA")
        if not base_sha:
            self.logger.info("No base commit given; comparing without a base")
            return None
        return self.base_metrics_file(base_sha)

    def generate(
        self, base_sha: Optional[str] = None, base_file: Optional[Path] = None
    ) -> str:
        """Load both records and render the comparison."""
        base_sha = base_sha or os.getenv("GITHUB_BASE_SHA")
        current = load_metrics_record(self.config.latest_metrics_file)
        base_path = self.resolve_base(base_sha, base_file)
        base = load_metrics_record(base_path) if base_path is not None else None

        label = None
        if base is not None:
            label = base_path.name if base_file is not None else base_sha[:7]
        return self.reporter.generate_report(current, base, label)

    def save(self, markdown: str, output: Optional[Path] = None) -> Path:
        """Write the report, by default to ``metrics/report.md``."""
        path = Path(output) if output else self.config.metrics_path / REPORT_FILE
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(markdown, encoding="utf-8")
        self.logger.info(f"Metrics report saved to {path}")
        return path

    def generate_and_save(
        self,
        base_sha: Optional[str] = None,
        base_file: Optional[Path] = None,
        output: Optional[Path] = None,
    ) -> str:
        """Generate, save and publish the report to the step summary."""
        markdown = self.generate(base_sha, base_file)
        self.save(markdown, output)
        if write_step_summary(markdown):
            self.logger.info("Metrics report written to the step summary")
        return markdown
