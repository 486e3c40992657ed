"""Unified quality report generation.

This module assembles performance, basic and advanced metric groups into a
UnifiedQualityReport and saves it as JSON and Markdown.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

from pydantic import ValidationError

from ..config.quality_config import QualityGateConfig
from ..models.quality_models import (
    DEFAULT_THRESHOLDS,
    AdvancedQuality,
    BasicQuality,
    CodeQualityMetrics,
    PerformanceMetrics,
    QualityThresholds,
    UnifiedQualityReport,
)
from .analyzers.basic_collectors import (
    BuildMetricsCollector,
    CoverageCollector,
    LintCollector,
    TypeCheckCollector,
)
from .gate_evaluator import evaluate_quality_gate
from .github_output import write_outputs
from .health_score import calculate_health_score
from .normalizer import normalize_scores, weighted_score
from .recommendations import generate_recommendations
from .reporters.json_reporter import JsonReporter
from .reporters.markdown_reporter import MarkdownReporter

logger = logging.getLogger(__name__)


def create_unified_report(
    performance: Optional[PerformanceMetrics] = None,
    basic_quality: Optional[BasicQuality] = None,
    advanced_quality: Optional[AdvancedQuality] = None,
    thresholds: QualityThresholds = DEFAULT_THRESHOLDS,
    timestamp: Optional[str] = None,
) -> UnifiedQualityReport:
    """
    Assemble a report and derive scores, gate, health and recommendations.

    Args:
        performance: Build/test/bundle metrics
        basic_quality: Type, lint and coverage metrics
        advanced_quality: Complexity, maintainability and duplication metrics
        thresholds: Thresholds for all derived values
        timestamp: ISO timestamp; current UTC time when omitted

    Returns:
        Fully derived UnifiedQualityReport
    """
    base = UnifiedQualityReport(
        timestamp=timestamp or datetime.now(timezone.utc).isoformat(),
        performance=performance,
        basic_quality=basic_quality,
        advanced_quality=advanced_quality,
    )

    scores = normalize_scores(base, thresholds)
    return base.model_copy(
        update={
            "scores": scores,
            "weighted_score": weighted_score(scores),
            "gate": evaluate_quality_gate(base.to_gate_metrics(), thresholds),
            "health_score": calculate_health_score(base, thresholds),
            "recommendations": generate_recommendations(base, thresholds),
        }
    )


class ReportGenerator:
    """
    Generates and saves unified quality reports.

    PATTERN: Load persisted metrics, run basic collectors, derive, save
    CRITICAL: Missing metric files leave their group out of the report
    GOTCHA: Output directory is created on save
    """

    def __init__(
        self,
        config: Optional[QualityGateConfig] = None,
        thresholds: QualityThresholds = DEFAULT_THRESHOLDS,
        output_dir: Optional[str] = None,
    ):
        """
        Initialize report generator.

        Args:
            config: Project paths and tool commands
            thresholds: Thresholds used for scoring
            output_dir: Where reports are saved (defaults to the metrics dir)
        """
        self.config = config or QualityGateConfig()
        self.thresholds = thresholds
        self.output_dir = Path(output_dir) if output_dir else self.config.metrics_path
        self.json_reporter = JsonReporter(pretty=True)
        self.markdown_reporter = MarkdownReporter(thresholds=thresholds)
        self.logger = logger

    async def load_performance(self) -> Optional[PerformanceMetrics]:
        record = await BuildMetricsCollector(self.config).collect()
        return record.to_performance() if record else None

    def load_advanced_quality(self) -> Optional[AdvancedQuality]:
        """Read ``code-quality-latest.json`` if present."""
        path = self.config.code_quality_file
        if not path.exists():
            self.logger.info(f"No code quality metrics at {path}")
            return None

        try:
            metrics = CodeQualityMetrics.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            self.logger.warning(f"Ignoring unreadable code quality metrics {path}: {e}")
            return None
        return metrics.to_advanced_quality()

    async def collect_basic_quality(self) -> BasicQuality:
        """Run type check, lint and coverage collectors."""
        type_errors = await TypeCheckCollector(self.config).collect()
        lint = await LintCollector(self.config).collect()
        coverage = await CoverageCollector(self.config).collect()

        return BasicQuality(
            type_errors=type_errors or 0,
            lint_errors=lint.errors if lint else 0,
            lint_warnings=lint.warnings if lint else 0,
            coverage=coverage,
        )

    async def generate(self) -> UnifiedQualityReport:
        """
        Collect all metric groups and build the report.

        Returns:
            UnifiedQualityReport
        """
        self.logger.info("Generating unified quality report...")
        performance = await self.load_performance()
        basic = await self.collect_basic_quality()
        advanced = self.load_advanced_quality()
        return create_unified_report(performance, basic, advanced, self.thresholds)

    def save(self, report: UnifiedQualityReport) -> Dict[str, Path]:
        """
        Save the report as ``unified-report.json`` and ``unified-report.md``.

        Returns:
            Mapping of format to written path
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)

        json_path = self.output_dir / "unified-report.json"
        json_path.write_text(self.json_reporter.generate_report(report), encoding="utf-8")

        md_path = self.output_dir / "unified-report.md"
        md_path.write_text(self.markdown_reporter.generate_report(report), encoding="utf-8")

        self.logger.info(f"Reports saved to {self.output_dir}")
        return {"json": json_path, "markdown": md_path}

    async def generate_and_save(self) -> UnifiedQualityReport:
        """Generate, save and publish the health score output."""
        report = await self.generate()
        self.save(report)
        write_outputs({"health_score": report.health_score})
        return report
