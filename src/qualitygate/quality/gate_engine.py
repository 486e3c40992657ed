"""Quality gate engine orchestrating collection and evaluation.

PATTERN: Sequential collectors, pure evaluation
CRITICAL: A collector failure omits its metric, it never fails the run
GOTCHA: Complexity analysis excludes generated UI components
"""

import logging
from typing import Optional, Tuple

from ..config.quality_config import QualityGateConfig
from ..models.quality_models import (
    DEFAULT_THRESHOLDS,
    EvaluationResult,
    QualityMetrics,
    QualityThresholds,
)
from .analyzers.basic_collectors import (
    BuildMetricsCollector,
    CoverageCollector,
    LintCollector,
    TypeCheckCollector,
)
from .analyzers.code_quality_analyzer import CodeQualityAnalyzer
from .gate_evaluator import evaluate_quality_gate

logger = logging.getLogger(__name__)


class QualityGateEngine:
    """
    Collects metrics from the project and evaluates the quality gate.

    PATTERN: Each collector is independent and returns None on failure
    CRITICAL: Missing metrics are skipped by the evaluator
    """

    def __init__(
        self,
        config: Optional[QualityGateConfig] = None,
        thresholds: QualityThresholds = DEFAULT_THRESHOLDS,
        check_complexity: bool = True,
    ):
        """
        Initialize quality gate engine.

        Args:
            config: Project paths and tool commands
            thresholds: Gate thresholds
            check_complexity: Run source complexity analysis
        """
        self.config = config or QualityGateConfig()
        self.thresholds = thresholds
        self.check_complexity = check_complexity
        self.logger = logger

        self.type_check = TypeCheckCollector(self.config)
        self.lint = LintCollector(self.config)
        self.coverage = CoverageCollector(self.config)
        self.build_metrics = BuildMetricsCollector(self.config)
        self.code_quality = CodeQualityAnalyzer(self.config, include_ui_components=False)

    async def collect_metrics(self) -> QualityMetrics:
        """
        Run all collectors and assemble the gate input.

        Returns:
            QualityMetrics with every value that could be measured
        """
        type_errors = await self.type_check.collect()
        lint = await self.lint.collect()
        coverage = await self.coverage.collect()
        build = await self.build_metrics.collect()

        complexity = None
        if self.check_complexity:
            self.logger.info("Checking code complexity (excluding UI components)...")
            analysis = await self.code_quality.collect()
            if analysis is None:
                self.logger.warning("Skipping complexity check due to analysis failure")
            else:
                complexity = analysis.to_complexity_metrics()

        if type_errors is None:
            self.logger.warning("Type check unavailable, counting 0 type errors")
        if lint is None:
            self.logger.warning("Lint unavailable, counting 0 lint issues")

        return QualityMetrics(
            type_errors=type_errors or 0,
            lint_errors=lint.errors if lint else 0,
            lint_warnings=lint.warnings if lint else 0,
            coverage=coverage,
            build_time=build.build_time if build else None,
            test_time=build.test_time if build else None,
            bundle_size=build.bundle_size.total if build and build.bundle_size else None,
            first_load_js=build.first_load_js_summary() if build else None,
            complexity=complexity,
        )

    def evaluate(self, metrics: QualityMetrics) -> EvaluationResult:
        return evaluate_quality_gate(metrics, self.thresholds)

    async def run(self) -> Tuple[QualityMetrics, EvaluationResult]:
        """
        Collect metrics and evaluate the gate.

        Returns:
            Tuple of (metrics, evaluation result)
        """
        metrics = await self.collect_metrics()
        result = self.evaluate(metrics)

        self.logger.info(
            f"Quality gate {'passed' if result.passed else 'failed'}: "
            f"{len(result.failures)} failures, {len(result.warnings)} warnings"
        )
        return metrics, result
