"""Composite health score calculation."""

import logging

from .. import constants as C
from ..models.quality_models import (
    DEFAULT_THRESHOLDS,
    QualityThresholds,
    UnifiedQualityReport,
)
from .gate_evaluator import evaluate_quality_gate

logger = logging.getLogger(__name__)


def calculate_health_score(
    report: UnifiedQualityReport,
    thresholds: QualityThresholds = DEFAULT_THRESHOLDS,
) -> int:
    """
    Calculate a 0-100 health score by penalty subtraction.

    PATTERN: Start at 100, subtract fixed and capped proportional penalties
    CRITICAL: A failing quality gate caps the score below the "good" band

    Args:
        report: Unified quality report
        thresholds: Thresholds used for penalties and the gate

    Returns:
        Integer score in [0, 100]
    """
    score = 100.0

    basic = report.basic_quality
    if basic is not None:
        if basic.type_errors > thresholds.type_errors.maximum:
            score -= C.PENALTY_TYPE_ERRORS
        if basic.lint_errors > thresholds.lint_errors.maximum:
            score -= C.PENALTY_LINT_ERRORS
        if basic.lint_warnings > thresholds.lint_warnings.maximum:
            score -= C.PENALTY_LINT_WARNINGS
        if basic.coverage is not None and basic.coverage < thresholds.coverage.minimum:
            score -= C.PENALTY_LOW_COVERAGE

    perf = report.performance
    if perf is not None:
        if perf.build_time is not None and perf.build_time > thresholds.build_time.maximum:
            score -= C.PENALTY_SLOW_BUILD
        bundle_target = thresholds.bundle_size.target
        if (
            perf.bundle_size is not None
            and bundle_target is not None
            and perf.bundle_size.total > bundle_target
        ):
            score -= C.PENALTY_LARGE_BUNDLE

    advanced = report.advanced_quality
    if advanced is not None:
        if advanced.complexity is not None:
            if advanced.complexity.average > C.COMPLEXITY_GOOD:
                score -= C.PENALTY_HIGH_COMPLEXITY
            elif advanced.complexity.average > C.COMPLEXITY_EXCELLENT:
                score -= C.PENALTY_MODERATE_COMPLEXITY

        if advanced.maintainability is not None:
            missing = max(0.0, thresholds.maintainability.target - advanced.maintainability.index)
            score -= min(
                C.PENALTY_MAINTAINABILITY_CAP,
                missing * C.PENALTY_PER_MAINTAINABILITY_POINT,
            )

        score -= min(
            C.PENALTY_LARGE_FILES_CAP,
            advanced.large_file_count * C.PENALTY_PER_LARGE_FILE,
        )

        if advanced.eslint_complexity is not None:
            score -= min(
                C.PENALTY_ESLINT_ISSUES_CAP,
                advanced.eslint_complexity.total * C.PENALTY_PER_ESLINT_ISSUE,
            )

        if advanced.duplication is not None:
            score -= min(
                C.PENALTY_DUPLICATION_CAP,
                max(0.0, advanced.duplication.percentage) * C.PENALTY_PER_DUPLICATION_PERCENT,
            )

    gate = evaluate_quality_gate(report.to_gate_metrics(), thresholds)
    if not gate.passed:
        logger.debug(f"Quality gate failed, capping health score at {C.QUALITY_GATE_FAILURE_CAP}")
        score = min(score, C.QUALITY_GATE_FAILURE_CAP)

    return int(round(max(0.0, min(100.0, score))))
