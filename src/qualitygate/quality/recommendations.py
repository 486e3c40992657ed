"""Actionable recommendations derived from a quality report."""

from typing import List

from .. import constants as C
from ..models.quality_models import (
    DEFAULT_THRESHOLDS,
    QualityThresholds,
    UnifiedQualityReport,
)

EXCELLENT_MESSAGE = "✅ Code quality is excellent! Keep up the good work!"


def generate_recommendations(
    report: UnifiedQualityReport,
    thresholds: QualityThresholds = DEFAULT_THRESHOLDS,
) -> List[str]:
    """
    Generate recommendations in fixed category order.

    Order: errors, coverage, performance, complexity, maintainability,
    duplication. When nothing triggers, a single "excellent" message is
    returned.

    Args:
        report: Unified quality report
        thresholds: Thresholds defining the triggers

    Returns:
        Ordered recommendation strings
    """
    recs: List[str] = []

    basic = report.basic_quality
    if basic is not None:
        if basic.type_errors > thresholds.type_errors.maximum:
            recs.append("🔴 Fix TypeScript errors immediately")
        if basic.lint_errors > thresholds.lint_errors.maximum:
            recs.append("🔴 Resolve ESLint errors")
        if basic.lint_warnings > thresholds.lint_warnings.maximum:
            recs.append("⚠️ Reduce ESLint warnings")
        if basic.coverage is not None and basic.coverage < thresholds.coverage.minimum:
            recs.append(
                f"⚠️ Increase test coverage to at least {thresholds.coverage.minimum:g}%"
            )

    perf = report.performance
    if perf is not None:
        if perf.build_time is not None and perf.build_time > thresholds.build_time.maximum:
            minutes = thresholds.build_time.maximum / C.MS_PER_MINUTE
            recs.append(f"⚠️ Optimize build time (currently > {minutes:g} minutes)")
        if perf.test_time is not None and perf.test_time > thresholds.test_time.maximum:
            minutes = thresholds.test_time.maximum / C.MS_PER_MINUTE
            recs.append(f"⚠️ Speed up the test suite (currently > {minutes:g} minutes)")
        target = thresholds.bundle_size.target
        if perf.bundle_size is not None and target is not None and perf.bundle_size.total > target:
            recs.append(f"⚠️ Reduce bundle size (currently > {target / C.MB:g}MB)")

    advanced = report.advanced_quality
    if advanced is not None:
        if advanced.complexity is not None:
            if advanced.complexity.average > thresholds.complexity.average_maximum:
                recs.append("🟠 Refactor complex functions to improve readability")
            if (
                advanced.complexity.max is not None
                and advanced.complexity.max > thresholds.complexity.individual_maximum
            ):
                recs.append(
                    "🔴 Critical: Some functions are too complex "
                    f"(>{thresholds.complexity.individual_maximum:g})"
                )
        if (
            advanced.maintainability is not None
            and advanced.maintainability.index < thresholds.maintainability.minimum
        ):
            recs.append("🟠 Improve code maintainability")
        if (
            advanced.duplication is not None
            and advanced.duplication.percentage > thresholds.duplication.maximum
        ):
            recs.append("⚠️ Extract duplicated code into shared functions")

    if not recs:
        recs.append(EXCELLENT_MESSAGE)

    return recs
