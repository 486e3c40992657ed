"""Quality gate rule evaluation.

Pure comparison of a metrics record against thresholds. Threshold breaches
are returned as data, never raised.
"""

from typing import List

from ..constants import MB, complexity_level
from ..models.quality_models import (
    DEFAULT_THRESHOLDS,
    ComplexityMetrics,
    EnforcementLevel,
    EvaluationResult,
    QualityMetrics,
    QualityThresholds,
)

FAIL = "❌"
WARN = "⚠️ "


def _num(value: float) -> str:
    """Render integral floats without a trailing ``.0``."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _seconds(ms: float) -> str:
    return f"{ms / 1000:.1f}s"


def _megabytes(size: float) -> str:
    return f"{size / MB:.2f}MB"


def _complexity_file_list(
    complexity: ComplexityMetrics, thresholds: QualityThresholds
) -> str:
    lines = ["   Files to improve (sorted by complexity):"]
    over_warning = [
        f for f in complexity.files
        if f.complexity > thresholds.complexity.individual_warning
    ][:10]

    if over_warning:
        for f in over_warning:
            icon = complexity_level(f.complexity).icon
            lines.append(f"   {icon} {f.file}: {_num(f.complexity)}")
    else:
        for f in complexity.files[:5]:
            lines.append(f"   - {f.file}: {_num(f.complexity)}")
    return "\n".join(lines)


def _check_complexity(
    complexity: ComplexityMetrics,
    thresholds: QualityThresholds,
    failures: List[str],
    warnings: List[str],
) -> None:
    limits = thresholds.complexity
    flagged = False

    if complexity.average > limits.average_maximum:
        failures.append(
            f"{FAIL} Average complexity: {complexity.average:.1f} "
            f"(maximum: {_num(limits.average_maximum)})"
        )
        flagged = True
    elif complexity.average > limits.average_warning:
        warnings.append(
            f"{WARN} Average complexity: {complexity.average:.1f} "
            f"(warning: {_num(limits.average_warning)})"
        )
        flagged = True

    if complexity.max is not None:
        if complexity.max > limits.individual_maximum:
            failures.append(
                f"{FAIL} Maximum complexity: {_num(complexity.max)} "
                f"(maximum: {_num(limits.individual_maximum)})"
            )
            flagged = True
        elif complexity.max > limits.individual_warning:
            warnings.append(
                f"{WARN} Maximum complexity: {_num(complexity.max)} "
                f"(warning: {_num(limits.individual_warning)})"
            )
            flagged = True

    if flagged and complexity.files:
        warnings.append(_complexity_file_list(complexity, thresholds))


def evaluate_quality_gate(
    metrics: QualityMetrics,
    thresholds: QualityThresholds = DEFAULT_THRESHOLDS,
) -> EvaluationResult:
    """
    Evaluate metrics against gate thresholds.

    PATTERN: Rule-by-rule accumulation, no short-circuit
    CRITICAL: Missing optional metrics are skipped, absence is not failure
    GOTCHA: Lint warnings never fail the gate; bundle size above maximum
        only fails when its enforcement is ``error``

    Args:
        metrics: Collected metrics
        thresholds: Thresholds to check against

    Returns:
        EvaluationResult with failures and warnings
    """
    failures: List[str] = []
    warnings: List[str] = []

    if metrics.type_errors > thresholds.type_errors.maximum:
        failures.append(
            f"{FAIL} TypeScript errors: {metrics.type_errors} "
            f"(maximum: {_num(thresholds.type_errors.maximum)})"
        )

    if metrics.lint_errors > thresholds.lint_errors.maximum:
        failures.append(
            f"{FAIL} ESLint errors: {metrics.lint_errors} "
            f"(maximum: {_num(thresholds.lint_errors.maximum)})"
        )

    if metrics.lint_warnings > thresholds.lint_warnings.maximum:
        warnings.append(
            f"{WARN} ESLint warnings: {metrics.lint_warnings} "
            f"(maximum: {_num(thresholds.lint_warnings.maximum)})"
        )

    if metrics.coverage is not None:
        cov = thresholds.coverage
        if metrics.coverage < cov.minimum:
            failures.append(
                f"{FAIL} Test coverage: {metrics.coverage:.1f}% (minimum: {_num(cov.minimum)}%)"
            )
        elif metrics.coverage < cov.warning:
            warnings.append(
                f"{WARN} Test coverage: {metrics.coverage:.1f}% "
                f"(recommended: {_num(cov.warning)}%)"
            )

    for label, value, limit in (
        ("Build time", metrics.build_time, thresholds.build_time),
        ("Test time", metrics.test_time, thresholds.test_time),
    ):
        if value is None:
            continue
        if value > limit.maximum:
            failures.append(
                f"{FAIL} {label}: {_seconds(value)} (maximum: {_seconds(limit.maximum)})"
            )
        elif limit.warning is not None and value > limit.warning:
            warnings.append(
                f"{WARN} {label}: {_seconds(value)} (warning: {_seconds(limit.warning)})"
            )

    if metrics.bundle_size is not None:
        bundle = thresholds.bundle_size
        if metrics.bundle_size > bundle.maximum:
            if bundle.enforcement == EnforcementLevel.ERROR:
                failures.append(
                    f"{FAIL} Total build size: {_megabytes(metrics.bundle_size)} "
                    f"(maximum: {_megabytes(bundle.maximum)})"
                )
            else:
                warnings.append(
                    f"{WARN} Total build size: {_megabytes(metrics.bundle_size)} "
                    f"(reference: {_megabytes(bundle.maximum)})"
                )
        elif bundle.warning is not None and metrics.bundle_size > bundle.warning:
            warnings.append(
                f"{WARN} Total build size: {_megabytes(metrics.bundle_size)} "
                f"(warning: {_megabytes(bundle.warning)})"
            )

    if metrics.first_load_js is not None:
        fl = thresholds.first_load_js
        size = metrics.first_load_js.max
        route = metrics.first_load_js.max_route
        if size > fl.maximum:
            failures.append(
                f"{FAIL} First Load JS: {size:.1f}KB on route {route} "
                f"(maximum: {_num(fl.maximum)}KB)"
            )
        elif size > fl.warning:
            warnings.append(
                f"{WARN} First Load JS: {size:.1f}KB on route {route} "
                f"(warning: {_num(fl.warning)}KB)"
            )

    if metrics.complexity is not None:
        _check_complexity(metrics.complexity, thresholds, failures, warnings)

    return EvaluationResult.from_messages(failures, warnings)
