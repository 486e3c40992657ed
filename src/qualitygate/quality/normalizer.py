"""Score normalization for heterogeneous quality metrics.

Every present metric is mapped onto a 0-100 scale (higher is better).
Missing measurements are omitted from the result, never scored.
"""

import logging
import math
from typing import Dict, Optional

from ..constants import (
    LINT_ERROR_LOG_DECAY,
    LINT_WARNING_PENALTY,
    QUALITY_SCORE_WEIGHTS,
    TS_ERROR_LOG_DECAY,
)
from ..models.quality_models import (
    DEFAULT_THRESHOLDS,
    QualityThresholds,
    UnifiedQualityReport,
)

logger = logging.getLogger(__name__)


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def decreasing_score(value: float, best: float, worst: float) -> float:
    """
    Linear score that is 100 at ``best`` and 0 at ``worst`` (lower is better).

    Args:
        value: Measured value
        best: Value scoring 100
        worst: Value scoring 0

    Returns:
        Score clamped to [0, 100]
    """
    if worst <= best:
        return 100.0 if value <= best else 0.0
    return clamp(100.0 * (worst - value) / (worst - best))


def increasing_score(value: float, worst: float, best: float) -> float:
    """Linear score that is 0 at ``worst`` and 100 at ``best`` (higher is better)."""
    if best <= worst:
        return 100.0 if value >= best else 0.0
    return clamp(100.0 * (value - worst) / (best - worst))


def log_decay_score(count: float, decay: float) -> float:
    """100 for zero occurrences, decaying logarithmically with the count."""
    return clamp(100.0 - decay * math.log10(1 + max(0.0, count)))


def normalize_scores(
    report: UnifiedQualityReport,
    thresholds: QualityThresholds = DEFAULT_THRESHOLDS,
) -> Dict[str, float]:
    """
    Map every measured metric of a report onto a 0-100 score.

    PATTERN: Independent per-metric normalization
    CRITICAL: Absent metrics are left out of the map
    GOTCHA: Out-of-domain inputs (negative, far above maximum) are clamped

    Args:
        report: Unified quality report
        thresholds: Thresholds defining targets and maxima

    Returns:
        Mapping of metric name to score
    """
    scores: Dict[str, float] = {}

    perf = report.performance
    if perf is not None:
        if perf.build_time is not None:
            t = thresholds.build_time
            scores["build_time"] = decreasing_score(perf.build_time, t.target or 0, t.maximum)
        if perf.test_time is not None:
            t = thresholds.test_time
            scores["test_time"] = decreasing_score(perf.test_time, t.target or 0, t.maximum)
        if perf.bundle_size is not None:
            t = thresholds.bundle_size
            scores["bundle_size"] = decreasing_score(
                perf.bundle_size.total, t.target or 0, t.maximum
            )

    basic = report.basic_quality
    if basic is not None:
        if basic.coverage is not None:
            cov = thresholds.coverage
            scores["coverage"] = increasing_score(basic.coverage, cov.minimum, cov.warning)
        scores["type_errors"] = log_decay_score(basic.type_errors, TS_ERROR_LOG_DECAY)
        scores["lint_errors"] = log_decay_score(basic.lint_errors, LINT_ERROR_LOG_DECAY)
        excess = max(0, basic.lint_warnings - thresholds.lint_warnings.maximum)
        scores["lint_warnings"] = clamp(100.0 - LINT_WARNING_PENALTY * excess)

    advanced = report.advanced_quality
    if advanced is not None:
        cx = thresholds.complexity
        if advanced.complexity is not None:
            scores["complexity_average"] = decreasing_score(
                advanced.complexity.average, cx.excellent, cx.average_maximum
            )
            if advanced.complexity.max is not None:
                scores["complexity_max"] = decreasing_score(
                    advanced.complexity.max, cx.excellent, cx.individual_maximum
                )
        if advanced.maintainability is not None:
            scores["maintainability"] = clamp(advanced.maintainability.index)
        if advanced.duplication is not None:
            scores["duplication"] = decreasing_score(
                advanced.duplication.percentage, 0.0, thresholds.duplication.maximum
            )

    return {name: round(score, 2) for name, score in scores.items()}


def weighted_score(scores: Dict[str, float]) -> Optional[int]:
    """
    Weighted mean of normalized scores over the metrics that are present.

    When maintainability is unavailable its weight is carried by the
    average complexity score.

    Returns:
        Integer score in [0, 100], or None if no weighted metric is present
    """
    weights = dict(QUALITY_SCORE_WEIGHTS)
    if "maintainability" not in scores:
        weights["complexity_average"] += weights.pop("maintainability")

    present = {name: w for name, w in weights.items() if name in scores}
    total_weight = sum(present.values())
    if total_weight <= 0:
        logger.debug("No weighted metrics present")
        return None

    total = sum(scores[name] * w for name, w in present.items())
    return int(round(clamp(total / total_weight)))
