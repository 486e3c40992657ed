"""Metric collectors and analyzers.

- Basic collectors: type errors, lint issues, coverage, persisted build metrics
- Code quality: complexity, maintainability, duplication, file sizes
- Metrics measurer: build/test timing and bundle sizing
"""

from .basic_collectors import (
    BuildMetricsCollector,
    CoverageCollector,
    LintCollector,
    LintCounts,
    TypeCheckCollector,
)
from .code_quality_analyzer import CodeQualityAnalyzer
from .metrics_measurer import MetricsMeasurer

__all__ = [
    "BuildMetricsCollector",
    "CodeQualityAnalyzer",
    "CoverageCollector",
    "LintCollector",
    "LintCounts",
    "MetricsMeasurer",
    "TypeCheckCollector",
]
