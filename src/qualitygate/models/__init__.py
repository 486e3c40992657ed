"""Models package for the quality gate toolkit."""

from .quality_models import (
    AdvancedQuality,
    BasicQuality,
    BuildMetricsRecord,
    BundleSize,
    CodeQualityMetrics,
    ComplexityMetrics,
    DEFAULT_THRESHOLDS,
    EnforcementLevel,
    EvaluationResult,
    FirstLoadJS,
    PerformanceMetrics,
    QualityMetrics,
    QualityThresholds,
    UnifiedQualityReport,
)
from .log_config_models import (
    ConfigFetchResult,
    ConfigSource,
    ConfigUpdateResult,
    LogLevelName,
    RemoteLogConfig,
    ValidationResult,
)

__all__ = [
    # Quality
    "AdvancedQuality",
    "BasicQuality",
    "BuildMetricsRecord",
    "BundleSize",
    "CodeQualityMetrics",
    "ComplexityMetrics",
    "DEFAULT_THRESHOLDS",
    "EnforcementLevel",
    "EvaluationResult",
    "FirstLoadJS",
    "PerformanceMetrics",
    "QualityMetrics",
    "QualityThresholds",
    "UnifiedQualityReport",
    # Log configuration
    "ConfigFetchResult",
    "ConfigSource",
    "ConfigUpdateResult",
    "LogLevelName",
    "RemoteLogConfig",
    "ValidationResult",
]
