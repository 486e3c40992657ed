"""Data models for the quality gate system.

This module contains the Pydantic models for gate inputs, thresholds,
evaluation results, unified reports, code quality analysis output and
persisted build metrics. Models read from or written to JSON use camelCase
aliases (``buildTime``, ``bundleSize``...) and also accept field names.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .. import constants as C


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        """Dump to a JSON-ready dict with camelCase keys, dropping unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class EnforcementLevel(str, Enum):
    """How a threshold breach above the maximum is reported."""

    WARNING = "warning"
    ERROR = "error"


class MetricStatus(str, Enum):
    """Display status of a single metric."""

    OK = "ok"
    WARN = "warn"
    ERROR = "error"


# ---------------------------------------------------------------------------
# Gate input
# ---------------------------------------------------------------------------


class FirstLoadJS(CamelModel):
    """Largest First Load JS of any route, in KB."""

    max: float = Field(ge=0, description="Largest First Load JS size (KB)")
    max_route: str = Field(default="", description="Route with the largest First Load JS")


class ComplexityFile(CamelModel):
    """Complexity of a single source file."""

    file: str
    complexity: float


class ComplexityMetrics(CamelModel):
    """Cyclomatic complexity statistics."""

    average: float = Field(default=0.0, ge=0)
    max: Optional[float] = Field(default=None, ge=0)
    high_complexity_count: int = Field(default=0, ge=0)
    files: List[ComplexityFile] = Field(
        default_factory=list,
        description="Files to improve, highest complexity first",
    )


class QualityMetrics(CamelModel):
    """
    Flat metrics record fed to the quality gate.

    Only the type/lint counts are always present; every other measurement
    is optional and skipped by the gate when absent.
    """

    type_errors: int = Field(default=0, ge=0)
    lint_errors: int = Field(default=0, ge=0)
    lint_warnings: int = Field(default=0, ge=0)
    coverage: Optional[float] = Field(default=None, description="Statement coverage %")
    build_time: Optional[float] = Field(default=None, description="Build time (ms)")
    test_time: Optional[float] = Field(default=None, description="Test time (ms)")
    bundle_size: Optional[float] = Field(default=None, description="Total build size (bytes)")
    first_load_js: Optional[FirstLoadJS] = Field(default=None, alias="firstLoadJS")
    complexity: Optional[ComplexityMetrics] = None


# ---------------------------------------------------------------------------
# Thresholds
# ---------------------------------------------------------------------------


class ThresholdModel(CamelModel):
    """Immutable threshold block."""

    model_config = ConfigDict(frozen=True)


class MinimumThreshold(ThresholdModel):
    """Lower bound threshold (values below ``minimum`` fail)."""

    minimum: float
    warning: float


class MaximumThreshold(ThresholdModel):
    """Upper bound threshold (values above ``maximum`` fail)."""

    maximum: float
    warning: Optional[float] = None
    target: Optional[float] = None


class BundleSizeThreshold(MaximumThreshold):
    """Bundle size bounds; warning-only above maximum unless enforced."""

    enforcement: EnforcementLevel = EnforcementLevel.WARNING


class FirstLoadJSThreshold(ThresholdModel):
    excellent: float = C.FIRST_LOAD_JS_EXCELLENT
    good: float = C.FIRST_LOAD_JS_GOOD
    warning: float = C.FIRST_LOAD_JS_WARNING
    maximum: float = C.FIRST_LOAD_JS_MAX


class ComplexityThreshold(ThresholdModel):
    excellent: float = C.COMPLEXITY_EXCELLENT
    average_warning: float = C.COMPLEXITY_AVERAGE_WARNING
    average_maximum: float = C.COMPLEXITY_AVERAGE_MAX
    individual_warning: float = C.COMPLEXITY_INDIVIDUAL_WARNING
    individual_maximum: float = C.COMPLEXITY_INDIVIDUAL_MAX


class MaintainabilityThreshold(ThresholdModel):
    minimum: float = C.MAINTAINABILITY_MIN
    target: float = C.MAINTAINABILITY_TARGET


class DuplicationThreshold(ThresholdModel):
    warning: float = C.DUPLICATION_WARNING
    maximum: float = C.DUPLICATION_MAX


class QualityThresholds(ThresholdModel):
    """
    Complete threshold configuration.

    PATTERN: Every block has production defaults, overrides replace fields
    CRITICAL: Instances are frozen; use model_copy(update=...) to derive
    """

    coverage: MinimumThreshold = Field(
        default_factory=lambda: MinimumThreshold(
            minimum=C.COVERAGE_MIN, warning=C.COVERAGE_WARNING
        )
    )
    type_errors: MaximumThreshold = Field(
        default_factory=lambda: MaximumThreshold(maximum=C.TYPE_ERRORS_MAX)
    )
    lint_errors: MaximumThreshold = Field(
        default_factory=lambda: MaximumThreshold(maximum=C.LINT_ERRORS_MAX)
    )
    lint_warnings: MaximumThreshold = Field(
        default_factory=lambda: MaximumThreshold(maximum=C.LINT_WARNINGS_MAX)
    )
    build_time: MaximumThreshold = Field(
        default_factory=lambda: MaximumThreshold(
            maximum=C.BUILD_TIME_MAX,
            warning=C.BUILD_TIME_WARNING,
            target=C.BUILD_TIME_TARGET,
        )
    )
    test_time: MaximumThreshold = Field(
        default_factory=lambda: MaximumThreshold(
            maximum=C.TEST_TIME_MAX,
            warning=C.TEST_TIME_WARNING,
            target=C.TEST_TIME_TARGET,
        )
    )
    bundle_size: BundleSizeThreshold = Field(
        default_factory=lambda: BundleSizeThreshold(
            maximum=C.BUNDLE_SIZE_MAX,
            warning=C.BUNDLE_SIZE_WARNING,
            target=C.BUNDLE_SIZE_TARGET,
        )
    )
    first_load_js: FirstLoadJSThreshold = Field(
        default_factory=FirstLoadJSThreshold, alias="firstLoadJS"
    )
    complexity: ComplexityThreshold = Field(default_factory=ComplexityThreshold)
    maintainability: MaintainabilityThreshold = Field(
        default_factory=MaintainabilityThreshold
    )
    duplication: DuplicationThreshold = Field(default_factory=DuplicationThreshold)


DEFAULT_THRESHOLDS = QualityThresholds()


# ---------------------------------------------------------------------------
# Gate output
# ---------------------------------------------------------------------------


class EvaluationResult(CamelModel):
    """Outcome of a quality gate evaluation."""

    passed: bool
    failures: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _passed_matches_failures(self) -> "EvaluationResult":
        if self.passed != (len(self.failures) == 0):
            raise ValueError("passed must be true exactly when there are no failures")
        return self

    @classmethod
    def from_messages(
        cls, failures: List[str], warnings: List[str]
    ) -> "EvaluationResult":
        return cls(passed=not failures, failures=failures, warnings=warnings)


# ---------------------------------------------------------------------------
# Unified report
# ---------------------------------------------------------------------------


class BundleSize(CamelModel):
    """Build output size breakdown in bytes."""

    total: float = Field(ge=0)
    javascript: Optional[float] = Field(default=None, ge=0)
    css: Optional[float] = Field(default=None, ge=0)


class PerformanceMetrics(CamelModel):
    build_time: Optional[float] = None
    test_time: Optional[float] = None
    bundle_size: Optional[BundleSize] = None


class BasicQuality(CamelModel):
    type_errors: int = Field(default=0, ge=0)
    lint_errors: int = Field(default=0, ge=0)
    lint_warnings: int = Field(default=0, ge=0)
    coverage: Optional[float] = None


class ComplexitySummary(CamelModel):
    average: float = Field(ge=0)
    max: Optional[float] = Field(default=None, ge=0)


class MaintainabilitySummary(CamelModel):
    index: float
    rating: str = "N/A"


class DuplicationSummary(CamelModel):
    percentage: float = Field(ge=0)


class EslintComplexity(CamelModel):
    """SonarJS rule violation counts."""

    cognitive_complexity: int = Field(default=0, ge=0)
    duplicate_strings: int = Field(default=0, ge=0)
    other_issues: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return self.cognitive_complexity + self.duplicate_strings + self.other_issues


class AdvancedQuality(CamelModel):
    complexity: Optional[ComplexitySummary] = None
    maintainability: Optional[MaintainabilitySummary] = None
    duplication: Optional[DuplicationSummary] = None
    large_file_count: int = Field(default=0, ge=0)
    eslint_complexity: Optional[EslintComplexity] = None


class UnifiedQualityReport(CamelModel):
    """
    Aggregated quality report for a single CI run.

    CRITICAL: Built once from fresh measurements, never mutated afterwards
    """

    timestamp: str
    performance: Optional[PerformanceMetrics] = None
    basic_quality: Optional[BasicQuality] = None
    advanced_quality: Optional[AdvancedQuality] = None
    scores: Dict[str, float] = Field(
        default_factory=dict, description="Normalized 0-100 score per metric"
    )
    weighted_score: Optional[int] = Field(default=None, ge=0, le=100)
    gate: Optional[EvaluationResult] = None
    health_score: int = Field(default=100, ge=0, le=100)
    recommendations: List[str] = Field(default_factory=list)

    def to_gate_metrics(self) -> QualityMetrics:
        """Flatten the report groups into the gate's metrics record."""
        basic = self.basic_quality or BasicQuality()
        perf = self.performance or PerformanceMetrics()
        advanced = self.advanced_quality

        complexity = None
        if advanced is not None and advanced.complexity is not None:
            complexity = ComplexityMetrics(
                average=advanced.complexity.average,
                max=advanced.complexity.max,
            )

        return QualityMetrics(
            type_errors=basic.type_errors,
            lint_errors=basic.lint_errors,
            lint_warnings=basic.lint_warnings,
            coverage=basic.coverage,
            build_time=perf.build_time,
            test_time=perf.test_time,
            bundle_size=perf.bundle_size.total if perf.bundle_size else None,
            complexity=complexity,
        )


# ---------------------------------------------------------------------------
# Code quality analyzer output (metrics/code-quality-latest.json)
# ---------------------------------------------------------------------------


class CodeComplexity(CamelModel):
    high_complexity_files: List[ComplexityFile] = Field(default_factory=list)
    average_complexity: float = 0.0
    max_complexity: float = 0.0


class FileScore(CamelModel):
    file: str
    score: float


class CodeMaintainability(CamelModel):
    index: float
    rating: str
    low_maintainability_files: List[FileScore] = Field(default_factory=list)


class LargeFile(CamelModel):
    file: str
    lines: int


class FileMetrics(CamelModel):
    total_files: int = 0
    avg_lines_per_file: float = 0.0
    max_lines_per_file: int = 0
    large_files: List[LargeFile] = Field(default_factory=list)


class DuplicationReport(CamelModel):
    percentage: float = 0.0
    duplicated_lines: int = 0
    blocks: int = 0


class CodeQualityMetrics(CamelModel):
    """Output of the source code quality analyzer."""

    timestamp: str
    complexity: CodeComplexity
    maintainability: CodeMaintainability
    file_metrics: FileMetrics
    eslint_complexity: Optional[EslintComplexity] = None
    duplication: Optional[DuplicationReport] = None

    def to_advanced_quality(self) -> AdvancedQuality:
        return AdvancedQuality(
            complexity=ComplexitySummary(
                average=self.complexity.average_complexity,
                max=self.complexity.max_complexity,
            ),
            maintainability=MaintainabilitySummary(
                index=self.maintainability.index,
                rating=self.maintainability.rating,
            ),
            duplication=(
                DuplicationSummary(percentage=self.duplication.percentage)
                if self.duplication
                else None
            ),
            large_file_count=len(self.file_metrics.large_files),
            eslint_complexity=self.eslint_complexity,
        )

    def to_complexity_metrics(self, limit: int = 5) -> ComplexityMetrics:
        """Gate complexity record with the worst ``limit`` files listed."""
        files = sorted(
            self.complexity.high_complexity_files,
            key=lambda f: f.complexity,
            reverse=True,
        )
        return ComplexityMetrics(
            average=self.complexity.average_complexity,
            max=self.complexity.max_complexity,
            high_complexity_count=len(files),
            files=files[:limit],
        )


# ---------------------------------------------------------------------------
# Build metrics (metrics/latest.json)
# ---------------------------------------------------------------------------


class RouteSize(CamelModel):
    route: str
    size: str = Field(description="Route size as printed by the bundler, e.g. '5.2 kB'")
    first_load_js: str = Field(description="First Load JS as printed by the bundler", alias="firstLoadJS")


class FirstLoadJSReport(CamelModel):
    max: float = 0.0
    max_route: str = ""
    routes: List[RouteSize] = Field(default_factory=list)


class BundleSizeRecord(BundleSize):
    first_load_js: Optional[FirstLoadJSReport] = Field(default=None, alias="firstLoadJS")


class BuildMetricsRecord(CamelModel):
    """Persisted build/test/bundle measurement."""

    timestamp: str
    build_time: Optional[float] = None
    test_time: Optional[float] = None
    bundle_size: Optional[BundleSizeRecord] = None

    def to_performance(self) -> PerformanceMetrics:
        bundle = None
        if self.bundle_size is not None:
            bundle = BundleSize(
                total=self.bundle_size.total,
                javascript=self.bundle_size.javascript,
                css=self.bundle_size.css,
            )
        return PerformanceMetrics(
            build_time=self.build_time,
            test_time=self.test_time,
            bundle_size=bundle,
        )

    def first_load_js_summary(self) -> Optional[FirstLoadJS]:
        if self.bundle_size is None or self.bundle_size.first_load_js is None:
            return None
        fl = self.bundle_size.first_load_js
        if not fl.max:
            return None
        return FirstLoadJS(max=fl.max, max_route=fl.max_route)
