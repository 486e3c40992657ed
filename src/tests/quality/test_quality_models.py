"""Unit tests for quality data models."""

import pytest
from pydantic import ValidationError

from qualitygate.constants import MB, complexity_level, score_rating
from qualitygate.models.quality_models import (
    AdvancedQuality,
    BasicQuality,
    BuildMetricsRecord,
    CodeQualityMetrics,
    ComplexitySummary,
    QualityMetrics,
    QualityThresholds,
    UnifiedQualityReport,
)


@pytest.fixture
def code_quality_payload():
    """Analyzer output as written to code-quality-latest.json."""
    return {
        "timestamp": "2024-01-01T00:00:00Z",
        "complexity": {
            "highComplexityFiles": [
                {"file": "src/a.ts", "complexity": 12},
                {"file": "src/b.ts", "complexity": 30},
                {"file": "src/c.ts", "complexity": 16},
            ],
            "averageComplexity": 6.5,
            "maxComplexity": 30,
        },
        "maintainability": {"index": 74.2, "rating": "C", "lowMaintainabilityFiles": []},
        "fileMetrics": {
            "totalFiles": 40,
            "avgLinesPerFile": 120.5,
            "maxLinesPerFile": 450,
            "largeFiles": [{"file": "src/big.ts", "lines": 450}],
        },
        "eslintComplexity": {"cognitiveComplexity": 2, "duplicateStrings": 1, "otherIssues": 0},
        "duplication": {"percentage": 4.2, "duplicatedLines": 60, "blocks": 5},
    }


class TestQualityMetrics:
    """Test gate input validation."""

    def test_defaults(self):
        """Test counts default to zero and optionals to None."""
        metrics = QualityMetrics()
        assert metrics.type_errors == 0
        assert metrics.coverage is None
        assert metrics.complexity is None

    def test_negative_counts_rejected(self):
        """Test negative error counts are invalid."""
        with pytest.raises(ValidationError):
            QualityMetrics(type_errors=-1)

    def test_json_aliases(self):
        """Test camelCase serialization."""
        data = QualityMetrics(lint_warnings=3).to_json_dict()
        assert data == {"typeErrors": 0, "lintErrors": 0, "lintWarnings": 3}


class TestThresholds:
    """Test threshold models."""

    def test_frozen(self):
        """Test thresholds cannot be mutated."""
        thresholds = QualityThresholds()
        with pytest.raises(ValidationError):
            thresholds.coverage.minimum = 10

    def test_defaults(self):
        """Test default values."""
        thresholds = QualityThresholds()
        assert thresholds.build_time.maximum == 300000
        assert thresholds.test_time.target == 60000
        assert thresholds.bundle_size.maximum == 100 * MB
        assert thresholds.complexity.individual_maximum == 20


class TestCodeQualityMetrics:
    """Test analyzer output conversions."""

    def test_to_advanced_quality(self, code_quality_payload):
        """Test conversion to the report's advanced group."""
        metrics = CodeQualityMetrics.model_validate(code_quality_payload)
        advanced = metrics.to_advanced_quality()

        assert advanced.complexity.average == 6.5
        assert advanced.complexity.max == 30
        assert advanced.maintainability.rating == "C"
        assert advanced.duplication.percentage == 4.2
        assert advanced.large_file_count == 1
        assert advanced.eslint_complexity.total == 3

    def test_to_complexity_metrics(self, code_quality_payload):
        """Test gate complexity lists worst files first."""
        metrics = CodeQualityMetrics.model_validate(code_quality_payload)
        complexity = metrics.to_complexity_metrics(limit=2)

        assert complexity.high_complexity_count == 3
        assert [f.file for f in complexity.files] == ["src/b.ts", "src/c.ts"]


class TestBuildMetricsRecord:
    """Test persisted build metrics."""

    def test_first_load_summary(self):
        """Test First Load JS summary from a latest.json payload."""
        record = BuildMetricsRecord.model_validate(
            {
                "timestamp": "2024-01-01T00:00:00Z",
                "buildTime": 90000,
                "bundleSize": {
                    "total": 2048,
                    "firstLoadJS": {"max": 120.5, "maxRoute": "/blog", "routes": []},
                },
            }
        )
        summary = record.first_load_js_summary()

        assert summary.max == 120.5
        assert summary.max_route == "/blog"
        assert record.to_performance().bundle_size.total == 2048

    def test_no_first_load(self):
        """Test summary is None without route data."""
        record = BuildMetricsRecord(timestamp="t", build_time=1)
        assert record.first_load_js_summary() is None
        assert record.to_performance().bundle_size is None


class TestUnifiedQualityReport:
    """Test report flattening."""

    def test_to_gate_metrics(self):
        """Test report groups flatten into gate metrics."""
        report = UnifiedQualityReport(
            timestamp="t",
            basic_quality=BasicQuality(type_errors=2, coverage=75),
            advanced_quality=AdvancedQuality(complexity=ComplexitySummary(average=4, max=9)),
        )
        metrics = report.to_gate_metrics()

        assert metrics.type_errors == 2
        assert metrics.coverage == 75
        assert metrics.bundle_size is None
        assert metrics.complexity.max == 9

    def test_health_bounds(self):
        """Test health score must lie in [0, 100]."""
        with pytest.raises(ValidationError):
            UnifiedQualityReport(timestamp="t", health_score=101)


class TestConstants:
    """Test rating helpers."""

    @pytest.mark.parametrize(
        "score,rating",
        [(95, "A"), (90, "A"), (85, "B"), (72, "C"), (60, "D"), (10, "F")],
    )
    def test_score_rating(self, score, rating):
        """Test letter ratings."""
        assert score_rating(score) == rating

    def test_complexity_level(self):
        """Test complexity bands are ordered."""
        assert complexity_level(1).grade == "A"
        assert complexity_level(100).grade == "F"
