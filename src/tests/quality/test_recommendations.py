"""Unit tests for recommendation generation."""

from qualitygate.constants import MB
from qualitygate.models.quality_models import (
    AdvancedQuality,
    BasicQuality,
    BundleSize,
    ComplexitySummary,
    DuplicationSummary,
    MaintainabilitySummary,
    PerformanceMetrics,
    UnifiedQualityReport,
)
from qualitygate.quality.recommendations import EXCELLENT_MESSAGE, generate_recommendations


class TestRecommendations:
    """Test recommendation triggers and ordering."""

    def test_excellent_when_nothing_triggers(self):
        """Test a clean report gets the single excellent message."""
        report = UnifiedQualityReport(
            timestamp="2024-01-01T00:00:00Z",
            basic_quality=BasicQuality(coverage=90),
        )
        assert generate_recommendations(report) == [EXCELLENT_MESSAGE]

    def test_empty_report_is_excellent(self):
        """Test a report with no data gets the excellent message."""
        report = UnifiedQualityReport(timestamp="2024-01-01T00:00:00Z")
        assert generate_recommendations(report) == [EXCELLENT_MESSAGE]

    def test_all_categories_in_order(self):
        """Test every trigger fires in fixed category order."""
        report = UnifiedQualityReport(
            timestamp="2024-01-01T00:00:00Z",
            performance=PerformanceMetrics(
                build_time=400000,
                test_time=200000,
                bundle_size=BundleSize(total=20 * MB),
            ),
            basic_quality=BasicQuality(
                type_errors=2, lint_errors=3, lint_warnings=30, coverage=40
            ),
            advanced_quality=AdvancedQuality(
                complexity=ComplexitySummary(average=14, max=30),
                maintainability=MaintainabilitySummary(index=50, rating="F"),
                duplication=DuplicationSummary(percentage=15),
            ),
        )
        recs = generate_recommendations(report)

        assert len(recs) == 11
        assert "TypeScript" in recs[0]
        assert "ESLint errors" in recs[1]
        assert "ESLint warnings" in recs[2]
        assert "at least 60%" in recs[3]
        assert "currently > 5 minutes" in recs[4]
        assert "test suite" in recs[5]
        assert "currently > 5MB" in recs[6]
        assert recs[7].startswith("🟠 Refactor complex functions")
        assert recs[8] == "🔴 Critical: Some functions are too complex (>20)"
        assert "maintainability" in recs[9]
        assert "duplicated code" in recs[10]
        assert EXCELLENT_MESSAGE not in recs

    def test_only_coverage(self):
        """Test a single trigger yields a single recommendation."""
        report = UnifiedQualityReport(
            timestamp="2024-01-01T00:00:00Z",
            basic_quality=BasicQuality(coverage=10),
        )
        recs = generate_recommendations(report)
        assert recs == ["⚠️ Increase test coverage to at least 60%"]
