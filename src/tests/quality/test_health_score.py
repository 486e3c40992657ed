"""Unit tests for the composite health score."""

from qualitygate.constants import MB
from qualitygate.models.quality_models import (
    AdvancedQuality,
    BasicQuality,
    BundleSize,
    ComplexitySummary,
    DuplicationSummary,
    EslintComplexity,
    MaintainabilitySummary,
    PerformanceMetrics,
    UnifiedQualityReport,
)
from qualitygate.quality.health_score import calculate_health_score


def make_report(performance=None, basic=None, advanced=None):
    return UnifiedQualityReport(
        timestamp="2024-01-01T00:00:00Z",
        performance=performance,
        basic_quality=basic,
        advanced_quality=advanced,
    )


class TestHealthScore:
    """Test penalty subtraction."""

    def test_perfect_project(self):
        """Test a project with no issues scores 100."""
        report = make_report(
            performance=PerformanceMetrics(build_time=60000, bundle_size=BundleSize(total=MB)),
            basic=BasicQuality(coverage=90),
            advanced=AdvancedQuality(
                complexity=ComplexitySummary(average=3, max=8),
                maintainability=MaintainabilitySummary(index=95, rating="A"),
                duplication=DuplicationSummary(percentage=0),
            ),
        )
        assert calculate_health_score(report) == 100

    def test_empty_report(self):
        """Test a report without data scores 100."""
        assert calculate_health_score(make_report()) == 100

    def test_type_error_capped_by_gate(self):
        """Test one type error caps the score at 59."""
        report = make_report(basic=BasicQuality(type_errors=1, coverage=90))
        assert calculate_health_score(report) <= 59

    def test_lint_warnings_penalty(self):
        """Test lint warnings above allowance cost 5 points without failing the gate."""
        report = make_report(basic=BasicQuality(lint_warnings=20))
        assert calculate_health_score(report) == 95

    def test_large_bundle_penalty(self):
        """Test a bundle above target costs 10 points."""
        report = make_report(performance=PerformanceMetrics(bundle_size=BundleSize(total=6 * MB)))
        assert calculate_health_score(report) == 90

    def test_moderate_complexity_penalty(self):
        """Test average complexity between 5 and 10 costs 5 points."""
        report = make_report(
            advanced=AdvancedQuality(complexity=ComplexitySummary(average=7))
        )
        assert calculate_health_score(report) == 95

    def test_maintainability_penalty(self):
        """Test maintainability below target costs half a point per point."""
        report = make_report(
            advanced=AdvancedQuality(
                maintainability=MaintainabilitySummary(index=80, rating="B")
            )
        )
        assert calculate_health_score(report) == 95

    def test_proportional_penalties_capped(self):
        """Test large file, ESLint and duplication penalties are capped."""
        report = make_report(
            advanced=AdvancedQuality(
                large_file_count=100,
                eslint_complexity=EslintComplexity(cognitive_complexity=500),
                duplication=DuplicationSummary(percentage=80),
            )
        )
        assert calculate_health_score(report) == 100 - 10 - 15 - 10

    def test_bounded(self):
        """Test the worst possible report never goes below 0."""
        report = make_report(
            performance=PerformanceMetrics(
                build_time=10**7, test_time=10**7, bundle_size=BundleSize(total=10**10)
            ),
            basic=BasicQuality(type_errors=500, lint_errors=500, lint_warnings=500, coverage=0),
            advanced=AdvancedQuality(
                complexity=ComplexitySummary(average=50, max=99),
                maintainability=MaintainabilitySummary(index=0, rating="F"),
                duplication=DuplicationSummary(percentage=100),
                large_file_count=50,
                eslint_complexity=EslintComplexity(other_issues=200),
            ),
        )
        score = calculate_health_score(report)
        assert 0 <= score <= 59
