"""Unit tests for unified report assembly and persistence."""

import json
from unittest.mock import AsyncMock

import pytest

from qualitygate.config.quality_config import QualityGateConfig
from qualitygate.constants import MB
from qualitygate.models.quality_models import (
    AdvancedQuality,
    BasicQuality,
    BundleSize,
    ComplexitySummary,
    PerformanceMetrics,
)
from qualitygate.quality.analyzers.basic_collectors import LintCounts
from qualitygate.quality.recommendations import EXCELLENT_MESSAGE
from qualitygate.quality.report_generator import ReportGenerator, create_unified_report


@pytest.fixture
def project(tmp_path):
    """Project with persisted build and code quality metrics."""
    metrics_dir = tmp_path / "metrics"
    metrics_dir.mkdir()
    (metrics_dir / "latest.json").write_text(
        json.dumps(
            {
                "timestamp": "2024-01-01T00:00:00Z",
                "buildTime": 100000,
                "testTime": 40000,
                "bundleSize": {"total": 3 * MB, "javascript": 2 * MB, "css": 1000},
            }
        )
    )
    (metrics_dir / "code-quality-latest.json").write_text(
        json.dumps(
            {
                "timestamp": "2024-01-01T00:00:00Z",
                "complexity": {
                    "highComplexityFiles": [],
                    "averageComplexity": 3.2,
                    "maxComplexity": 9,
                },
                "maintainability": {"index": 96, "rating": "A"},
                "fileMetrics": {"totalFiles": 12},
                "duplication": {"percentage": 0.5},
            }
        )
    )
    coverage = tmp_path / "coverage"
    coverage.mkdir()
    (coverage / "coverage-summary.json").write_text(
        json.dumps({"total": {"statements": {"pct": 91.0}}})
    )
    return tmp_path


class TestCreateUnifiedReport:
    """Test pure report derivation."""

    def test_derived_fields(self):
        """Test scores, gate, health and recommendations are derived."""
        report = create_unified_report(
            performance=PerformanceMetrics(build_time=120000, bundle_size=BundleSize(total=MB)),
            basic_quality=BasicQuality(coverage=90),
            advanced_quality=AdvancedQuality(complexity=ComplexitySummary(average=3, max=5)),
            timestamp="2024-01-01T00:00:00Z",
        )

        assert report.timestamp == "2024-01-01T00:00:00Z"
        assert report.scores["build_time"] == 100
        assert report.gate.passed is True
        assert report.health_score == 100
        assert report.weighted_score == 100
        assert report.recommendations == [EXCELLENT_MESSAGE]

    def test_failing_gate_caps_health(self):
        """Test a failing gate is reflected in health and recommendations."""
        report = create_unified_report(basic_quality=BasicQuality(type_errors=1))

        assert report.gate.passed is False
        assert report.health_score <= 59
        assert report.recommendations[0] == "🔴 Fix TypeScript errors immediately"

    def test_timestamp_defaults_to_now(self):
        """Test a timestamp is generated when omitted."""
        assert create_unified_report().timestamp


class TestReportGenerator:
    """Test collection, assembly and saving."""

    @pytest.mark.asyncio
    async def test_generate_and_save(self, project, monkeypatch):
        """Test a report built from persisted metrics and collectors."""
        monkeypatch.delenv("GITHUB_OUTPUT", raising=False)
        generator = ReportGenerator(QualityGateConfig(project_root=project))
        monkeypatch.setattr(
            "qualitygate.quality.report_generator.TypeCheckCollector.collect",
            AsyncMock(return_value=0),
        )
        monkeypatch.setattr(
            "qualitygate.quality.report_generator.LintCollector.collect",
            AsyncMock(return_value=LintCounts(errors=0, warnings=2)),
        )

        report = await generator.generate_and_save()

        assert report.performance.build_time == 100000
        assert report.basic_quality.coverage == 91.0
        assert report.basic_quality.lint_warnings == 2
        assert report.advanced_quality.maintainability.index == 96
        assert report.gate.passed is True

        json_path = project / "metrics" / "unified-report.json"
        md_path = project / "metrics" / "unified-report.md"
        assert json.loads(json_path.read_text(encoding="utf-8"))["healthScore"] == report.health_score
        assert "Unified Quality Report" in md_path.read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_missing_metrics_files(self, tmp_path, monkeypatch):
        """Test missing persisted metrics leave their groups out."""
        generator = ReportGenerator(QualityGateConfig(project_root=tmp_path))
        monkeypatch.setattr(
            "qualitygate.quality.report_generator.TypeCheckCollector.collect",
            AsyncMock(return_value=None),
        )
        monkeypatch.setattr(
            "qualitygate.quality.report_generator.LintCollector.collect",
            AsyncMock(return_value=None),
        )

        report = await generator.generate()

        assert report.performance is None
        assert report.advanced_quality is None
        assert report.basic_quality.type_errors == 0
        assert report.basic_quality.coverage is None

    def test_corrupt_code_quality_file(self, tmp_path):
        """Test an unreadable code quality file is ignored."""
        metrics_dir = tmp_path / "metrics"
        metrics_dir.mkdir()
        (metrics_dir / "code-quality-latest.json").write_text("{broken")

        generator = ReportGenerator(QualityGateConfig(project_root=tmp_path))
        assert generator.load_advanced_quality() is None

    def test_custom_output_dir(self, tmp_path):
        """Test reports can be written elsewhere."""
        out = tmp_path / "reports"
        generator = ReportGenerator(QualityGateConfig(project_root=tmp_path), output_dir=str(out))
        paths = generator.save(create_unified_report(timestamp="t"))

        assert paths["json"] == out / "unified-report.json"
        assert paths["markdown"].exists()
