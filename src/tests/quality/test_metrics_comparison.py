"""Unit tests for build metrics comparison against the base branch."""

import json

import pytest

from qualitygate.config.quality_config import QualityGateConfig
from qualitygate.constants import MB
from qualitygate.models.quality_models import (
    BuildMetricsRecord,
    BundleSizeRecord,
    FirstLoadJSReport,
)
from qualitygate.quality.metrics_comparison import MetricsComparison, load_metrics_record
from qualitygate.quality.reporters import format_diff, generate_comparison_report

BASE_SHA = "abc1234def5678"


def write_record(path, **fields):
    record = {"timestamp": "2024-01-01T00:00:00Z", **fields}
    path.write_text(json.dumps(record), encoding="utf-8")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep CI variables from leaking into the comparison."""
    monkeypatch.delenv("GITHUB_BASE_SHA", raising=False)
    monkeypatch.delenv("GITHUB_STEP_SUMMARY", raising=False)
    monkeypatch.delenv("QUALITY_METRICS_DIR", raising=False)


@pytest.fixture
def current():
    return BuildMetricsRecord(
        timestamp="2024-05-02T00:00:00Z",
        build_time=95500,
        test_time=30000,
        bundle_size=BundleSizeRecord(
            total=2 * MB,
            javascript=MB,
            css=MB // 2,
            first_load_js=FirstLoadJSReport(max=120.5, max_route="/dashboard"),
        ),
    )


@pytest.fixture
def base():
    return BuildMetricsRecord(
        timestamp="2024-05-01T00:00:00Z",
        build_time=90000,
        test_time=30000,
        bundle_size=BundleSizeRecord(total=MB, javascript=MB, css=MB // 2),
    )


@pytest.fixture
def project(tmp_path):
    """Project with current and base build metrics."""
    metrics_dir = tmp_path / "metrics"
    metrics_dir.mkdir()
    write_record(
        metrics_dir / "latest.json",
        buildTime=95500,
        testTime=30000,
        bundleSize={"total": 2 * MB, "javascript": MB, "css": 1000},
    )
    write_record(
        metrics_dir / f"base-{BASE_SHA}.json",
        buildTime=100000,
        testTime=30000,
        bundleSize={"total": 3 * MB, "javascript": 2 * MB, "css": 1000},
    )
    return tmp_path


class TestFormatDiff:
    """Test value and change formatting."""

    def test_missing_current(self):
        assert format_diff(None, 100, "time") == "N/A"

    def test_increase_and_decrease(self):
        """Test each value kind with a signed change."""
        assert format_diff(125000, 120000, "time") == "2m 5.0s 📈 +5.0s"
        assert format_diff(2 * MB, 3 * MB, "size") == "2.00 MB 📉 -1.00 MB"
        assert format_diff(82.5, 80.0, "percent") == "82.5% 📈 +2.5%"
        assert format_diff(3, 5, "count") == "3 📉 -2"
        assert format_diff(130.0, 120.0, "kb") == "130.0 KB 📈 +10.0 KB"

    def test_no_change_shown_without_base(self):
        assert format_diff(3, None, "count") == "3"

    def test_tiny_change_hidden(self):
        """Test changes within rounding noise are not shown."""
        assert format_diff(50.005, 50.0, "percent") == "50.0%"

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            format_diff(1, None, "lightyears")


class TestComparisonReporter:
    """Test Markdown comparison rendering."""

    def test_rows(self, current, base):
        """Test values, base values, thresholds and statuses."""
        markdown = generate_comparison_report(current, base, "abc1234")

        assert markdown.startswith("## 📊 Build Metrics Report")
        assert "**Compared with:** `abc1234`" in markdown
        assert "| Build Time | 1m 35.5s 📈 +5.5s | 1m 30.0s | ≤ 5m | ✅ |" in markdown
        assert "| Test Time | 0m 30.0s | 0m 30.0s | ≤ 3m | ✅ |" in markdown
        assert "| Bundle Size (Total) | 2.00 MB 📈 +1.00 MB | 1.00 MB | ≤ 100 MB | ✅ |" in markdown
        assert "| ├─ JavaScript | 1.00 MB | 1.00 MB | - | - |" in markdown
        assert "| First Load JS (/dashboard) | 120.5 KB | - | ≤ 250 KB | ✅ |" in markdown
        assert markdown.endswith("*Generated by Build Metrics Report*")

    def test_without_base(self, current):
        """Test a report with no base shows values only."""
        markdown = generate_comparison_report(current)

        assert "_No base metrics available for comparison._" in markdown
        assert "| Build Time | 1m 35.5s | - | ≤ 5m | ✅ |" in markdown

    def test_without_current(self):
        """Test missing current metrics read N/A."""
        markdown = generate_comparison_report(None)

        assert "| Build Time | N/A | - | ≤ 5m | - |" in markdown
        assert "Bundle Size" not in markdown

    def test_status_follows_gate(self):
        """Test slow builds and oversized bundles match the gate's verdict."""
        record = BuildMetricsRecord(
            timestamp="t",
            build_time=400000,
            bundle_size=BundleSizeRecord(total=150 * MB),
        )
        markdown = generate_comparison_report(record)

        assert "| Build Time | 6m 40.0s | - | ≤ 5m | 🔴 |" in markdown
        assert "| Bundle Size (Total) | 150.00 MB | - | ≤ 100 MB | ⚠️ |" in markdown


class TestMetricsComparison:
    """Test loading, saving and publishing the comparison."""

    def test_generate_and_save(self, project, tmp_path, monkeypatch):
        """Test the report is saved and written to the step summary."""
        summary = tmp_path / "summary.md"
        monkeypatch.setenv("GITHUB_STEP_SUMMARY", str(summary))
        comparison = MetricsComparison(QualityGateConfig(project_root=project))

        markdown = comparison.generate_and_save(base_sha=BASE_SHA)

        assert "**Compared with:** `abc1234`" in markdown
        assert "| Build Time | 1m 35.5s 📉 -4.5s | 1m 40.0s | ≤ 5m | ✅ |" in markdown
        assert (project / "metrics" / "report.md").read_text(encoding="utf-8") == markdown
        assert summary.read_text(encoding="utf-8") == markdown

    def test_base_sha_from_environment(self, project, monkeypatch):
        """Test GITHUB_BASE_SHA selects the base record."""
        monkeypatch.setenv("GITHUB_BASE_SHA", BASE_SHA)
        comparison = MetricsComparison(QualityGateConfig(project_root=project))

        assert "1m 40.0s" in comparison.generate()

    def test_missing_base_record(self, project):
        """Test an unknown base commit compares without a base."""
        comparison = MetricsComparison(QualityGateConfig(project_root=project))

        markdown = comparison.generate(base_sha="0000000")

        assert "_No base metrics available for comparison._" in markdown

    def test_explicit_base_file(self, project, tmp_path):
        """Test an explicit base file is labelled by name."""
        base_file = tmp_path / "main-metrics.json"
        write_record(base_file, buildTime=95500)
        comparison = MetricsComparison(QualityGateConfig(project_root=project))

        markdown = comparison.generate(base_sha=BASE_SHA, base_file=base_file)

        assert "**Compared with:** `main-metrics.json`" in markdown
        assert "| Build Time | 1m 35.5s | 1m 35.5s | ≤ 5m | ✅ |" in markdown

    def test_custom_output(self, project, tmp_path):
        """Test the report can be written elsewhere."""
        out = tmp_path / "reports" / "metrics.md"
        comparison = MetricsComparison(QualityGateConfig(project_root=project))

        comparison.generate_and_save(output=out)

        assert out.exists()

    def test_unreadable_record(self, tmp_path):
        """Test a corrupt record is ignored."""
        path = tmp_path / "latest.json"
        path.write_text("{broken")

        assert load_metrics_record(path) is None
        assert load_metrics_record(tmp_path / "missing.json") is None
