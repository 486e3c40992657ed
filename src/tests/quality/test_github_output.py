"""Unit tests for GitHub Actions output writers."""

from qualitygate.models.quality_models import (
    BuildMetricsRecord,
    BundleSizeRecord,
    EvaluationResult,
    FirstLoadJSReport,
)
from qualitygate.quality.github_output import (
    write_gate_outputs,
    write_metrics_outputs,
    write_outputs,
    write_step_summary,
)


def read_outputs(path):
    return dict(line.split("=", 1) for line in path.read_text().splitlines())


class TestWriteOutputs:
    """Test step output files."""

    def test_no_env_no_write(self):
        """Test nothing is written without GITHUB_OUTPUT."""
        assert write_outputs({"a": 1}, env={}) is False

    def test_appends_values(self, tmp_path):
        """Test values are appended with booleans lowercased."""
        path = tmp_path / "output"
        path.write_text("existing=1\n")
        env = {"GITHUB_OUTPUT": str(path)}

        assert write_outputs({"passed": True, "count": 3, "time": 1500.0}, env) is True
        assert read_outputs(path) == {
            "existing": "1",
            "passed": "true",
            "count": "3",
            "time": "1500",
        }

    def test_step_summary(self, tmp_path):
        """Test the step summary is written."""
        path = tmp_path / "summary.md"
        assert write_step_summary("# Hi", {"GITHUB_STEP_SUMMARY": str(path)}) is True
        assert path.read_text() == "# Hi"


class TestGateOutputs:
    """Test quality gate publishing."""

    def test_gate_outputs(self, tmp_path):
        """Test gate outputs and summary."""
        output = tmp_path / "output"
        summary = tmp_path / "summary.md"
        env = {"GITHUB_OUTPUT": str(output), "GITHUB_STEP_SUMMARY": str(summary)}
        result = EvaluationResult.from_messages(["❌ TypeScript errors: 2 (maximum: 0)"], [])

        write_gate_outputs(result, env)

        assert read_outputs(output) == {
            "quality_gate_passed": "false",
            "quality_gate_failures": "1",
            "quality_gate_warnings": "0",
        }
        assert "Quality gate FAILED" in summary.read_text(encoding="utf-8")


class TestMetricsOutputs:
    """Test build metrics publishing."""

    def test_full_record(self, tmp_path):
        """Test all metrics are published."""
        output = tmp_path / "output"
        record = BuildMetricsRecord(
            timestamp="t",
            build_time=90000,
            test_time=30000,
            bundle_size=BundleSizeRecord(
                total=5000,
                javascript=4000,
                css=500,
                first_load_js=FirstLoadJSReport(max=120.5, max_route="/blog"),
            ),
        )
        write_metrics_outputs(record, {"GITHUB_OUTPUT": str(output)})

        values = read_outputs(output)
        assert values["build_time"] == "90000"
        assert values["bundle_size_js"] == "4000"
        assert values["first_load_js_max"] == "120.5"
        assert values["first_load_js_route"] == "/blog"

    def test_missing_values_default(self, tmp_path):
        """Test missing metrics publish zeros and an unknown route."""
        output = tmp_path / "output"
        write_metrics_outputs(BuildMetricsRecord(timestamp="t"), {"GITHUB_OUTPUT": str(output)})

        values = read_outputs(output)
        assert values["build_time"] == "0"
        assert values["bundle_size_total"] == "0"
        assert values["first_load_js_route"] == "unknown"
