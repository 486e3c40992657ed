"""Unit tests for source code quality analysis."""

import json
from unittest.mock import AsyncMock

import pytest

from qualitygate.config.quality_config import QualityGateConfig
from qualitygate.exceptions import ComplexityAnalysisError
from qualitygate.models.quality_models import (
    CodeComplexity,
    CodeQualityMetrics,
    ComplexityFile,
    EslintComplexity,
    FileMetrics,
)
from qualitygate.quality.analyzers.code_quality_analyzer import (
    CodeQualityAnalyzer,
    SourceFile,
    analyze_duplication,
    calculate_maintainability,
    compute_file_metrics,
    count_sonarjs_issues,
    parse_eslintcc_report,
)
from qualitygate.quality.base import CommandResult

REPEATED_BLOCK = (
    "const total = items.reduce((sum, item) => sum + item.price, 0);\n"
    "const tax = total * TAX_RATE;\n"
    "const shipping = total > FREE_SHIPPING ? 0 : SHIPPING_COST;\n"
    "return { total, tax, shipping };\n"
)


@pytest.fixture
def project(tmp_path):
    """Create a small project tree."""
    src = tmp_path / "src"
    (src / "components" / "ui").mkdir(parents=True)
    (src / "lib").mkdir()
    (src / "node_modules" / "dep").mkdir(parents=True)

    (src / "lib" / "cart.ts").write_text(REPEATED_BLOCK + "export {};\n")
    (src / "lib" / "checkout.ts").write_text(REPEATED_BLOCK + "export const x = 1;\n")
    (src / "components" / "ui" / "button.tsx").write_text("export const Button = () => null;\n")
    (src / "node_modules" / "dep" / "index.js").write_text("module.exports = {};\n")
    (src / "styles.css").write_text("body {}\n")
    return tmp_path


def eslintcc_output(project_root, complexities):
    return json.dumps(
        {
            "files": [
                {
                    "file": str(project_root / path),
                    "messages": [{"rules": {"complexity": {"value": value}}}],
                }
                for path, value in complexities.items()
            ]
        }
    )


class TestPureHelpers:
    """Test pure analysis functions."""

    def test_compute_file_metrics(self):
        """Test line statistics and large file detection."""
        files = [
            SourceFile("src/a.ts", 100, ""),
            SourceFile("src/b.ts", 400, ""),
        ]
        metrics = compute_file_metrics(files)

        assert metrics.total_files == 2
        assert metrics.avg_lines_per_file == 250
        assert metrics.max_lines_per_file == 400
        assert [f.file for f in metrics.large_files] == ["src/b.ts"]

    def test_compute_file_metrics_empty(self):
        """Test no files yields empty metrics."""
        assert compute_file_metrics([]) == FileMetrics()

    def test_count_sonarjs_issues(self):
        """Test SonarJS rule counting."""
        reports = [
            {
                "messages": [
                    {"ruleId": "sonarjs/cognitive-complexity"},
                    {"ruleId": "sonarjs/no-duplicate-string"},
                    {"ruleId": "sonarjs/no-identical-functions"},
                    {"ruleId": "no-unused-vars"},
                    {"ruleId": None},
                ]
            }
        ]
        counts = count_sonarjs_issues(reports)

        assert counts == EslintComplexity(
            cognitive_complexity=1, duplicate_strings=1, other_issues=1
        )
        assert count_sonarjs_issues({"unexpected": True}).total == 0

    def test_parse_eslintcc_report(self, tmp_path):
        """Test per-file max complexity and length fallback."""
        report = {
            "files": [
                {
                    "file": str(tmp_path / "src/a.ts"),
                    "messages": [
                        {"rules": {"complexity": {"value": 4}}},
                        {"rules": {"complexity": {"value": 12}}},
                    ],
                },
                {"file": str(tmp_path / "src/b.ts"), "messages": []},
            ]
        }
        complexity = parse_eslintcc_report(report, {"src/b.ts": 350}, tmp_path)

        assert [f.file for f in complexity.high_complexity_files] == ["src/a.ts", "src/b.ts"]
        assert complexity.high_complexity_files[1].complexity == 3
        assert complexity.max_complexity == 12
        assert complexity.average_complexity == 7.5

    def test_parse_eslintcc_empty(self, tmp_path):
        """Test an empty report yields zero complexity."""
        complexity = parse_eslintcc_report({"files": []}, {}, tmp_path)
        assert complexity.average_complexity == 0
        assert complexity.max_complexity == 0

    def test_maintainability(self):
        """Test the maintainability index deductions."""
        complexity = CodeComplexity(
            high_complexity_files=[ComplexityFile(file="src/a.ts", complexity=18)],
            average_complexity=8,
            max_complexity=18,
        )
        file_metrics = FileMetrics(total_files=1, avg_lines_per_file=250)
        result = calculate_maintainability(
            complexity, file_metrics, EslintComplexity(other_issues=4)
        )

        assert result.index == 100 - 16 - 10 - 4
        assert result.rating == "C"
        assert result.low_maintainability_files[0].score == 10

    def test_maintainability_perfect(self):
        """Test a simple codebase scores 100 with rating A."""
        result = calculate_maintainability(CodeComplexity(average_complexity=2), FileMetrics())
        assert result.index == 100
        assert result.rating == "A"

    def test_duplication_detected(self):
        """Test repeated blocks are detected across files."""
        report = analyze_duplication({"a.ts": REPEATED_BLOCK, "b.ts": REPEATED_BLOCK})

        assert report.blocks >= 1
        assert report.duplicated_lines >= 8
        assert 0 < report.percentage <= 100

    def test_duplication_ignores_short_blocks(self):
        """Test trivial repeated lines are not counted."""
        trivial = "}\n}\n}\n}\n"
        report = analyze_duplication({"a.ts": trivial, "b.ts": trivial})
        assert report.blocks == 0
        assert report.percentage == 0

    def test_duplication_empty(self):
        """Test no sources means no duplication."""
        assert analyze_duplication({}).percentage == 0


class TestCodeQualityAnalyzer:
    """Test the analyzer against a project tree."""

    def test_discover_files(self, project):
        """Test source discovery skips node_modules and non-source files."""
        analyzer = CodeQualityAnalyzer(QualityGateConfig(project_root=project))
        paths = [f.path for f in analyzer.discover_files()]

        assert "src/lib/cart.ts" in paths
        assert "src/components/ui/button.tsx" in paths
        assert not any("node_modules" in p for p in paths)
        assert not any(p.endswith(".css") for p in paths)

    def test_exclude_ui_components(self, project):
        """Test UI components can be excluded."""
        analyzer = CodeQualityAnalyzer(
            QualityGateConfig(project_root=project), include_ui_components=False
        )
        paths = [f.path for f in analyzer.discover_files()]
        assert "src/components/ui/button.tsx" not in paths

    def test_missing_source_dir(self, tmp_path):
        """Test a missing source dir yields no files."""
        analyzer = CodeQualityAnalyzer(QualityGateConfig(project_root=tmp_path))
        assert analyzer.discover_files() == []

    @pytest.mark.asyncio
    async def test_analyze(self, project):
        """Test a full analysis with mocked tools."""
        analyzer = CodeQualityAnalyzer(
            QualityGateConfig(project_root=project), include_ui_components=False
        )
        eslint = CommandResult(command=["eslint"], returncode=1, stdout="[]")
        eslintcc = CommandResult(
            command=["eslintcc"],
            returncode=0,
            stdout=eslintcc_output(project, {"src/lib/cart.ts": 6, "src/lib/checkout.ts": 2}),
        )
        analyzer._run = AsyncMock(side_effect=[eslint, eslintcc])

        metrics = await analyzer.analyze()

        assert metrics.file_metrics.total_files == 2
        assert metrics.complexity.max_complexity == 6
        assert metrics.complexity.average_complexity == 4
        assert metrics.duplication.blocks >= 1
        assert metrics.eslint_complexity.total == 0

    @pytest.mark.asyncio
    async def test_eslintcc_missing_raises(self, project):
        """Test analysis fails loudly without eslintcc."""
        analyzer = CodeQualityAnalyzer(QualityGateConfig(project_root=project))
        analyzer._run = AsyncMock(side_effect=[None, None])

        with pytest.raises(ComplexityAnalysisError):
            await analyzer.analyze()

    @pytest.mark.asyncio
    async def test_collect_swallows_analysis_error(self, project):
        """Test collect() returns None when complexity fails."""
        analyzer = CodeQualityAnalyzer(QualityGateConfig(project_root=project))
        bad = CommandResult(command=["eslintcc"], returncode=2, stdout="not json")
        analyzer._run = AsyncMock(side_effect=[None, bad])

        assert await analyzer.collect() is None

    @pytest.mark.asyncio
    async def test_save(self, project):
        """Test saving writes timestamped and latest files."""
        config = QualityGateConfig(project_root=project)
        analyzer = CodeQualityAnalyzer(config)
        metrics = CodeQualityMetrics(
            timestamp="2024-01-01T00:00:00+00:00",
            complexity=CodeComplexity(average_complexity=3, max_complexity=5),
            maintainability=calculate_maintainability(CodeComplexity(), FileMetrics()),
            file_metrics=FileMetrics(),
        )

        latest = analyzer.save(metrics)

        assert latest == config.code_quality_file
        saved = CodeQualityMetrics.model_validate_json(latest.read_text())
        assert saved.complexity.max_complexity == 5
        assert len(list(config.metrics_path.glob("code-quality-2024*.json"))) == 1
