"""Markdown report generator for quality reports.

This module generates GitHub-flavored markdown for unified quality reports
and quality gate step summaries. Rendering is pure: no file or network
access, identical output for identical input.
"""

import logging
from typing import List, Optional

from ... import constants as C
from ...models.quality_models import (
    DEFAULT_THRESHOLDS,
    EnforcementLevel,
    EvaluationResult,
    MetricStatus,
    QualityThresholds,
    UnifiedQualityReport,
)

logger = logging.getLogger(__name__)

STATUS_GLYPHS = {
    MetricStatus.OK: "✅",
    MetricStatus.WARN: "⚠️",
    MetricStatus.ERROR: "🔴",
}

TABLE_HEADER = [
    "| Metric | Value | Status |",
    "|--------|-------|--------|",
]

SCORE_LABELS = {
    "build_time": "Build Time",
    "test_time": "Test Time",
    "bundle_size": "Bundle Size",
    "coverage": "Test Coverage",
    "type_errors": "TypeScript Errors",
    "lint_errors": "ESLint Errors",
    "lint_warnings": "ESLint Warnings",
    "complexity_average": "Avg Complexity",
    "complexity_max": "Max Complexity",
    "maintainability": "Maintainability",
    "duplication": "Code Duplication",
}


def _upper_status(value: float, warning: Optional[float], maximum: float) -> MetricStatus:
    if value > maximum:
        return MetricStatus.ERROR
    if warning is not None and value > warning:
        return MetricStatus.WARN
    return MetricStatus.OK


def _format_duration(ms: float) -> str:
    minutes = int(ms // C.MS_PER_MINUTE)
    seconds = (ms % C.MS_PER_MINUTE) / C.MS_PER_SECOND
    return f"{minutes}m {seconds:.1f}s"


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"


class MarkdownReporter:
    """
    Generate Markdown reports for CI summaries and PR comments.

    PATTERN: GitHub-flavored markdown with metric/value/status tables
    CRITICAL: Status glyphs are derived from the gate thresholds
    """

    def __init__(
        self,
        thresholds: QualityThresholds = DEFAULT_THRESHOLDS,
        include_scores: bool = True,
    ):
        """
        Initialize Markdown reporter.

        Args:
            thresholds: Thresholds used to derive status glyphs
            include_scores: Whether to render the normalized scores table
        """
        self.thresholds = thresholds
        self.include_scores = include_scores
        self.logger = logger

    def generate_report(self, report: UnifiedQualityReport) -> str:
        """
        Generate the full Markdown report.

        Args:
            report: Unified quality report to render

        Returns:
            Markdown string
        """
        self.logger.debug(f"Generating Markdown report for {report.timestamp}")

        lines: List[str] = []
        lines.extend(self._header(report))
        lines.extend(self._performance_section(report))
        lines.extend(self._code_quality_section(report))
        lines.extend(self._advanced_section(report))
        if self.include_scores:
            lines.extend(self._scores_section(report))
        lines.extend(self._recommendations_section(report))
        lines.extend(["---", "", "*Generated by Unified Quality Report*"])
        return "\n".join(lines)

    def _status(self, status: MetricStatus) -> str:
        return STATUS_GLYPHS[status]

    def _header(self, report: UnifiedQualityReport) -> List[str]:
        lines = [
            "# 📊 Unified Quality Report",
            "",
            f"**Generated:** {report.timestamp}",
            "",
            f"## 🎯 Overall Health Score: {report.health_score}/100",
            "",
        ]

        score = report.health_score
        if score >= C.HEALTH_EXCELLENT:
            lines.append(f"{self._status(MetricStatus.OK)} **Excellent** - Code quality is high")
        elif score >= C.HEALTH_GOOD:
            lines.append(f"{self._status(MetricStatus.WARN)} **Good** - Some improvements needed")
        elif score >= C.HEALTH_FAIR:
            lines.append("🟠 **Fair** - Significant improvements recommended")
        else:
            lines.append(f"{self._status(MetricStatus.ERROR)} **Poor** - Immediate attention required")

        if report.weighted_score is not None:
            lines.extend(["", f"**Weighted Score:** {report.weighted_score}/100"])

        if report.gate is not None:
            verdict = "PASSED" if report.gate.passed else "FAILED"
            lines.extend(["", f"**Quality Gate:** {verdict}"])

        lines.extend(["", "---", ""])
        return lines

    def _performance_section(self, report: UnifiedQualityReport) -> List[str]:
        perf = report.performance
        if perf is None:
            return []

        t = self.thresholds
        out = ["## ⚡ Performance Metrics", "", *TABLE_HEADER]
        if perf.build_time is not None:
            status = _upper_status(perf.build_time, t.build_time.warning, t.build_time.maximum)
            out.append(
                f"| Build Time | {_format_duration(perf.build_time)} | {self._status(status)} |"
            )
        if perf.test_time is not None:
            status = _upper_status(perf.test_time, t.test_time.warning, t.test_time.maximum)
            out.append(
                f"| Test Time | {_format_duration(perf.test_time)} | {self._status(status)} |"
            )
        if perf.bundle_size is not None:
            total = perf.bundle_size.total
            if total > t.bundle_size.maximum:
                if t.bundle_size.enforcement == EnforcementLevel.ERROR:
                    status = MetricStatus.ERROR
                else:
                    status = MetricStatus.WARN
            elif t.bundle_size.target is not None and total > t.bundle_size.target:
                status = MetricStatus.WARN
            else:
                status = MetricStatus.OK
            out.append(f"| Bundle Size | {total / C.MB:.2f} MB | {self._status(status)} |")
        out.append("")
        return out

    def _code_quality_section(self, report: UnifiedQualityReport) -> List[str]:
        basic = report.basic_quality
        if basic is None:
            return []

        t = self.thresholds
        out = ["## 🎨 Code Quality", "", *TABLE_HEADER]

        status = MetricStatus.OK if basic.type_errors <= t.type_errors.maximum else MetricStatus.ERROR
        out.append(f"| TypeScript Errors | {basic.type_errors} | {self._status(status)} |")

        status = MetricStatus.OK if basic.lint_errors <= t.lint_errors.maximum else MetricStatus.ERROR
        out.append(f"| ESLint Errors | {basic.lint_errors} | {self._status(status)} |")

        status = MetricStatus.OK if basic.lint_warnings <= t.lint_warnings.maximum else MetricStatus.WARN
        out.append(f"| ESLint Warnings | {basic.lint_warnings} | {self._status(status)} |")

        if basic.coverage is not None:
            if basic.coverage < t.coverage.minimum:
                status = MetricStatus.ERROR
            elif basic.coverage < t.coverage.warning:
                status = MetricStatus.WARN
            else:
                status = MetricStatus.OK
            out.append(f"| Test Coverage | {basic.coverage:.1f}% | {self._status(status)} |")

        out.append("")
        return out

    def _advanced_section(self, report: UnifiedQualityReport) -> List[str]:
        adv = report.advanced_quality
        if adv is None:
            return []

        t = self.thresholds
        out = ["## 🔬 Advanced Metrics", "", *TABLE_HEADER]

        if adv.complexity is not None:
            status = _upper_status(
                adv.complexity.average,
                t.complexity.average_warning,
                t.complexity.average_maximum,
            )
            out.append(
                f"| Avg Complexity | {adv.complexity.average:.2f} | {self._status(status)} |"
            )
            if adv.complexity.max is not None:
                status = _upper_status(
                    adv.complexity.max,
                    t.complexity.individual_warning,
                    t.complexity.individual_maximum,
                )
                out.append(
                    f"| Max Complexity | {_format_number(adv.complexity.max)} | {self._status(status)} |"
                )
            else:
                out.append("| Max Complexity | - | - |")

        if adv.maintainability is not None:
            m = adv.maintainability
            status = MetricStatus.OK if m.index >= t.maintainability.minimum else MetricStatus.WARN
            out.append(f"| Maintainability | {m.index:.1f} ({m.rating}) | {self._status(status)} |")

        if adv.duplication is not None:
            pct = adv.duplication.percentage
            status = _upper_status(pct, t.duplication.warning, t.duplication.maximum)
            out.append(f"| Code Duplication | {pct:.1f}% | {self._status(status)} |")

        status = MetricStatus.OK if adv.large_file_count == 0 else MetricStatus.WARN
        out.append(f"| Large Files | {adv.large_file_count} | {self._status(status)} |")

        if adv.eslint_complexity is not None:
            issues = adv.eslint_complexity.total
            status = MetricStatus.OK if issues == 0 else MetricStatus.WARN
            out.append(f"| ESLint Complexity Issues | {issues} | {self._status(status)} |")

        out.append("")
        return out

    def _scores_section(self, report: UnifiedQualityReport) -> List[str]:
        if not report.scores:
            return []

        out = ["## 📈 Normalized Scores", "", "| Metric | Score |", "|--------|-------|"]
        for name, score in report.scores.items():
            label = SCORE_LABELS.get(name, name)
            out.append(f"| {label} | {score:.0f}/100 |")
        out.append("")
        return out

    def _recommendations_section(self, report: UnifiedQualityReport) -> List[str]:
        out = ["## 💡 Recommendations", ""]
        out.extend(f"- {rec}" for rec in report.recommendations)
        out.append("")
        return out


def generate_markdown_report(
    report: UnifiedQualityReport,
    thresholds: QualityThresholds = DEFAULT_THRESHOLDS,
) -> str:
    """Render a unified quality report as Markdown."""
    return MarkdownReporter(thresholds=thresholds).generate_report(report)


def generate_gate_summary(result: EvaluationResult) -> str:
    """
    Render a quality gate result as a GitHub step summary.

    Args:
        result: Evaluation result

    Returns:
        Markdown string
    """
    lines = [
        "## 📊 Quality Gate Results",
        "",
        "✅ **Quality gate PASSED**" if result.passed else "❌ **Quality gate FAILED**",
        "",
    ]
    if result.failures:
        lines.append("### Failures")
        lines.extend(result.failures)
        lines.append("")
    if result.warnings:
        lines.append("### Warnings")
        lines.extend(result.warnings)
        lines.append("")
    return "\n".join(lines)
