"""Markdown comparison of build metrics against a base branch.

Renders the current ``latest.json`` record next to the base branch record
with per-metric changes, gate thresholds and a status glyph.
"""

from typing import List, Optional

from ... import constants as C
from ...models.quality_models import (
    DEFAULT_THRESHOLDS,
    BuildMetricsRecord,
    EnforcementLevel,
    MetricStatus,
    QualityThresholds,
)
from .markdown_reporter import STATUS_GLYPHS, _format_duration, _format_number, _upper_status

REPORT_TITLE = "## 📊 Build Metrics Report"

COMPARISON_HEADER = [
    "| Metric | Value | Base | Threshold | Status |",
    "|--------|-------|------|-----------|--------|",
]

# Changes at or below this are shown without a delta
CHANGE_EPSILON = 0.01


def format_value(value: float, kind: str) -> str:
    """Format a metric value for display."""
    if kind == "time":
        return _format_duration(value)
    if kind == "size":
        return f"{value / C.MB:.2f} MB"
    if kind == "kb":
        return f"{value:.1f} KB"
    if kind == "percent":
        return f"{value:.1f}%"
    if kind == "count":
        return _format_number(value)
    raise ValueError(f"Unknown value kind: {kind}")


def format_change(change: float, kind: str) -> str:
    """Format a signed change, e.g. ``📈 +1.5s``."""
    sign = "+" if change > 0 else ""
    emoji = "📈" if change > 0 else "📉"
    if kind == "time":
        amount = f"{change / C.MS_PER_SECOND:.1f}s"
    elif kind == "size":
        amount = f"{change / C.MB:.2f} MB"
    elif kind == "kb":
        amount = f"{change:.1f} KB"
    elif kind == "percent":
        amount = f"{change:.1f}%"
    elif kind == "count":
        amount = _format_number(change)
    else:
        raise ValueError(f"Unknown value kind: {kind}")
    return f"{emoji} {sign}{amount}"


def format_diff(current: Optional[float], base: Optional[float], kind: str) -> str:
    """
    Format a value with its change from the base value.

    Args:
        current: Current value; ``N/A`` when missing
        base: Base branch value; no change is shown when missing
        kind: One of time, size, kb, percent, count

    Returns:
        e.g. ``2m 5.0s 📈 +5.0s``
    """
    if current is None:
        return "N/A"

    text = format_value(current, kind)
    if base is not None:
        change = current - base
        if abs(change) > CHANGE_EPSILON:
            text += f" {format_change(change, kind)}"
    return text


def _short_duration(ms: float) -> str:
    if ms % C.MS_PER_MINUTE == 0:
        return f"{int(ms // C.MS_PER_MINUTE)}m"
    return f"{ms / C.MS_PER_SECOND:.0f}s"


class ComparisonReporter:
    """
    Render current build metrics against a base branch record.

    PATTERN: Statuses follow the gate thresholds, so a row never reads
    worse than the gate verdict for the same value.
    """

    def __init__(self, thresholds: QualityThresholds = DEFAULT_THRESHOLDS):
        self.thresholds = thresholds

    def generate_report(
        self,
        current: Optional[BuildMetricsRecord],
        base: Optional[BuildMetricsRecord] = None,
        base_label: Optional[str] = None,
    ) -> str:
        """
        Render the comparison as Markdown.

        Args:
            current: Latest measurement; rows read N/A when missing
            base: Base branch measurement, if any
            base_label: Short name of the base (commit SHA or file)

        Returns:
            Markdown document
        """
        lines = [REPORT_TITLE, ""]
        if base is None:
            lines.append("_No base metrics available for comparison._")
        else:
            lines.append(f"**Compared with:** `{base_label or base.timestamp}`")
        lines.extend(["", "### ⚡ Performance Metrics", "", *COMPARISON_HEADER])
        lines.extend(self._rows(current, base))
        lines.extend(["", "---", "", "*Generated by Build Metrics Report*"])
        return "\n".join(lines)

    def _rows(
        self, current: Optional[BuildMetricsRecord], base: Optional[BuildMetricsRecord]
    ) -> List[str]:
        t = self.thresholds
        cur_bundle = current.bundle_size if current else None
        base_bundle = base.bundle_size if base else None
        cur_build = current.build_time if current else None
        cur_test = current.test_time if current else None

        rows = [
            self._row(
                "Build Time",
                cur_build,
                base.build_time if base else None,
                "time",
                f"≤ {_short_duration(t.build_time.maximum)}",
                None
                if cur_build is None
                else _upper_status(cur_build, t.build_time.warning, t.build_time.maximum),
            ),
            self._row(
                "Test Time",
                cur_test,
                base.test_time if base else None,
                "time",
                f"≤ {_short_duration(t.test_time.maximum)}",
                None
                if cur_test is None
                else _upper_status(cur_test, t.test_time.warning, t.test_time.maximum),
            ),
        ]

        if cur_bundle is not None:
            rows.append(
                self._row(
                    "Bundle Size (Total)",
                    cur_bundle.total,
                    base_bundle.total if base_bundle else None,
                    "size",
                    f"≤ {t.bundle_size.maximum / C.MB:.0f} MB",
                    self._bundle_status(cur_bundle.total),
                )
            )
            rows.append(
                self._row(
                    "├─ JavaScript",
                    cur_bundle.javascript,
                    base_bundle.javascript if base_bundle else None,
                    "size",
                )
            )
            rows.append(
                self._row(
                    "└─ CSS",
                    cur_bundle.css,
                    base_bundle.css if base_bundle else None,
                    "size",
                )
            )

        first_load = current.first_load_js_summary() if current else None
        if first_load is not None:
            base_first_load = base.first_load_js_summary() if base else None
            fl = t.first_load_js
            rows.append(
                self._row(
                    f"First Load JS ({first_load.max_route or 'unknown'})",
                    first_load.max,
                    base_first_load.max if base_first_load else None,
                    "kb",
                    f"≤ {_format_number(fl.maximum)} KB",
                    _upper_status(first_load.max, fl.warning, fl.maximum),
                )
            )
        return rows

    def _bundle_status(self, total: float) -> MetricStatus:
        bundle = self.thresholds.bundle_size
        if total > bundle.maximum:
            if bundle.enforcement == EnforcementLevel.ERROR:
                return MetricStatus.ERROR
            return MetricStatus.WARN
        if bundle.warning is not None and total > bundle.warning:
            return MetricStatus.WARN
        return MetricStatus.OK

    def _row(
        self,
        label: str,
        current: Optional[float],
        base: Optional[float],
        kind: str,
        threshold: str = "-",
        status: Optional[MetricStatus] = None,
    ) -> str:
        base_text = format_value(base, kind) if base is not None else "-"
        status_text = STATUS_GLYPHS[status] if status is not None else "-"
        return (
            f"| {label} | {format_diff(current, base, kind)} | {base_text} "
            f"| {threshold} | {status_text} |"
        )


def generate_comparison_report(
    current: Optional[BuildMetricsRecord],
    base: Optional[BuildMetricsRecord] = None,
    base_label: Optional[str] = None,
    thresholds: QualityThresholds = DEFAULT_THRESHOLDS,
) -> str:
    """Render a build metrics comparison as Markdown."""
    return ComparisonReporter(thresholds).generate_report(current, base, base_label)
