"""Quality report generators.

JSON output for CI consumption, Markdown for step summaries and
PR comments, and base branch comparisons of build metrics.
"""

from .comparison_reporter import ComparisonReporter, format_diff, generate_comparison_report
from .json_reporter import JsonReporter
from .markdown_reporter import (
    MarkdownReporter,
    generate_gate_summary,
    generate_markdown_report,
)

__all__ = [
    "ComparisonReporter",
    "JsonReporter",
    "MarkdownReporter",
    "format_diff",
    "generate_comparison_report",
    "generate_gate_summary",
    "generate_markdown_report",
]
