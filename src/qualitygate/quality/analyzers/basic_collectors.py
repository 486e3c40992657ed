"""Collectors for type errors, lint issues, coverage and build metrics.

PATTERN: Thin wrappers around tool output and report files
CRITICAL: A tool exiting non-zero still yields a count parsed from output
GOTCHA: Absent report files degrade to None, not to an error
"""

import json
import logging
import re
from typing import Any, NamedTuple, Optional

from pydantic import ValidationError

from ...models.quality_models import BuildMetricsRecord
from ..base import BaseCollector

logger = logging.getLogger(__name__)

TS_ERROR_PATTERN = re.compile(r"error TS")


class LintCounts(NamedTuple):
    errors: int
    warnings: int


def count_type_errors(output: str) -> int:
    """Count ``error TS`` diagnostics in type checker output."""
    return len(TS_ERROR_PATTERN.findall(output))


def parse_lint_output(output: str) -> LintCounts:
    """
    Sum error and warning counts from ESLint JSON output.

    Empty output means no files were reported. Output that is not an
    ESLint JSON report counts as a single error, so a broken lint run
    fails the gate instead of passing silently.

    Args:
        output: ESLint ``--format json`` stdout

    Returns:
        LintCounts
    """
    text = output.strip() or "[]"
    try:
        reports = json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Unparseable ESLint output, counting as one error")
        return LintCounts(errors=1, warnings=0)

    if not isinstance(reports, list):
        logger.warning("Unexpected ESLint output shape, counting as one error")
        return LintCounts(errors=1, warnings=0)

    errors = 0
    warnings = 0
    for report in reports:
        if not isinstance(report, dict):
            continue
        errors += int(report.get("errorCount") or 0)
        warnings += int(report.get("warningCount") or 0)
    return LintCounts(errors=errors, warnings=warnings)


def parse_coverage_summary(data: Any) -> float:
    """Extract ``total.statements.pct`` from an istanbul coverage summary."""
    total = (data or {}).get("total") or {}
    statements = total.get("statements") or {}
    pct = statements.get("pct")
    try:
        return float(pct or 0)
    except (TypeError, ValueError):
        return 0.0


class TypeCheckCollector(BaseCollector):
    """Counts TypeScript compiler errors."""

    name = "typecheck"

    async def collect(self) -> Optional[int]:
        self.logger.info("Checking TypeScript errors...")
        result = await self._run(self.config.typecheck_command)
        if result is None:
            return None
        if result.succeeded:
            return 0

        count = count_type_errors(result.output)
        if count == 0:
            self.logger.warning(
                f"Type check exited with {result.returncode} but reported no errors"
            )
        return count


class LintCollector(BaseCollector):
    """Counts ESLint errors and warnings."""

    name = "lint"

    async def collect(self) -> Optional[LintCounts]:
        self.logger.info("Checking ESLint issues...")
        result = await self._run(self.config.lint_command)
        if result is None:
            return None
        return parse_lint_output(result.stdout)


class CoverageCollector(BaseCollector):
    """Reads statement coverage from the coverage summary file."""

    name = "coverage"

    async def collect(self) -> Optional[float]:
        path = self.config.resolve(self.config.coverage_summary)
        if not path.exists():
            self.logger.warning(
                f"Coverage report not found at {path}. Run tests with coverage first."
            )
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.error(f"Error reading coverage: {e}")
            return None

        if not isinstance(data, dict):
            self.logger.error(f"Unexpected coverage summary format in {path}")
            return None
        return parse_coverage_summary(data)


class BuildMetricsCollector(BaseCollector):
    """Loads build time, test time and bundle size from ``metrics/latest.json``."""

    name = "build_metrics"

    async def collect(self) -> Optional[BuildMetricsRecord]:
        path = self.config.latest_metrics_file
        if not path.exists():
            self.logger.info(f"No build metrics at {path}")
            return None

        try:
            return BuildMetricsRecord.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            self.logger.warning(f"Ignoring unreadable build metrics {path}: {e}")
            return None
