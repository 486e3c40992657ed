"""Build, test and bundle measurement.

PATTERN: Time tool commands, size the build output, persist the record
CRITICAL: A failing build or test command aborts measurement
GOTCHA: First Load JS comes from the bundler's printed route table
"""

import logging
import os
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple

from ...config.quality_config import QualityGateConfig
from ...exceptions import MeasurementError
from ...models.quality_models import (
    BuildMetricsRecord,
    BundleSizeRecord,
    FirstLoadJSReport,
    RouteSize,
)
from ..base import run_command
from ..reporters.json_reporter import JsonReporter

logger = logging.getLogger(__name__)

ROUTE_LINE = re.compile(r"[├└┌]\s+[○●λƒ]\s+(/\S*)\s+(\S+\s+\S+)\s+(\S+\s+\S+)")
SIZE_VALUE = re.compile(r"^(\d{1,6}(?:\.\d{1,2})?)\s*(kB|KB|MB|B)$")
SHARED_MARKER = "First Load JS shared by all"
MAX_SIZE_TEXT = 20


def parse_size_to_kb(size: str) -> float:
    """
    Convert a bundler size string (``"5.2 kB"``, ``"1.1 MB"``) to KB.

    Unrecognized or oversized input returns 0.
    """
    size = size.strip()
    if len(size) > MAX_SIZE_TEXT:
        return 0.0

    match = SIZE_VALUE.match(size)
    if not match:
        return 0.0

    value = float(match.group(1))
    unit = match.group(2).upper()
    if unit == "B":
        return value / 1024
    if unit == "MB":
        return value * 1024
    return value


def parse_first_load_js(build_output: str) -> List[RouteSize]:
    """Extract the route table from build output."""
    routes: List[RouteSize] = []
    in_routes = False

    for line in build_output.split("\n"):
        if "Route (" in line:
            in_routes = True
            continue
        if not in_routes:
            continue

        match = ROUTE_LINE.search(line)
        if match:
            routes.append(
                RouteSize(route=match.group(1), size=match.group(2), first_load_js=match.group(3))
            )
        if SHARED_MARKER in line:
            break

    return routes


def summarize_first_load_js(routes: List[RouteSize]) -> Optional[FirstLoadJSReport]:
    """Find the route with the largest First Load JS."""
    if not routes:
        return None

    max_size = 0.0
    max_route = ""
    for route in routes:
        size = parse_size_to_kb(route.first_load_js)
        if size > max_size:
            max_size = size
            max_route = route.route

    return FirstLoadJSReport(max=max_size, max_route=max_route, routes=routes)


def measure_directory_size(directory: Path) -> Tuple[int, int, int]:
    """
    Sum file sizes below a directory.

    Returns:
        (total, javascript, css) in bytes
    """
    total = 0
    javascript = 0
    css = 0
    for dirpath, _dirnames, filenames in os.walk(directory):
        for filename in filenames:
            path = Path(dirpath) / filename
            if not path.is_file():
                continue
            size = path.stat().st_size
            total += size
            if filename.endswith((".js", ".mjs")):
                javascript += size
            elif filename.endswith(".css"):
                css += size
    return total, javascript, css


class MetricsMeasurer:
    """
    Measure build time, test time and bundle size.

    PATTERN: Sequential timed subprocess runs
    CRITICAL: Results are persisted as timestamped file plus latest.json
    """

    def __init__(self, config: Optional[QualityGateConfig] = None):
        self.config = config or QualityGateConfig()
        self.logger = logger

    async def _timed(self, cmd: List[str], merge_stderr: bool = False):
        result = await run_command(
            cmd,
            cwd=self.config.project_root,
            timeout=self.config.command_timeout,
            merge_stderr=merge_stderr,
        )
        if result is None:
            raise MeasurementError(f"Could not run {' '.join(cmd)}")
        if not result.succeeded:
            self.logger.error(result.output[-2000:])
            raise MeasurementError(
                f"{' '.join(cmd)} exited with code {result.returncode}"
            )
        return result

    async def measure_build(self) -> Tuple[float, Optional[FirstLoadJSReport]]:
        """Time the build and parse its route table."""
        self.logger.info("Measuring build time...")
        result = await self._timed(self.config.build_command, merge_stderr=True)
        routes = parse_first_load_js(result.stdout)
        return round(result.duration_ms), summarize_first_load_js(routes)

    async def measure_tests(self) -> float:
        self.logger.info("Measuring test execution time...")
        result = await self._timed(self.config.test_command)
        return round(result.duration_ms)

    def measure_bundle(self) -> Tuple[int, int, int]:
        """
        Size the build output directory.

        Raises:
            MeasurementError: If the build directory does not exist
        """
        self.logger.info("Measuring bundle size...")
        build_dir = self.config.resolve(self.config.build_output_dir)
        if not build_dir.is_dir():
            raise MeasurementError("Build directory not found. Run build first.")
        return measure_directory_size(build_dir)

    async def measure(
        self,
        build: bool = True,
        test: bool = True,
        bundle: bool = True,
    ) -> BuildMetricsRecord:
        """
        Run the selected measurements.

        Args:
            build: Measure build time and First Load JS
            test: Measure test time
            bundle: Measure build output size (builds first if needed)

        Returns:
            BuildMetricsRecord

        Raises:
            MeasurementError: If a command fails or the build output is missing
        """
        build_time: Optional[float] = None
        test_time: Optional[float] = None
        first_load: Optional[FirstLoadJSReport] = None
        bundle_size: Optional[BundleSizeRecord] = None

        if build:
            build_time, first_load = await self.measure_build()

        if test:
            test_time = await self.measure_tests()

        if bundle:
            build_dir = self.config.resolve(self.config.build_output_dir)
            if not build_dir.is_dir():
                self.logger.info("Building project first...")
                built_time, built_first_load = await self.measure_build()
                if build_time is None:
                    build_time = built_time
                first_load = first_load or built_first_load
            total, javascript, css = self.measure_bundle()
            bundle_size = BundleSizeRecord(
                total=total,
                javascript=javascript,
                css=css,
                first_load_js=first_load,
            )

        return BuildMetricsRecord(
            timestamp=datetime.now(timezone.utc).isoformat(),
            build_time=build_time,
            test_time=test_time,
            bundle_size=bundle_size,
        )

    def save(self, record: BuildMetricsRecord) -> Path:
        """
        Persist a record as ``metrics-<timestamp>.json`` and ``latest.json``.

        Returns:
            Path of the latest file
        """
        metrics_dir = self.config.metrics_path
        metrics_dir.mkdir(parents=True, exist_ok=True)

        payload = JsonReporter(pretty=True).generate_report(record)
        stamp = re.sub(r"[:.+]", "-", record.timestamp)
        path = metrics_dir / f"metrics-{stamp}.json"
        path.write_text(payload, encoding="utf-8")
        self.logger.info(f"Metrics saved to {path}")

        latest = self.config.latest_metrics_file
        latest.write_text(payload, encoding="utf-8")
        return latest
