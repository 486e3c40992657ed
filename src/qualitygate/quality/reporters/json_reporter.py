"""JSON report generator for quality reports.

Produces machine-readable reports with camelCase keys, matching the files
consumed by CI dashboards (``metrics/unified-report.json``).
"""

import json
import logging

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class JsonReporter:
    """
    Serialize report models to JSON.

    GOTCHA: Unset optional groups are dropped rather than written as null
    """

    def __init__(self, pretty: bool = True):
        """
        Initialize JSON reporter.

        Args:
            pretty: Whether to pretty-print JSON output
        """
        self.pretty = pretty
        self.logger = logger

    def generate_report(self, report: BaseModel) -> str:
        """
        Serialize a report model.

        Args:
            report: Any quality model (unified report, code quality metrics...)

        Returns:
            JSON string
        """
        data = report.model_dump(mode="json", by_alias=True, exclude_none=True)

        if self.pretty:
            json_str = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        else:
            json_str = json.dumps(data, ensure_ascii=False, default=str)

        self.logger.debug(f"JSON report generated ({len(json_str)} bytes)")
        return json_str
