"""GitHub Actions step output and summary writers.

Values are only written when the corresponding environment variable
(``GITHUB_OUTPUT`` / ``GITHUB_STEP_SUMMARY``) is set.
"""

import logging
import os
from typing import Any, Dict, Optional

from ..models.quality_models import BuildMetricsRecord, EvaluationResult
from .reporters.markdown_reporter import generate_gate_summary

logger = logging.getLogger(__name__)


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def write_outputs(values: Dict[str, Any], env: Optional[Dict[str, str]] = None) -> bool:
    """
    Append ``key=value`` lines to the step output file.

    Args:
        values: Output names and values
        env: Environment mapping (defaults to os.environ)

    Returns:
        True if the outputs were written
    """
    env = os.environ if env is None else env
    path = env.get("GITHUB_OUTPUT")
    if not path:
        return False

    lines = "".join(f"{key}={_format_value(value)}\n" for key, value in values.items())
    with open(path, "a", encoding="utf-8") as f:
        f.write(lines)
    logger.debug(f"Wrote {len(values)} outputs to {path}")
    return True


def write_step_summary(markdown: str, env: Optional[Dict[str, str]] = None) -> bool:
    """Write markdown to the step summary file, replacing its content."""
    env = os.environ if env is None else env
    path = env.get("GITHUB_STEP_SUMMARY")
    if not path:
        return False

    with open(path, "w", encoding="utf-8") as f:
        f.write(markdown)
    return True


def write_gate_outputs(result: EvaluationResult, env: Optional[Dict[str, str]] = None) -> None:
    """Publish a quality gate result as step outputs and summary."""
    write_outputs(
        {
            "quality_gate_passed": result.passed,
            "quality_gate_failures": len(result.failures),
            "quality_gate_warnings": len(result.warnings),
        },
        env,
    )
    write_step_summary(generate_gate_summary(result), env)


def write_metrics_outputs(record: BuildMetricsRecord, env: Optional[Dict[str, str]] = None) -> None:
    """Publish measured build metrics as step outputs."""
    bundle = record.bundle_size
    first_load = bundle.first_load_js if bundle else None
    write_outputs(
        {
            "build_time": record.build_time or 0,
            "test_time": record.test_time or 0,
            "bundle_size_total": bundle.total if bundle else 0,
            "bundle_size_js": (bundle.javascript or 0) if bundle else 0,
            "bundle_size_css": (bundle.css or 0) if bundle else 0,
            "first_load_js_max": first_load.max if first_load else 0,
            "first_load_js_route": (first_load.max_route or "unknown") if first_load else "unknown",
        },
        env,
    )
