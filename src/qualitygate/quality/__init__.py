"""Quality gate system components.

This package normalizes collected metrics, evaluates the quality gate,
computes the health score, generates recommendations and renders reports.
"""

from .gate_evaluator import evaluate_quality_gate
from .health_score import calculate_health_score
from .normalizer import normalize_scores, weighted_score
from .recommendations import generate_recommendations
from .report_generator import ReportGenerator, create_unified_report
from .threshold_manager import ThresholdManager
from .gate_engine import QualityGateEngine

__all__ = [
    "QualityGateEngine",
    "ReportGenerator",
    "ThresholdManager",
    "calculate_health_score",
    "create_unified_report",
    "evaluate_quality_gate",
    "generate_recommendations",
    "normalize_scores",
    "weighted_score",
]
