"""Quality metric constants.

Single source of the numeric thresholds, weights and levels used by the
gate evaluator, score normalizer, health score calculator and analyzers.
"""

from typing import Dict, List, NamedTuple

KB = 1024
MB = 1024 * 1024

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * 1000

# Performance (milliseconds / bytes)
BUILD_TIME_MAX = 300000
BUILD_TIME_WARNING = 240000
BUILD_TIME_TARGET = 120000
TEST_TIME_MAX = 180000
TEST_TIME_WARNING = 150000
TEST_TIME_TARGET = 60000
BUNDLE_SIZE_MAX = 100 * MB
BUNDLE_SIZE_WARNING = 50 * MB
BUNDLE_SIZE_TARGET = 5 * MB

# Basic quality
COVERAGE_MIN = 60
COVERAGE_WARNING = 70
TYPE_ERRORS_MAX = 0
LINT_ERRORS_MAX = 0
LINT_WARNINGS_MAX = 10

# First Load JS (KB)
FIRST_LOAD_JS_EXCELLENT = 100
FIRST_LOAD_JS_GOOD = 150
FIRST_LOAD_JS_WARNING = 200
FIRST_LOAD_JS_MAX = 250


class ComplexityLevel(NamedTuple):
    """Cyclomatic complexity band."""

    grade: str
    upper: float
    icon: str
    label: str


COMPLEXITY_LEVELS: List[ComplexityLevel] = [
    ComplexityLevel("A", 5, "⚡", "Excellent"),
    ComplexityLevel("B", 10, "✅", "Good"),
    ComplexityLevel("C", 15, "⚠️", "Moderate"),
    ComplexityLevel("D", 20, "🟡", "Complex"),
    ComplexityLevel("E", 30, "🟠", "Very complex"),
    ComplexityLevel("F", float("inf"), "❌", "Unmaintainable"),
]

COMPLEXITY_EXCELLENT = 5
COMPLEXITY_GOOD = 10
COMPLEXITY_INDIVIDUAL_WARNING = 15
COMPLEXITY_INDIVIDUAL_MAX = 20
COMPLEXITY_AVERAGE_WARNING = 8
COMPLEXITY_AVERAGE_MAX = 10

# Letter ratings for 0-100 scores
SCORE_RATINGS: Dict[str, int] = {"A": 90, "B": 80, "C": 70, "D": 60}

MAINTAINABILITY_MIN = 70
MAINTAINABILITY_TARGET = 90

DUPLICATION_WARNING = 3
DUPLICATION_MAX = 10

# Analyzer file size limits
LARGE_FILE_LINES = 300
AVG_LINES_WARNING = 200

# Duplicate block detection
DUPLICATE_BLOCK_LINES = 4
DUPLICATE_BLOCK_MIN_CHARS = 50

QUALITY_SCORE_WEIGHTS: Dict[str, float] = {
    "maintainability": 0.25,
    "complexity_average": 0.15,
    "complexity_max": 0.05,
    "duplication": 0.10,
    "coverage": 0.15,
    "type_errors": 0.06,
    "lint_errors": 0.04,
    "build_time": 0.10,
    "bundle_size": 0.10,
}

HEALTH_EXCELLENT = 80
HEALTH_GOOD = 60
HEALTH_FAIR = 40

# Health score never reaches the "good" band while the hard gate fails
QUALITY_GATE_FAILURE_CAP = 59

TS_ERROR_LOG_DECAY = 30
LINT_ERROR_LOG_DECAY = 20
LINT_WARNING_PENALTY = 2

# Health score penalties
PENALTY_TYPE_ERRORS = 20
PENALTY_LINT_ERRORS = 15
PENALTY_LINT_WARNINGS = 5
PENALTY_LOW_COVERAGE = 10
PENALTY_SLOW_BUILD = 5
PENALTY_LARGE_BUNDLE = 10
PENALTY_HIGH_COMPLEXITY = 15
PENALTY_MODERATE_COMPLEXITY = 5
PENALTY_PER_MAINTAINABILITY_POINT = 0.5
PENALTY_MAINTAINABILITY_CAP = 20
PENALTY_PER_LARGE_FILE = 2
PENALTY_LARGE_FILES_CAP = 10
PENALTY_PER_ESLINT_ISSUE = 1
PENALTY_ESLINT_ISSUES_CAP = 15
PENALTY_PER_DUPLICATION_PERCENT = 1
PENALTY_DUPLICATION_CAP = 10

HEALTH_FAILURE_EXIT_THRESHOLD = HEALTH_FAIR


def complexity_level(value: float) -> ComplexityLevel:
    """Return the complexity band a value falls into."""
    for level in COMPLEXITY_LEVELS:
        if value <= level.upper:
            return level
    return COMPLEXITY_LEVELS[-1]


def score_rating(score: float) -> str:
    """Map a 0-100 score to a letter rating (A-D, F)."""
    for letter, floor in SCORE_RATINGS.items():
        if score >= floor:
            return letter
    return "F"
