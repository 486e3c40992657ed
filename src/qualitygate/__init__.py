"""Quality gate toolkit.

Collects code quality metrics from CI tooling, normalizes them onto 0-100
scores, evaluates pass/fail gates, computes a health score, and renders
reports. Also ships a small admin API for runtime log-level configuration.
"""

__version__ = "0.1.0"
