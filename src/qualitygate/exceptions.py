"""Exception types for the quality gate toolkit."""

from typing import Any, Dict, List, Optional


class QualityGateError(Exception):
    """Base error for the toolkit."""


class ConfigurationError(QualityGateError):
    """Raised when a configuration file or value cannot be used."""


class MeasurementError(QualityGateError):
    """Raised when build or test measurement cannot run."""


class ComplexityAnalysisError(QualityGateError):
    """Raised when complexity tool output is missing or unusable."""


class StorageError(QualityGateError):
    """Raised when the key-value backend fails."""


class AdminAPIError(QualityGateError):
    """Error carrying an HTTP status for the admin API."""

    def __init__(
        self,
        status_code: int,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details
        self.headers = headers


class ConfigValidationError(AdminAPIError):
    """Raised when a remote log configuration fails validation."""

    def __init__(self, errors: List[str]):
        super().__init__(
            400,
            "Configuration validation failed",
            details={"errors": errors},
        )
        self.errors = errors


class RateLimitExceeded(AdminAPIError):
    """Raised when a client exceeds the admin rate limit."""

    def __init__(self, retry_after: int):
        super().__init__(
            429,
            "Rate limit exceeded",
            headers={"Retry-After": str(retry_after)},
        )
        self.retry_after = retry_after
