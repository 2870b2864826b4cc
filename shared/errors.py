"""
Shared error handling for the Cart Conditions service.
"""

from typing import Dict, Any, Optional


class ConditionServiceException(Exception):
    """Base exception for condition evaluation failures."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a structured error payload."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class PreconditionError(ConditionServiceException):
    """Evaluation context is incomplete (e.g. the site is unknown)."""

    def __init__(self, message: str = "Precondition failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("PRECONDITION_ERROR", message, details)


class ConfigurationError(ConditionServiceException):
    """A rule is misconfigured."""

    def __init__(self, message: str = "Invalid condition configuration",
                 details: Optional[Dict[str, Any]] = None, code: str = "CONFIGURATION_ERROR"):
        super().__init__(code, message, details)


class UnsupportedOperator(ConfigurationError):
    """Comparison operator tag is not one of the supported operators."""

    def __init__(self, operator: Any, details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        details.setdefault("operator", str(operator))
        super().__init__(
            f"Unsupported comparison operator: {operator!r}",
            details,
            code="UNSUPPORTED_OPERATOR",
        )
        self.operator = operator
