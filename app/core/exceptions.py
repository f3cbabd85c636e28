"""
Base exception classes for application-wide error handling.

Exception Hierarchy:
    BaseApplicationError (base)
    └── ExternalServiceError - Third-party service failures

Expected failures inside services are returned as ServiceResult values
(see core.services). These exceptions are raised by adapters that wrap
third-party clients and are converted to ServiceResult at the service
boundary.

Usage:
    from core.exceptions import ExternalServiceError

    raise ExternalServiceError(
        "Payment processor unavailable",
        error_code="PROCESSOR_UNAVAILABLE",
        details={"operation": "create_subscription"},
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, metadata, etc.)
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Your card was declined.",
                "error_code": "STRIPE_CARD_DECLINED",
                "details": {"stripe_code": "card_declined"}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ExternalServiceError(BaseApplicationError):
    """
    Raised when a third-party service call fails.

    Use for:
    - Payment processor failures
    - Network errors talking to external APIs
    """

    default_error_code: str = "EXTERNAL_SERVICE_ERROR"
