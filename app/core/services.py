"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Tagged success/failure value returned by every service step
- BaseService: Base class with logging and transaction helpers

Pattern Comparison:
    - ServiceResult: Use for expected failures (not found, validation,
      business rules, processor declines)
    - Exceptions: Use for unexpected failures (database outages, bugs)

Chaining:
    Steps that each return a ServiceResult are composed with ``bind``.
    The chain stops at the first failure and forwards it untouched:

        result = (
            cls.get_project(project_id)
            .bind(ProjectSubscribable.validate)
            .bind(lambda project: cls.find_plan(project))
        )

Usage:
    from core.services import BaseService, ServiceResult

    class ProjectService(BaseService):
        @classmethod
        def get_project(cls, project_id) -> ServiceResult[Project]:
            project = Project.objects.filter(pk=project_id).first()
            if project is None:
                return ServiceResult.failure("Project not found", "NOT_FOUND")
            return ServiceResult.success(project)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Generic, TypeVar

from django.db import transaction

from core.exceptions import BaseApplicationError

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any

T = TypeVar("T")
U = TypeVar("U")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code for client handling
        errors: Field-level errors for validation failures
        details: Structured context for the failure (e.g. processor error codes)

    Usage:
        # Success case
        return ServiceResult.success(subscription)

        # Failure case
        return ServiceResult.failure("Project not found", "NOT_FOUND")

        # Validation errors with field details
        return ServiceResult.failure(
            "Validation failed",
            error_code="VALIDATION_ERROR",
            errors={"quantity": ["Ensure this value is greater than or equal to 1."]},
        )
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    errors: dict[str, list[str]] | None = field(default=None)
    details: dict[str, Any] | None = field(default=None)

    @classmethod
    def ok(cls, data: T) -> ServiceResult[T]:
        """Alias for success()."""
        return cls(success=True, data=data)

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        """
        Create a successful result.

        Args:
            data: The result data

        Returns:
            ServiceResult with success=True and data set
        """
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        errors: dict[str, list[str]] | None = None,
        details: dict[str, Any] | None = None,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling
            errors: Field-level errors (for validation failures)
            details: Additional structured context

        Returns:
            ServiceResult with success=False and error details
        """
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            errors=errors,
            details=details,
        )

    @classmethod
    def from_exception(cls, exc: Exception, error_code: str | None = None) -> ServiceResult[T]:
        """
        Create a failed result from an exception.

        Application errors keep their own error code and details; anything
        else is keyed by its class name.

        Args:
            exc: The caught exception
            error_code: Optional error code override

        Returns:
            ServiceResult with error details from exception

        Example:
            try:
                StripeAdapter.create_subscription(params, connect_account="acct_123")
            except StripeError as e:
                return ServiceResult.from_exception(e, "PROCESSOR_ERROR")
        """
        if isinstance(exc, BaseApplicationError):
            return cls(
                success=False,
                error=exc.message,
                error_code=error_code or exc.error_code,
                details=exc.to_dict(),
            )
        return cls(
            success=False,
            error=str(exc),
            error_code=error_code or exc.__class__.__name__.upper(),
        )

    def to_response(self) -> dict[str, Any]:
        """
        Convert to API response format.

        Returns:
            Dict with success status and data or error details
        """
        if self.success:
            return {"success": True, "data": self.data}

        response: dict[str, Any] = {
            "success": False,
            "error": self.error,
        }
        if self.error_code:
            response["error_code"] = self.error_code
        if self.errors:
            response["errors"] = self.errors
        if self.details:
            response["details"] = self.details
        return response

    def map(self, func: Callable[[T], U]) -> ServiceResult[U]:
        """
        Transform the data if successful.

        Returns the failure unchanged otherwise.

        Example:
            result = ConnectSubscriptionService().find_or_create(...)
            serialized = result.map(lambda s: SubscriptionSerializer(s).data)
        """
        if self.success:
            return ServiceResult.success(func(self.data))
        return self  # type: ignore[return-value]

    def bind(self, func: Callable[[T], ServiceResult[U]]) -> ServiceResult[U]:
        """
        Chain a step that itself returns a ServiceResult.

        The step only runs on success. A failure short-circuits the chain
        and is forwarded untouched.

        Args:
            func: Next step, called with this result's data

        Returns:
            The step's result, or this failure

        Example:
            result = cls.get_user(user_id).bind(UserCanSubscribe.validate)
        """
        if self.success:
            return func(self.data)
        return self  # type: ignore[return-value]

    def __bool__(self) -> bool:
        """Same as ``result.success``."""
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management
    - Exception to ServiceResult conversion

    Design Notes:
        - Use ServiceResult for expected failures
        - Raise exceptions for unexpected failures and convert them at
          the public method boundary with handle_exception()
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        Thin wrapper around Django's transaction.atomic() that keeps
        transaction boundaries explicit in service code.
        """
        with transaction.atomic():
            yield

    @classmethod
    def handle_exception(
        cls,
        exc: Exception,
        context: str = "",
        error_code: str | None = None,
        log_level: int = logging.ERROR,
    ) -> ServiceResult:
        """
        Convert exception to ServiceResult with logging.

        Args:
            exc: The caught exception
            context: Additional context for logging
            error_code: Error code for the returned failure
            log_level: Logging level (default ERROR)

        Returns:
            ServiceResult with error details
        """
        logger = cls.get_logger()
        message = f"{context}: {exc}" if context else str(exc)
        logger.log(log_level, message, exc_info=True)
        return ServiceResult.from_exception(exc, error_code)
