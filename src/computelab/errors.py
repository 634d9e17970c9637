"""
Error taxonomy for computelab.

This module provides a small hierarchical exception system with:
- Error codes for programmatic handling
- HTTP status hints for the transport adapter
- Structured context for debugging
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standardized error codes for the job service."""

    # Validation errors (2xxx)
    VALIDATION_ERROR = "ERR_2000"
    MISSING_FIELD = "ERR_2001"
    INVALID_FIELD = "ERR_2002"

    # Lookup / state errors (4xxx)
    NOT_FOUND = "ERR_4040"
    INVALID_TRANSITION = "ERR_4090"

    # Internal errors (9xxx)
    INTERNAL_ERROR = "ERR_9000"
    UNKNOWN_ERROR = "ERR_9999"


@dataclass
class ErrorContext:
    """Structured context for error debugging."""

    job_id: str | None = None
    operation: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "operation": self.operation,
            **self.extra,
        }


class ComputeLabError(Exception):
    """
    Base exception for all computelab errors.

    Attributes:
        code: Standardized error code for programmatic handling
        message: Human-readable error message
        http_status: Status the HTTP adapter answers with
        context: Structured debugging context
        cause: Original exception that caused this error
    """

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    http_status: int = 500

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.context = context or ErrorContext()
        self.cause = cause

    def __str__(self) -> str:
        parts = [f"[{self.code.value}] {self.message}"]
        if self.context.job_id:
            parts.append(f"(job_id={self.context.job_id})")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code.value,
            "message": self.message,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class ValidationError(ComputeLabError):
    """Submission input is missing or malformed. Caller-correctable."""

    code = ErrorCode.VALIDATION_ERROR
    http_status = 400

    def __init__(
        self,
        message: str = "Invalid job submission",
        *,
        fields: list[str] | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.fields = list(fields or [])

    @classmethod
    def missing(cls, fields: list[str]) -> ValidationError:
        """Build the error for absent required fields."""
        return cls(
            f"Missing required fields: {', '.join(fields)}",
            fields=fields,
            code=ErrorCode.MISSING_FIELD,
            context=ErrorContext(operation="submit"),
        )


class NotFoundError(ComputeLabError):
    """Referenced job does not exist."""

    code = ErrorCode.NOT_FOUND
    http_status = 404

    def __init__(
        self,
        message: str = "Job not found",
        *,
        job_id: str | None = None,
        **kwargs,
    ):
        context = kwargs.pop("context", None) or ErrorContext(job_id=job_id)
        super().__init__(message, context=context, **kwargs)
        self.job_id = job_id


class InvalidTransitionError(ComputeLabError):
    """Requested status change is not allowed from the job's current status."""

    code = ErrorCode.INVALID_TRANSITION
    http_status = 409


class InternalError(ComputeLabError):
    """Invariant violation detected inside the scheduler or aggregator."""

    code = ErrorCode.INTERNAL_ERROR
    http_status = 500


def wrap_unexpected(
    error: Exception,
    *,
    job_id: str | None = None,
    operation: str | None = None,
) -> ComputeLabError:
    """Wrap any exception as a ComputeLabError, leaving ours untouched."""
    if isinstance(error, ComputeLabError):
        return error
    return InternalError(
        f"{type(error).__name__}: {error}",
        context=ErrorContext(job_id=job_id, operation=operation),
        cause=error,
    )


__all__ = [
    "ErrorCode",
    "ErrorContext",
    "ComputeLabError",
    "ValidationError",
    "NotFoundError",
    "InvalidTransitionError",
    "InternalError",
    "wrap_unexpected",
]
