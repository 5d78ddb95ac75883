"""Application-level exception types.

Domain errors raised by services and adapters, mapped to HTTP responses by
``autobrief.core.exception_handlers``. Admission rejections (rate limiting,
request validation) are not exceptions; see ``autobrief.core.admission``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    slug: str
    artifact_type: str


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class NotFoundAppError(AppError):
    """Raised when a requested book or its knowledge does not exist."""


class LLMAppError(AppError):
    """Raised when LLM provider/client operations fail."""
