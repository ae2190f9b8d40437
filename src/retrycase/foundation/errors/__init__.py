"""Retry failure taxonomy."""

from .errors import RetryError, RetryErrorKind, RetryFailure

__all__ = ["RetryError", "RetryErrorKind", "RetryFailure"]
