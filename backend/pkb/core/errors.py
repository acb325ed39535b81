from __future__ import annotations

from typing import Any


class PKBError(Exception):
    """Base class for knowledge base errors surfaced to callers.

    Each subclass carries the HTTP status and machine-readable error type the
    transport layer reports; `details` holds structured context (ids, models).
    """

    status_code: int = 500
    error_type: str = "internal_error"
    message: str = "An unexpected error occurred"

    def __init__(self, message: str | None = None, **details: Any) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.error_type,
            "message": self.message,
            "details": self.details,
        }


class NotFound(PKBError):
    """Content or tag id does not exist."""

    status_code = 404
    error_type = "not_found"
    message = "Resource not found"


class ValidationError(PKBError):
    """Malformed request."""

    status_code = 400
    error_type = "validation_error"
    message = "Invalid input"


class StoreFailure(PKBError):
    """The relational store rejected or failed an operation; the transaction was rolled back."""

    status_code = 500
    error_type = "store_failure"
    message = "Storage operation failed"


class GeneratorFailure(PKBError):
    """An embedding or summarization call failed or returned nothing."""

    status_code = 502
    error_type = "generator_failure"
    message = "Generator call failed"


class GeneratorTimeout(GeneratorFailure):
    status_code = 504
    error_type = "generator_timeout"
    message = "Generator call timed out"
