"""
Service exceptions.

Every error carries the HTTP status it maps to, so the exception handlers in
`app.main` can render it without a lookup table.
"""

from __future__ import annotations

from typing import Any


class ConferenceError(Exception):
    """Base exception for all service errors."""

    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# --- client errors ---


class ValidationError(ConferenceError):
    """Client payload fails structural rules."""

    status_code = 400


class AbstractValidationError(ValidationError):
    """Abstract submission rejected by the validator; carries the full report."""

    def __init__(self, report):
        first = report.errors[0]
        super().__init__(first.message, {"code": first.code.value, "issues": [i.to_dict() for i in report.issues]})
        self.report = report
        self.code = first.code.value


class InvalidScoreError(ValidationError):
    def __init__(self, score: Any):
        super().__init__("Score must be between 1 and 10", {"score": score})


class EmptyIdSetError(ValidationError):
    def __init__(self):
        super().__init__("IDs array is required")


class BulkTooLargeError(ValidationError):
    def __init__(self, size: int, limit: int):
        super().__init__(f"Bulk operations are limited to {limit} items", {"size": size, "limit": limit})


class InvalidStatusError(ConferenceError):
    """Status value outside the canonical set."""

    status_code = 400

    def __init__(self, status: Any):
        super().__init__("Invalid status", {"status": status})


class NotFoundError(ConferenceError):
    status_code = 404


class AbstractNotFoundError(NotFoundError):
    def __init__(self, abstract_id: Any):
        super().__init__("Abstract not found", {"abstract_id": abstract_id})


class ReviewNotFoundError(NotFoundError):
    def __init__(self, review_id: Any):
        super().__init__("Review not found", {"review_id": review_id})


class ConflictError(ConferenceError):
    # existing clients expect 400 here, not 409
    status_code = 400


class DuplicateReviewError(ConflictError):
    def __init__(self, abstract_id: Any, reviewer_email: str):
        super().__init__(
            "You have already reviewed this abstract",
            {"abstract_id": abstract_id, "reviewer_email": reviewer_email},
        )


# --- server errors ---


class StoreError(ConferenceError):
    """Underlying data-access failure. Message is redacted outside debug mode."""

    status_code = 500


class StoreTimeoutError(StoreError):
    status_code = 504

    def __init__(self, operation: str, timeout: float):
        super().__init__(f"Database operation timed out: {operation}", {"timeout_seconds": timeout})
