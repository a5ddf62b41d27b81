"""Failure kinds produced by the submission pipeline.

Every failure carries a ``public_message`` from a closed set of pre-written
strings. Anything more specific (which rule matched, which field) stays on the
exception for internal logging and is never sent to the caller.
"""

from __future__ import annotations

from typing import List, Optional

from sillywalk.services.domain import FieldViolation

SECURITY_VIOLATION = "SECURITY_VIOLATION"
VALIDATION_FAILURE = "VALIDATION_FAILURE"
DUPLICATE = "DUPLICATE"
UNEXPECTED = "UNEXPECTED"

INSUFFICIENT_DETAIL = "Description lacks sufficient detail for review"
SUBMISSION_LIMIT_EXCEEDED = "Maximum submissions exceeded for this period"
INVALID_STATISTICS_WINDOW = "Statistics window must be between 1 and 365 days"
INVALID_REQUEST_DATA = "Request contains invalid data"


class SubmissionError(Exception):
    kind = UNEXPECTED
    public_message = "An unexpected error occurred"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.public_message)
        self.detail = detail


class SecurityViolation(SubmissionError):
    kind = SECURITY_VIOLATION
    public_message = "Request cannot be processed"

    def __init__(self, subtype: str, detail: Optional[str] = None):
        super().__init__(detail or "Request contains invalid data")
        self.subtype = subtype


class ValidationFailure(SubmissionError):
    kind = VALIDATION_FAILURE

    def __init__(self, reason: str = INVALID_REQUEST_DATA, field_errors: Optional[List[FieldViolation]] = None):
        super().__init__(reason)
        self.reason = reason
        self.field_errors = list(field_errors or [])

    @property
    def public_message(self) -> str:
        return self.reason


class DuplicateApplication(SubmissionError):
    kind = DUPLICATE
    public_message = "Application already exists"


class StoreFailure(SubmissionError):
    kind = UNEXPECTED
