"""Ordered checks that gate whether a submission may be persisted.

Stages run in a fixed order and the first failure wins:

1. security scan of the free-text fields
2. character-set checks
3. description quality
4. submission frequency (store lookup)
5. duplicate applicant/walk pair (store lookup)

Each stage returns ``None`` on success or the failure to report, so stages can
be exercised one at a time.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Callable, List, Optional, Protocol

from sillywalk.logging_config import sanitize_for_logging, security_logger
from sillywalk.services import content_safety, field_validator
from sillywalk.services.content_safety import CharacterSet
from sillywalk.services.domain import Submission, utcnow
from sillywalk.services.errors import (
    INSUFFICIENT_DETAIL,
    SUBMISSION_LIMIT_EXCEEDED,
    DuplicateApplication,
    SecurityViolation,
    SubmissionError,
    ValidationFailure,
)

logger = logging.getLogger(__name__)

SUBMISSION_WINDOW_DAYS = 30
MAX_SUBMISSIONS_PER_WINDOW = 3
MIN_DESCRIPTION_LENGTH = 50
MIN_DESCRIPTION_WORDS = 10
WALK_TERMS = ("walk", "step", "gait", "movement")
TWIRL_WARNING_THRESHOLD = 50


class SubmissionLookup(Protocol):
    def count_recent_by_applicant(self, applicant_name: str, since: dt.datetime) -> int: ...

    def find_by_applicant_and_walk(self, applicant_name: str, walk_name: str): ...


def is_description_detailed(description: Optional[str]) -> bool:
    if description is None or len(description.strip()) < MIN_DESCRIPTION_LENGTH:
        return False
    if len(description.split()) < MIN_DESCRIPTION_WORDS:
        return False
    lowered = description.lower()
    return any(term in lowered for term in WALK_TERMS)


class ApplicationPolicy:
    def __init__(self, store: SubmissionLookup, clock: Callable[[], dt.datetime] = utcnow):
        self.store = store
        self.clock = clock

    @property
    def stages(self) -> List[Callable[[Submission, str], Optional[SubmissionError]]]:
        return [
            self.check_security,
            self.check_character_sets,
            self.check_description_quality,
            self.check_submission_frequency,
            self.check_duplicate,
        ]

    def evaluate(self, submission: Submission, request_id: str = "-") -> Optional[SubmissionError]:
        for stage in self.stages:
            failure = stage(submission, request_id)
            if failure is not None:
                return failure
        return None

    def check_security(self, submission: Submission, request_id: str = "-") -> Optional[SubmissionError]:
        security_logger.info("Performing security validation for requestId: %s", request_id)
        result = content_safety.scan_fields(
            submission.applicant_name, submission.walk_name, submission.description
        )
        if result.safe:
            return None
        security_logger.warning(
            "Security violation detected - Type: %s, Rule: %s, RequestId: %s",
            result.violation, result.rule, request_id,
        )
        return SecurityViolation(result.violation)

    def check_character_sets(self, submission: Submission, request_id: str = "-") -> Optional[SubmissionError]:
        subtype = field_validator.validate_character_sets(submission)
        if subtype is None:
            security_logger.info("Security validation passed for requestId: %s", request_id)
            return None
        security_logger.warning("Character set violation - Type: %s, RequestId: %s", subtype, request_id)
        return SecurityViolation(subtype)

    def check_description_quality(self, submission: Submission, request_id: str = "-") -> Optional[SubmissionError]:
        twirls = submission.number_of_twirls or 0
        if twirls > TWIRL_WARNING_THRESHOLD:
            # tolerated, flagged for reviewers only
            logger.warning("Excessive twirl count detected: %d for requestId: %s", twirls, request_id)
        if not content_safety.is_valid_character_set(submission.description, CharacterSet.DESCRIPTION):
            # tolerated, flagged for reviewers only
            logger.info("Description uses characters outside the plain description set, requestId: %s", request_id)
        if not is_description_detailed(submission.description):
            return ValidationFailure(INSUFFICIENT_DETAIL)
        return None

    def check_submission_frequency(self, submission: Submission, request_id: str = "-") -> Optional[SubmissionError]:
        since = self.clock() - dt.timedelta(days=SUBMISSION_WINDOW_DAYS)
        recent = self.store.count_recent_by_applicant(submission.applicant_name, since)
        if recent >= MAX_SUBMISSIONS_PER_WINDOW:
            logger.warning(
                "Submission frequency limit exceeded for applicant: %s (%d), requestId: %s",
                sanitize_for_logging(submission.applicant_name), recent, request_id,
            )
            return ValidationFailure(SUBMISSION_LIMIT_EXCEEDED)
        return None

    def check_duplicate(self, submission: Submission, request_id: str = "-") -> Optional[SubmissionError]:
        existing = self.store.find_by_applicant_and_walk(submission.applicant_name, submission.walk_name)
        if existing is None:
            return None
        logger.warning(
            "Duplicate application detected for applicant: %s and walk: %s, requestId: %s",
            sanitize_for_logging(submission.applicant_name),
            sanitize_for_logging(submission.walk_name),
            request_id,
        )
        return DuplicateApplication("An application for this walk already exists")
