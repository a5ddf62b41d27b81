"""Top-level entry point for grant application submissions.

``submit`` is strictly sequential: structural validation, the rule chain,
scoring, status assignment and a single save. Nothing is written unless every
check has passed, so a failure never needs compensating.
"""

from __future__ import annotations

import datetime as dt
import logging
import time
import uuid
from typing import Callable, List, Optional, Protocol

from sillywalk.db.models import GrantApplication
from sillywalk.logging_config import sanitize_for_logging
from sillywalk.services import field_validator, scoring
from sillywalk.services.domain import ApplicationStatus, Statistics, Submission, utcnow
from sillywalk.services.errors import INVALID_REQUEST_DATA, INVALID_STATISTICS_WINDOW, ValidationFailure
from sillywalk.services.policy import ApplicationPolicy, SubmissionLookup

logger = logging.getLogger(__name__)

MIN_SILLINESS_THRESHOLD = 40
MAX_STATISTICS_DAYS = 365
MAX_TOP_LIMIT = 100


class SubmissionStore(SubmissionLookup, Protocol):
    def save(self, application: GrantApplication) -> GrantApplication: ...

    def find_by_id(self, application_id: str) -> Optional[GrantApplication]: ...

    def find_by_min_score(self, min_score: int, limit: int = 10) -> List[GrantApplication]: ...

    def get_statistics(self, since: dt.datetime) -> Statistics: ...


def generate_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:8]}_{int(time.time() * 1000)}"


def initial_status(score: int) -> ApplicationStatus:
    if score >= MIN_SILLINESS_THRESHOLD:
        return ApplicationStatus.SUBMITTED
    return ApplicationStatus.PENDING_INFO


class ApplicationOrchestrator:
    def __init__(
        self,
        store: SubmissionStore,
        policy: Optional[ApplicationPolicy] = None,
        clock: Callable[[], dt.datetime] = utcnow,
    ):
        self.store = store
        self.clock = clock
        self.policy = policy or ApplicationPolicy(store, clock=clock)

    def submit(self, submission: Submission, request_id: str) -> GrantApplication:
        """Validate, score and persist a submission.

        Raises a ``SubmissionError`` subclass on the first failed check; store
        errors propagate as ``StoreFailure``.
        """
        logger.info(
            "Processing application submission for applicant: %s with requestId: %s",
            sanitize_for_logging(submission.applicant_name), request_id,
        )

        violations = field_validator.validate(submission)
        if violations:
            # an attack is reported as such even when the payload is also malformed
            threat = self.policy.check_security(submission, request_id)
            if threat is not None:
                raise threat
            logger.warning(
                "Structural validation failed for requestId: %s (%s)",
                request_id, ", ".join(v.field for v in violations),
            )
            raise ValidationFailure(INVALID_REQUEST_DATA, violations)

        failure = self.policy.evaluate(submission, request_id)
        if failure is not None:
            raise failure

        score = scoring.score_submission(submission)
        status = initial_status(score)
        if status is ApplicationStatus.PENDING_INFO:
            logger.info("Application requires additional review due to low silliness score: %d", score)
        logger.debug("Initial status %s: %s", status.value, status.description)

        now = self.clock()
        application = GrantApplication(
            application_id=str(uuid.uuid4()),
            applicant_name=submission.applicant_name,
            walk_name=submission.walk_name,
            description=submission.description,
            has_briefcase=submission.has_briefcase,
            involves_hopping=submission.involves_hopping,
            number_of_twirls=submission.number_of_twirls,
            submitted_at=now,
            status=status.value,
            initial_silliness_score=score,
            created_at=now,
            updated_at=now,
        )
        saved = self.store.save(application)

        logger.info(
            "Successfully submitted application %s for applicant: %s with silliness score: %d",
            saved.application_id, sanitize_for_logging(saved.applicant_name), saved.initial_silliness_score,
        )
        return saved

    def get_by_id(self, application_id: str) -> Optional[GrantApplication]:
        try:
            key = str(uuid.UUID(str(application_id)))
        except ValueError:
            return None
        return self.store.find_by_id(key)

    def get_statistics(self, since_days: int) -> Statistics:
        if not 1 <= since_days <= MAX_STATISTICS_DAYS:
            raise ValidationFailure(INVALID_STATISTICS_WINDOW)
        return self.store.get_statistics(self.clock() - dt.timedelta(days=since_days))

    def get_top_applications(self, min_score: int = MIN_SILLINESS_THRESHOLD, limit: int = 10) -> List[GrantApplication]:
        if not scoring.MIN_SCORE <= min_score <= scoring.MAX_SCORE or not 1 <= limit <= MAX_TOP_LIMIT:
            raise ValidationFailure(INVALID_REQUEST_DATA)
        return self.store.find_by_min_score(min_score, limit)
