from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass
from typing import Optional


class ApplicationStatus(str, enum.Enum):
    SUBMITTED = "SUBMITTED"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    PENDING_INFO = "PENDING_INFO"
    WITHDRAWN = "WITHDRAWN"

    @property
    def description(self) -> str:
        return _STATUS_DESCRIPTIONS[self]


_STATUS_DESCRIPTIONS = {
    ApplicationStatus.SUBMITTED: "Application submitted and awaiting initial assessment",
    ApplicationStatus.UNDER_REVIEW: "Application is being reviewed for silliness compliance",
    ApplicationStatus.APPROVED: "Application approved - proceeding to Grand Council review",
    ApplicationStatus.REJECTED: "Application rejected - does not meet Ministry standards",
    ApplicationStatus.PENDING_INFO: "Application pending - additional information required",
    ApplicationStatus.WITHDRAWN: "Application withdrawn by applicant",
}


@dataclass(frozen=True)
class Submission:
    """Caller-supplied application data; lives for one submit call only."""
    applicant_name: Optional[str]
    walk_name: Optional[str]
    description: Optional[str]
    has_briefcase: Optional[bool]
    involves_hopping: Optional[bool]
    number_of_twirls: Optional[int]


@dataclass(frozen=True)
class FieldViolation:
    field: str
    message: str


@dataclass(frozen=True)
class Statistics:
    total: int
    average_score: Optional[float]
    max_score: Optional[int]
    briefcase_count: int
    hopping_count: int


def utcnow() -> dt.datetime:
    """Naive UTC timestamp, the form stored in the database."""
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)
