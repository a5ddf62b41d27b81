from __future__ import annotations

from typing import List, Optional

from sillywalk.services import content_safety
from sillywalk.services.content_safety import CharacterSet
from sillywalk.services.domain import FieldViolation, Submission

INVALID_CHARACTERS = "INVALID_CHARACTERS"
CONTENT_SANITIZATION_REQUIRED = "CONTENT_SANITIZATION_REQUIRED"

# (field, label, min, max) on trimmed length
TEXT_BOUNDS = (
    ("applicant_name", "Applicant name", 2, 100),
    ("walk_name", "Walk name", 3, 50),
    ("description", "Description", 50, 1000),
)
MIN_TWIRLS = 0
MAX_TWIRLS = 100

REQUIRED_FLAGS = (
    ("has_briefcase", "Briefcase field is required"),
    ("involves_hopping", "Hopping field is required"),
    ("number_of_twirls", "Number of twirls is required"),
)


def validate(submission: Submission) -> List[FieldViolation]:
    """Structural checks: presence, trimmed lengths and the twirl range."""
    violations: List[FieldViolation] = []

    for field, label, lo, hi in TEXT_BOUNDS:
        value = getattr(submission, field)
        if value is None or not value.strip():
            violations.append(FieldViolation(field, f"{label} is required"))
        elif not lo <= len(value.strip()) <= hi:
            violations.append(FieldViolation(field, f"{label} must be between {lo} and {hi} characters"))

    for field, message in REQUIRED_FLAGS:
        if getattr(submission, field) is None:
            violations.append(FieldViolation(field, message))

    twirls = submission.number_of_twirls
    if twirls is not None:
        if twirls < MIN_TWIRLS:
            violations.append(FieldViolation("number_of_twirls", "Twirls cannot be negative"))
        elif twirls > MAX_TWIRLS:
            violations.append(FieldViolation("number_of_twirls", f"Twirls cannot exceed {MAX_TWIRLS}"))

    return violations


def validate_character_sets(submission: Submission) -> Optional[str]:
    """Return the violation subtype of the first offending field, or None."""
    if not content_safety.is_valid_character_set(submission.applicant_name, CharacterSet.NAME):
        return INVALID_CHARACTERS
    if not content_safety.is_valid_character_set(submission.walk_name, CharacterSet.WALK_NAME):
        return INVALID_CHARACTERS
    if content_safety.requires_sanitization(submission.description):
        return CONTENT_SANITIZATION_REQUIRED
    return None
