"""Silliness scoring.

The score is the clamped sum of a handful of named terms, so each term can be
audited on its own via :func:`score_breakdown`.
"""

from __future__ import annotations

from typing import Dict, Optional

from sillywalk.services.domain import Submission

MIN_SCORE = 0
MAX_SCORE = 120

BASE_SCORE = 10
BRIEFCASE_BONUS = 20
HOPPING_BONUS = 25
POINTS_PER_TWIRL = 5
COMPLEX_TWIRL_THRESHOLD = 3
COMPLEX_TWIRL_BONUS = 10

MAX_CREATIVITY = 40
MAX_SAFETY_RISK = 15

# (keywords, bonus); any keyword in the group earns the bonus once
CREATIVITY_KEYWORDS = (
    (("silly", "absurd"), 5),
    (("ridiculous", "preposterous"), 5),
    (("ministry", "pythonesque"), 10),
)


def creativity(description: Optional[str]) -> int:
    if description is None:
        return 0
    c = 10
    if len(description) > 200:
        c += 10
    if len(description) > 500:
        c += 10
    lowered = description.lower()
    for words, bonus in CREATIVITY_KEYWORDS:
        if any(w in lowered for w in words):
            c += bonus
    return min(c, MAX_CREATIVITY)


def safety_risk(submission: Submission) -> int:
    """Deduction for risky combinations; only the first matching tier applies."""
    twirls = submission.number_of_twirls or 0
    if submission.has_briefcase and submission.involves_hopping and twirls > 10:
        risk = 15
    elif twirls > 20:
        risk = 10
    elif submission.has_briefcase and twirls > 15:
        risk = 5
    else:
        risk = 0
    return min(risk, MAX_SAFETY_RISK)


def score_breakdown(submission: Submission) -> Dict[str, int]:
    twirls = submission.number_of_twirls or 0
    return {
        "base": BASE_SCORE,
        "briefcase": BRIEFCASE_BONUS if submission.has_briefcase else 0,
        "hopping": HOPPING_BONUS if submission.involves_hopping else 0,
        "twirls": POINTS_PER_TWIRL * twirls,
        "complex_twirls": COMPLEX_TWIRL_BONUS if twirls > COMPLEX_TWIRL_THRESHOLD else 0,
        "creativity": creativity(submission.description),
        "safety_risk": -safety_risk(submission),
    }


def clamp(value: int, lo: int = MIN_SCORE, hi: int = MAX_SCORE) -> int:
    return max(lo, min(hi, value))


def score_submission(submission: Submission) -> int:
    return clamp(sum(score_breakdown(submission).values()))
