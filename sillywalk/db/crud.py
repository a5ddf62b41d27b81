import contextlib
import datetime as dt
import logging
from typing import Iterator, List, Optional
from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sillywalk.db.models import GrantApplication
from sillywalk.services.domain import Statistics
from sillywalk.services.errors import DuplicateApplication, StoreFailure

logger = logging.getLogger(__name__)


def create_application(db: Session, rec: GrantApplication) -> GrantApplication:
    db.add(rec); db.commit(); db.refresh(rec)
    return rec

def get_application(db: Session, application_id: str) -> GrantApplication | None:
    return db.get(GrantApplication, application_id)

def find_by_applicant_and_walk(db: Session, applicant_name: str, walk_name: str) -> GrantApplication | None:
    return (
        db.query(GrantApplication)
        .filter(func.lower(GrantApplication.applicant_name) == applicant_name.lower())
        .filter(func.lower(GrantApplication.walk_name) == walk_name.lower())
        .first()
    )

def count_recent_by_applicant(db: Session, applicant_name: str, since: dt.datetime) -> int:
    return (
        db.query(func.count(GrantApplication.application_id))
        .filter(func.lower(GrantApplication.applicant_name) == applicant_name.lower())
        .filter(GrantApplication.submitted_at >= since)
        .scalar()
    ) or 0

def find_by_min_score(db: Session, min_score: int, limit: int = 10) -> List[GrantApplication]:
    return (
        db.query(GrantApplication)
        .filter(GrantApplication.initial_silliness_score >= min_score)
        .order_by(GrantApplication.initial_silliness_score.desc(), GrantApplication.submitted_at)
        .limit(limit)
        .all()
    )

def get_statistics(db: Session, since: dt.datetime) -> Statistics:
    total, avg_score, max_score, briefcases, hoppers = (
        db.query(
            func.count(GrantApplication.application_id),
            func.avg(GrantApplication.initial_silliness_score),
            func.max(GrantApplication.initial_silliness_score),
            func.count(case((GrantApplication.has_briefcase.is_(True), 1))),
            func.count(case((GrantApplication.involves_hopping.is_(True), 1))),
        )
        .filter(GrantApplication.submitted_at >= since)
        .one()
    )
    return Statistics(
        total=total or 0,
        average_score=None if avg_score is None else round(float(avg_score), 2),
        max_score=max_score,
        briefcase_count=briefcases or 0,
        hopping_count=hoppers or 0,
    )


class SqlSubmissionStore:
    """Submission store backed by a SQLAlchemy session.

    Every call is attempted once. Database errors surface as StoreFailure,
    except a unique-index conflict on save, which means a concurrent submitter
    won the race for the same applicant and walk.
    """

    def __init__(self, db: Session):
        self.db = db

    @contextlib.contextmanager
    def _call(self, operation: str) -> Iterator[None]:
        try:
            yield
        except IntegrityError:
            self.db.rollback()
            logger.warning("Unique constraint conflict during %s", operation)
            raise DuplicateApplication("An application for this walk already exists")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Submission store %s failed: %s", operation, e.__class__.__name__)
            raise StoreFailure(f"store {operation} failed") from e

    def save(self, application: GrantApplication) -> GrantApplication:
        with self._call("save"):
            return create_application(self.db, application)

    def find_by_id(self, application_id: str) -> Optional[GrantApplication]:
        with self._call("find_by_id"):
            return get_application(self.db, application_id)

    def find_by_applicant_and_walk(self, applicant_name: str, walk_name: str) -> Optional[GrantApplication]:
        with self._call("find_by_applicant_and_walk"):
            return find_by_applicant_and_walk(self.db, applicant_name, walk_name)

    def count_recent_by_applicant(self, applicant_name: str, since: dt.datetime) -> int:
        with self._call("count_recent_by_applicant"):
            return count_recent_by_applicant(self.db, applicant_name, since)

    def find_by_min_score(self, min_score: int, limit: int = 10) -> List[GrantApplication]:
        with self._call("find_by_min_score"):
            return find_by_min_score(self.db, min_score, limit)

    def get_statistics(self, since: dt.datetime) -> Statistics:
        with self._call("get_statistics"):
            return get_statistics(self.db, since)
