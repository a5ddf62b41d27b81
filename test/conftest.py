import datetime as dt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sillywalk.db import models
from sillywalk.db.crud import SqlSubmissionStore
from sillywalk.db.session import Base
from sillywalk.services.domain import Submission, utcnow

VALID_DESCRIPTION = "A dignified walk with a sudden leap to the left followed by a slow shuffle and a bow."
SILLY_DESCRIPTION = (
    "A wonderfully silly walk involving briefcase swinging and synchronized hopping "
    "that embodies true gait absurdity."
)


def make_submission(**overrides) -> Submission:
    fields = dict(
        applicant_name="John Cleese",
        walk_name="The Ministry March",
        description=VALID_DESCRIPTION,
        has_briefcase=True,
        involves_hopping=False,
        number_of_twirls=2,
    )
    fields.update(overrides)
    return Submission(**fields)


def make_record(db, applicant_name="Eric Idle", walk_name="The Spam Shuffle",
                submitted_at=None, score=50, has_briefcase=False, involves_hopping=False):
    now = submitted_at or utcnow()
    rec = models.GrantApplication(
        applicant_name=applicant_name,
        walk_name=walk_name,
        description=VALID_DESCRIPTION,
        has_briefcase=has_briefcase,
        involves_hopping=involves_hopping,
        number_of_twirls=1,
        submitted_at=now,
        status="SUBMITTED",
        initial_silliness_score=score,
        created_at=now,
        updated_at=now,
    )
    db.add(rec); db.commit(); db.refresh(rec)
    return rec


def days_ago(n: int) -> dt.datetime:
    return utcnow() - dt.timedelta(days=n)


class FakeLookup:
    """Store stand-in for exercising the rule chain without a database."""

    def __init__(self, recent=0, existing=None):
        self.recent = recent
        self.existing = existing
        self.calls = []

    def count_recent_by_applicant(self, applicant_name, since):
        self.calls.append(("count_recent_by_applicant", applicant_name, since))
        return self.recent

    def find_by_applicant_and_walk(self, applicant_name, walk_name):
        self.calls.append(("find_by_applicant_and_walk", applicant_name, walk_name))
        return self.existing


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(db):
    return SqlSubmissionStore(db)


@pytest.fixture
def client(session_factory):
    from sillywalk.api.deps import get_db
    from sillywalk.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
