from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Index, func
import uuid
from sillywalk.db.session import Base
from sillywalk.services.domain import utcnow


class GrantApplication(Base):
    __tablename__ = "grant_applications"
    application_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    applicant_name = Column(String(100), nullable=False, index=True)
    walk_name = Column(String(50), nullable=False)
    description = Column(Text, nullable=False)
    has_briefcase = Column(Boolean, nullable=False)
    involves_hopping = Column(Boolean, nullable=False)
    number_of_twirls = Column(Integer, nullable=False)

    submitted_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    status = Column(String(16), nullable=False)                # ApplicationStatus value
    initial_silliness_score = Column(Integer, nullable=False)  # 0..120, never recomputed

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self) -> str:
        return (f"GrantApplication(application_id={self.application_id!r}, status={self.status!r}, "
                f"initial_silliness_score={self.initial_silliness_score!r})")


# backstop for the duplicate check done before save
Index(
    "uq_applicant_walk_ci",
    func.lower(GrantApplication.applicant_name),
    func.lower(GrantApplication.walk_name),
    unique=True,
)
