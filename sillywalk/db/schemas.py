import datetime as dt
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, StrictBool, StrictInt, field_validator
from pydantic.alias_generators import to_camel
from sillywalk.services.domain import Submission


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApplicationSubmissionIn(CamelModel):
    # everything optional here; presence and bounds are checked by the field validator.
    # strict: true is not a twirl count and 1 is not a flag
    applicant_name: Optional[str] = None
    walk_name: Optional[str] = None
    description: Optional[str] = None
    has_briefcase: Optional[StrictBool] = None
    involves_hopping: Optional[StrictBool] = None
    number_of_twirls: Optional[StrictInt] = None

    def to_submission(self) -> Submission:
        return Submission(
            applicant_name=self.applicant_name,
            walk_name=self.walk_name,
            description=self.description,
            has_briefcase=self.has_briefcase,
            involves_hopping=self.involves_hopping,
            number_of_twirls=self.number_of_twirls,
        )


class ApplicationSubmissionOut(CamelModel):
    application_id: str
    status: str
    submitted_at: dt.datetime
    initial_silliness_score: int
    message: str
    request_id: str


class ApplicationOut(CamelModel):
    application_id: str
    applicant_name: str
    walk_name: str
    description: str
    has_briefcase: bool
    involves_hopping: bool
    number_of_twirls: int
    status: str
    submitted_at: dt.datetime
    initial_silliness_score: int

    model_config = ConfigDict(from_attributes=True)

    @field_validator("status", mode="before")
    @classmethod
    def lowercase_status(cls, v):
        return str(v).lower()


class StatisticsOut(CamelModel):
    days: int
    total: int
    average_score: Optional[float] = None
    max_score: Optional[int] = None
    briefcase_count: int
    hopping_count: int


class HealthOut(BaseModel):
    status: str
    description: str


class FieldErrorOut(BaseModel):
    field: str
    message: str


class ErrorResponse(CamelModel):
    timestamp: dt.datetime
    status: int
    error: str
    message: str
    path: str
    request_id: str
    field_errors: Optional[List[FieldErrorOut]] = None
