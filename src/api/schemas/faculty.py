"""Request/response schemas for the faculty endpoints (camelCase on the wire)."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr
from pydantic.alias_generators import to_camel
from src.domain.validation import AAT1Fields, AAT2Fields, RemedialSessionFields


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Requests ---


class AAT1CreateRequest(AAT1Fields):
    """Course link plus completion deadline."""


class AAT2CreateRequest(AAT2Fields):
    """Timed quiz; question objects are stored as given."""


class RemedialSessionCreateRequest(RemedialSessionFields):
    students: list[str] = Field(
        default_factory=list, description="Ids of the invited students"
    )


class GradeRequest(_CamelModel):
    # Strict so JSON booleans are not coerced to 1/0
    grade: StrictStr | StrictInt | StrictFloat = Field(
        ..., description="Grade to record, e.g. 'A' or 8.5"
    )


# --- Responses ---


class AAT1Response(_CamelModel):
    id: str
    course_link: str
    deadline: datetime
    faculty_id: str
    created_at: datetime | None = None


class AAT2Response(_CamelModel):
    id: str
    title: str
    questions: list[dict[str, Any]]
    start_time: datetime
    end_time: datetime
    duration: int
    faculty_id: str
    created_at: datetime | None = None


class RemedialSessionResponse(_CamelModel):
    id: str
    title: str
    description: str
    start_time: datetime
    end_time: datetime
    duration: int
    link: str
    faculty_id: str
    students: list[str]
    created_at: datetime | None = None


class StudentResponse(_CamelModel):
    id: str
    name: str
    email: str
    role: str


class SubmissionResponse(_CamelModel):
    id: str
    student_id: str
    student_name: str
    aat1_id: str
    course_title: str
    certificate: str
    grade: str | None = None
    submitted_at: datetime


class GradeResponse(_CamelModel):
    message: str
    submission_id: str
    grade: str
    graded_at: datetime | None = None
