"""Field validation for faculty write operations.

Payloads are accepted in camelCase (as sent by the web client) or snake_case.
Unknown keys, including any client-supplied ``facultyId``, are ignored.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any, TypeVar
from urllib.parse import urlparse

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel
from src.domain.errors import InvalidInput
from src.domain.models import as_utc

MAX_GRADE_LENGTH = 16

FieldsT = TypeVar("FieldsT", bound="_Fields")


def _check_http_url(value: str) -> str:
    value = value.strip()
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("must be an absolute http(s) URL")
    return value


class _Fields(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


class _TimedFields(_Fields):
    start_time: datetime
    end_time: datetime
    duration: int = Field(gt=0, description="Length in minutes")

    @field_validator("start_time", "end_time")
    @classmethod
    def _normalise_timestamp(cls, value: datetime) -> datetime:
        return as_utc(value)

    @model_validator(mode="after")
    def _check_window(self) -> _TimedFields:
        if self.end_time <= self.start_time:
            raise ValueError("endTime must be after startTime")
        return self


class AAT1Fields(_Fields):
    course_link: str = Field(min_length=1)
    deadline: datetime

    @field_validator("course_link")
    @classmethod
    def _check_course_link(cls, value: str) -> str:
        return _check_http_url(value)

    @field_validator("deadline")
    @classmethod
    def _normalise_deadline(cls, value: datetime) -> datetime:
        return as_utc(value)


class AAT2Fields(_TimedFields):
    title: str = Field(min_length=1, max_length=255)
    questions: list[dict[str, Any]] = Field(min_length=1)


class RemedialSessionFields(_TimedFields):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    link: str = Field(min_length=1)

    @field_validator("link")
    @classmethod
    def _check_link(cls, value: str) -> str:
        return _check_http_url(value)


def parse_fields(model: type[FieldsT], fields: Mapping[str, Any] | None) -> FieldsT:
    """Validate a raw payload, translating pydantic errors into ``InvalidInput``."""
    if fields is None:
        raise InvalidInput("Request payload is required")
    try:
        return model.model_validate(dict(fields))
    except ValidationError as exc:
        errors = exc.errors(include_url=False, include_context=False, include_input=False)
        locations = ", ".join(".".join(str(part) for part in err["loc"]) or "payload" for err in errors)
        raise InvalidInput(f"Invalid or missing fields: {locations}", errors=errors) from exc


def normalize_invitees(invitees: Iterable[Any] | None) -> list[str]:
    """De-duplicate invitee ids while keeping the order they were selected in."""
    if invitees is None:
        return []
    if isinstance(invitees, (str, bytes)):
        raise InvalidInput("students must be a list of student ids")

    seen: set[str] = set()
    result: list[str] = []
    for raw in invitees:
        if not isinstance(raw, str) or not raw.strip():
            raise InvalidInput("students must only contain non-empty string ids")
        student_id = raw.strip()
        if student_id in seen:
            continue
        seen.add(student_id)
        result.append(student_id)
    return result


def normalize_grade(grade: Any) -> str:
    if isinstance(grade, bool) or grade is None:
        raise InvalidInput("grade is required")
    if isinstance(grade, (int, float)):
        grade = str(grade)
    if not isinstance(grade, str) or not grade.strip():
        raise InvalidInput("grade is required")
    grade = grade.strip()
    if len(grade) > MAX_GRADE_LENGTH:
        raise InvalidInput(f"grade must be at most {MAX_GRADE_LENGTH} characters")
    return grade
