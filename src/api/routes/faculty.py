from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, status
from src.api.deps import get_current_principal, get_faculty_service, to_http_exception
from src.api.schemas.faculty import (
    AAT1CreateRequest,
    AAT1Response,
    AAT2CreateRequest,
    AAT2Response,
    GradeRequest,
    GradeResponse,
    RemedialSessionCreateRequest,
    RemedialSessionResponse,
    StudentResponse,
    SubmissionResponse,
)
from src.domain import AssessmentKind, Principal
from src.domain.errors import FacultyDeskError
from src.domain.services import FacultyService

router = APIRouter(prefix="/faculty", tags=["Faculty"])


@router.post("/aat1", response_model=AAT1Response, status_code=status.HTTP_201_CREATED)
async def create_aat1(
    payload: AAT1CreateRequest,
    service: FacultyService = Depends(get_faculty_service),  # noqa: B008
    principal: Principal = Depends(get_current_principal),  # noqa: B008
) -> AAT1Response:
    try:
        record = await service.create_aat1(payload.model_dump(), principal)
    except FacultyDeskError as exc:
        raise to_http_exception(exc) from exc
    return AAT1Response(**asdict(record))


@router.get("/aat1", response_model=list[AAT1Response])
async def list_aat1(
    service: FacultyService = Depends(get_faculty_service),  # noqa: B008
    principal: Principal = Depends(get_current_principal),  # noqa: B008
) -> list[AAT1Response]:
    try:
        records = await service.list_assessments(AssessmentKind.AAT1, principal)
    except FacultyDeskError as exc:
        raise to_http_exception(exc) from exc
    return [AAT1Response(**asdict(record)) for record in records]


@router.get("/aat1/submissions", response_model=list[SubmissionResponse])
async def list_aat1_submissions(
    service: FacultyService = Depends(get_faculty_service),  # noqa: B008
    principal: Principal = Depends(get_current_principal),  # noqa: B008
) -> list[SubmissionResponse]:
    """List every AAT1 submission, most recent first."""
    try:
        views = await service.list_submissions(principal)
    except FacultyDeskError as exc:
        raise to_http_exception(exc) from exc
    return [SubmissionResponse(**asdict(view)) for view in views]


@router.put("/aat1/submissions/{submission_id}/grade", response_model=GradeResponse)
async def grade_aat1_submission(
    submission_id: str,
    payload: GradeRequest,
    service: FacultyService = Depends(get_faculty_service),  # noqa: B008
    principal: Principal = Depends(get_current_principal),  # noqa: B008
) -> GradeResponse:
    """Record a grade. Re-grading overwrites the previous value."""
    try:
        record = await service.grade_submission(submission_id, payload.grade, principal)
    except FacultyDeskError as exc:
        raise to_http_exception(exc) from exc
    return GradeResponse(
        message="Grade updated successfully",
        submission_id=record.id,
        grade=record.grade or "",
        graded_at=record.graded_at,
    )


@router.get("/aat1/{aat1_id}", response_model=AAT1Response)
async def get_aat1(
    aat1_id: str,
    service: FacultyService = Depends(get_faculty_service),  # noqa: B008
    principal: Principal = Depends(get_current_principal),  # noqa: B008
) -> AAT1Response:
    try:
        record = await service.get_assessment(AssessmentKind.AAT1, aat1_id, principal)
    except FacultyDeskError as exc:
        raise to_http_exception(exc) from exc
    return AAT1Response(**asdict(record))


@router.post("/aat2", response_model=AAT2Response, status_code=status.HTTP_201_CREATED)
async def create_aat2(
    payload: AAT2CreateRequest,
    service: FacultyService = Depends(get_faculty_service),  # noqa: B008
    principal: Principal = Depends(get_current_principal),  # noqa: B008
) -> AAT2Response:
    try:
        record = await service.create_aat2(payload.model_dump(), principal)
    except FacultyDeskError as exc:
        raise to_http_exception(exc) from exc
    return AAT2Response(**asdict(record))


@router.get("/aat2", response_model=list[AAT2Response])
async def list_aat2(
    service: FacultyService = Depends(get_faculty_service),  # noqa: B008
    principal: Principal = Depends(get_current_principal),  # noqa: B008
) -> list[AAT2Response]:
    try:
        records = await service.list_assessments(AssessmentKind.AAT2, principal)
    except FacultyDeskError as exc:
        raise to_http_exception(exc) from exc
    return [AAT2Response(**asdict(record)) for record in records]


@router.get("/aat2/{aat2_id}", response_model=AAT2Response)
async def get_aat2(
    aat2_id: str,
    service: FacultyService = Depends(get_faculty_service),  # noqa: B008
    principal: Principal = Depends(get_current_principal),  # noqa: B008
) -> AAT2Response:
    try:
        record = await service.get_assessment(AssessmentKind.AAT2, aat2_id, principal)
    except FacultyDeskError as exc:
        raise to_http_exception(exc) from exc
    return AAT2Response(**asdict(record))


@router.post(
    "/remedial-sessions",
    response_model=RemedialSessionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_remedial_session(
    payload: RemedialSessionCreateRequest,
    service: FacultyService = Depends(get_faculty_service),  # noqa: B008
    principal: Principal = Depends(get_current_principal),  # noqa: B008
) -> RemedialSessionResponse:
    """
    Schedule a remedial session and invite the selected students.

    The response is returned once the session is stored; invitation emails are
    sent in the background and never affect the result.
    """
    fields = payload.model_dump(exclude={"students"})
    try:
        record = await service.create_remedial_session(fields, payload.students, principal)
    except FacultyDeskError as exc:
        raise to_http_exception(exc) from exc
    return RemedialSessionResponse(**asdict(record))


@router.get("/remedial-sessions", response_model=list[RemedialSessionResponse])
async def list_remedial_sessions(
    service: FacultyService = Depends(get_faculty_service),  # noqa: B008
    principal: Principal = Depends(get_current_principal),  # noqa: B008
) -> list[RemedialSessionResponse]:
    try:
        records = await service.list_remedial_sessions(principal)
    except FacultyDeskError as exc:
        raise to_http_exception(exc) from exc
    return [RemedialSessionResponse(**asdict(record)) for record in records]


@router.get("/remedial-sessions/{session_id}", response_model=RemedialSessionResponse)
async def get_remedial_session(
    session_id: str,
    service: FacultyService = Depends(get_faculty_service),  # noqa: B008
    principal: Principal = Depends(get_current_principal),  # noqa: B008
) -> RemedialSessionResponse:
    try:
        record = await service.get_remedial_session(session_id, principal)
    except FacultyDeskError as exc:
        raise to_http_exception(exc) from exc
    return RemedialSessionResponse(**asdict(record))


@router.get("/students", response_model=list[StudentResponse])
async def list_students(
    service: FacultyService = Depends(get_faculty_service),  # noqa: B008
    principal: Principal = Depends(get_current_principal),  # noqa: B008
) -> list[StudentResponse]:
    try:
        entries = await service.list_students(principal)
    except FacultyDeskError as exc:
        raise to_http_exception(exc) from exc
    return [StudentResponse(**asdict(entry)) for entry in entries]
