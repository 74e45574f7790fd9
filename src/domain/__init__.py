"""Domain layer: records, policy and orchestration services."""

from src.domain.models import (
    AAT1Record,
    AAT2Record,
    AssessmentKind,
    DirectoryEntry,
    Principal,
    RemedialSessionRecord,
    SubmissionRecord,
    SubmissionView,
)

__all__ = [
    "AAT1Record",
    "AAT2Record",
    "AssessmentKind",
    "DirectoryEntry",
    "Principal",
    "RemedialSessionRecord",
    "SubmissionRecord",
    "SubmissionView",
]
