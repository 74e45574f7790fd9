"""SQLAlchemy-backed stores and the user directory."""

from src.infrastructure.repositories.assessments import AssessmentRepository
from src.infrastructure.repositories.directory import DirectoryRepository
from src.infrastructure.repositories.remedial_sessions import RemedialSessionRepository
from src.infrastructure.repositories.submissions import SubmissionRepository

__all__ = [
    "AssessmentRepository",
    "DirectoryRepository",
    "RemedialSessionRepository",
    "SubmissionRepository",
]
