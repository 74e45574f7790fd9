"""Domain services."""

from src.domain.services.faculty import FacultyService
from src.domain.services.notifications import (
    NotificationFanout,
    ResendNotificationDispatcher,
    build_remedial_invitation,
)

__all__ = [
    "FacultyService",
    "NotificationFanout",
    "ResendNotificationDispatcher",
    "build_remedial_invitation",
]
