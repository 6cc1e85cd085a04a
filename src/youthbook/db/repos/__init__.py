"""Repository layer.

These repositories encapsulate common query patterns for the app's entities.
Keep them focused on persistence/query shaping; business logic lives in services.
"""

from youthbook.db.repos.attendance_records import AttendanceRecordRepository
from youthbook.db.repos.base import BaseRepository, VersionedChange, VersionedRepository
from youthbook.db.repos.program_sessions import ProgramSessionRepository
from youthbook.db.repos.programs import ProgramRepository

__all__ = [
    "AttendanceRecordRepository",
    "BaseRepository",
    "ProgramRepository",
    "ProgramSessionRepository",
    "VersionedChange",
    "VersionedRepository",
]
