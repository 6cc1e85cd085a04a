from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any

from sqlalchemy import exists
from sqlalchemy.ext.asyncio import AsyncSession

from youthbook.db.models import AttendanceRecord, ProgramSession
from youthbook.db.repos import (
    AttendanceRecordRepository,
    ProgramRepository,
    ProgramSessionRepository,
)
from youthbook.errors import NotFoundError, ValidationError


async def schedule_session(
    session: AsyncSession, *, program_id: uuid.UUID, fields: Mapping[str, Any]
) -> ProgramSession:
    program = await ProgramRepository(session).get_by_id(program_id)
    if program is None:
        raise NotFoundError("Program", {"id": program_id})
    if program.archived_at is not None:
        raise ValidationError({"program_id": "archived programs cannot be scheduled"})
    return await ProgramSessionRepository(session).create({**fields, "program_id": program_id})


async def list_sessions(session: AsyncSession, *, program_id: uuid.UUID) -> list[ProgramSession]:
    return await ProgramSessionRepository(session).list_for_program(program_id)


async def update_session(
    session: AsyncSession,
    *,
    session_id: uuid.UUID,
    expected_version: int,
    changes: Mapping[str, Any],
) -> ProgramSession:
    """Reschedule or change the status of a session the caller saw at ``expected_version``.

    A new start or end time is checked against the other stored bound.
    """
    repo = ProgramSessionRepository(session)
    current = await repo.get(session_id)
    if current is None:
        raise NotFoundError("ProgramSession", {"id": session_id})

    merged = {"start_time": current.start_time, "end_time": current.end_time, **changes}
    errors = repo.validate_changes(merged, creating=False)
    if errors:
        raise ValidationError(errors)

    return await repo.update_versioned(session_id, expected_version, changes)


async def session_roster(session: AsyncSession, *, session_id: uuid.UUID) -> list[AttendanceRecord]:
    if await ProgramSessionRepository(session).get(session_id) is None:
        raise NotFoundError("ProgramSession", {"id": session_id})
    return await AttendanceRecordRepository(session).list_by_session(session_id)


async def remove_session(
    session: AsyncSession, *, session_id: uuid.UUID, expected_version: int
) -> None:
    """Hard-delete a session nobody has attended yet.

    The attendance check runs inside the ``DELETE`` itself, so a check-in
    racing the removal either lands first and blocks it or finds no session.
    """
    has_attendance = exists().where(AttendanceRecord.session_id == session_id)
    await ProgramSessionRepository(session).delete_versioned(
        session_id,
        expected_version,
        guard=~has_attendance,
        guard_errors={"attendance": "sessions with attendance cannot be removed"},
    )
