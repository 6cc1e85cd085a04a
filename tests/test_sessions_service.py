from __future__ import annotations

import uuid
from datetime import date, time

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

import youthbook.db as db
from youthbook.db.models import SessionStatus, utcnow
from youthbook.db.repos import (
    AttendanceRecordRepository,
    ProgramRepository,
    ProgramSessionRepository,
)
from youthbook.errors import ConflictError, NotFoundError, ValidationError
from youthbook.services.sessions import (
    list_sessions,
    remove_session,
    schedule_session,
    session_roster,
    update_session,
)
from youthbook.testing.factories import (
    create_attendance_records,
    create_program_session,
    create_programs,
)

SLOT = {"session_date": date(2026, 4, 6), "start_time": time(9, 0), "end_time": time(12, 0)}


@pytest.mark.asyncio
async def test_schedule_and_list_sessions(db_session: AsyncSession) -> None:
    (program,) = await create_programs(db_session, 1)

    later = await schedule_session(
        db_session, program_id=program.id, fields={**SLOT, "session_date": date(2026, 4, 8)}
    )
    earlier = await schedule_session(db_session, program_id=program.id, fields=SLOT)

    assert (earlier.version, earlier.status) == (1, SessionStatus.scheduled)
    listed = await list_sessions(db_session, program_id=program.id)
    assert [s.id for s in listed] == [earlier.id, later.id]


@pytest.mark.asyncio
async def test_schedule_rejects_end_before_start(db_session: AsyncSession) -> None:
    (program,) = await create_programs(db_session, 1)

    with pytest.raises(ValidationError) as excinfo:
        await schedule_session(
            db_session, program_id=program.id, fields={**SLOT, "end_time": time(8, 0)}
        )

    assert "end_time" in excinfo.value.errors


@pytest.mark.asyncio
async def test_schedule_for_archived_or_missing_program(db_session: AsyncSession) -> None:
    (program,) = await create_programs(db_session, 1)
    program_id = program.id
    await ProgramRepository(db_session).update_versioned(program_id, 1, {"archived_at": utcnow()})

    with pytest.raises(ValidationError):
        await schedule_session(db_session, program_id=program_id, fields=SLOT)
    with pytest.raises(NotFoundError):
        await schedule_session(db_session, program_id=uuid.uuid4(), fields=SLOT)


@pytest.mark.asyncio
async def test_update_checks_new_end_against_stored_start(db_session: AsyncSession) -> None:
    program_session = await create_program_session(db_session)

    with pytest.raises(ValidationError):
        await update_session(
            db_session,
            session_id=program_session.id,
            expected_version=1,
            changes={"end_time": time(14, 0)},
        )

    updated = await update_session(
        db_session,
        session_id=program_session.id,
        expected_version=1,
        changes={"status": SessionStatus.in_progress},
    )
    assert (updated.version, updated.status) == (2, SessionStatus.in_progress)


@pytest.mark.asyncio
async def test_remove_session_is_version_checked(db_session: AsyncSession) -> None:
    program_session = await create_program_session(db_session)
    session_id = program_session.id

    with pytest.raises(ConflictError):
        await remove_session(db_session, session_id=session_id, expected_version=3)

    await remove_session(db_session, session_id=session_id, expected_version=1)

    async with db.SessionMaker() as verify_session:
        assert await ProgramSessionRepository(verify_session).get(session_id) is None
    with pytest.raises(NotFoundError):
        await remove_session(db_session, session_id=session_id, expected_version=1)


@pytest.mark.asyncio
async def test_sessions_with_attendance_are_kept(db_session: AsyncSession) -> None:
    program_session = await create_program_session(db_session)
    await create_attendance_records(db_session, program_session, 2)

    with pytest.raises(ValidationError):
        await remove_session(db_session, session_id=program_session.id, expected_version=1)

    roster = await session_roster(db_session, session_id=program_session.id)
    assert len(roster) == 2


@pytest.mark.parametrize("field", ["start_time", "end_time", "session_date"])
@pytest.mark.asyncio
async def test_update_rejects_blank_required_times(db_session: AsyncSession, field: str) -> None:
    program_session = await create_program_session(db_session)
    session_id = program_session.id

    with pytest.raises(ValidationError) as excinfo:
        await update_session(
            db_session, session_id=session_id, expected_version=1, changes={field: None}
        )

    assert field in excinfo.value.errors
    async with db.SessionMaker() as verify_session:
        stored = await ProgramSessionRepository(verify_session).get(session_id)
        assert stored is not None
        assert stored.version == 1


@pytest.mark.asyncio
async def test_remove_with_attendance_checks_version_before_attendance(
    db_session: AsyncSession,
) -> None:
    program_session = await create_program_session(db_session)
    session_id = program_session.id
    records = await create_attendance_records(db_session, program_session, 1)
    record_id = records[0].id

    with pytest.raises(ConflictError):
        await remove_session(db_session, session_id=session_id, expected_version=2)
    with pytest.raises(ValidationError) as excinfo:
        await remove_session(db_session, session_id=session_id, expected_version=1)

    assert "attendance" in excinfo.value.errors
    async with db.SessionMaker() as verify_session:
        stored = await ProgramSessionRepository(verify_session).get(session_id)
        assert stored is not None
        assert stored.version == 1
        kept = await AttendanceRecordRepository(verify_session).get(record_id)
        assert kept is not None
