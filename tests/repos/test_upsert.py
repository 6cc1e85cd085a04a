from __future__ import annotations

import asyncio
import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

import youthbook.db as db
from youthbook.db.models import AttendanceRecord, AttendanceStatus
from youthbook.db.repos import AttendanceRecordRepository, ProgramRepository
from youthbook.errors import ValidationError
from youthbook.testing.factories import create_program_session


async def _count(session_id: uuid.UUID, child_id: uuid.UUID) -> int:
    async with db.SessionMaker() as verify_session:
        count = await verify_session.scalar(
            select(func.count())
            .select_from(AttendanceRecord)
            .where(
                AttendanceRecord.session_id == session_id,
                AttendanceRecord.child_id == child_id,
            )
        )
        return int(count or 0)


@pytest.mark.asyncio
async def test_upsert_inserts_at_version_one(db_session: AsyncSession) -> None:
    program_session = await create_program_session(db_session)
    child_id = uuid.uuid4()

    record = await AttendanceRecordRepository(db_session).upsert(
        {"session_id": program_session.id, "child_id": child_id},
        {"status": AttendanceStatus.checked_in, "check_in_notes": "first"},
    )

    assert record.version == 1
    assert record.status == AttendanceStatus.checked_in
    assert await _count(program_session.id, child_id) == 1


@pytest.mark.asyncio
async def test_upsert_overwrites_existing_row_and_bumps_version(db_session: AsyncSession) -> None:
    program_session = await create_program_session(db_session)
    key = {"session_id": program_session.id, "child_id": uuid.uuid4()}
    repo = AttendanceRecordRepository(db_session)

    first = await repo.upsert(key, {"status": AttendanceStatus.checked_in, "check_in_notes": "a"})
    second = await repo.upsert(key, {"status": AttendanceStatus.checked_in, "check_in_notes": "b"})

    assert second.id == first.id
    assert second.version == 2
    assert second.check_in_notes == "b"

    async with db.SessionMaker() as verify_session:
        stored = await AttendanceRecordRepository(verify_session).get_by_session_and_child(
            key["session_id"], key["child_id"]
        )
        assert stored is not None
        assert (stored.version, stored.check_in_notes) == (2, "b")


@pytest.mark.asyncio
async def test_concurrent_first_writers_share_one_row(db_session: AsyncSession) -> None:
    program_session = await create_program_session(db_session)
    key = {"session_id": program_session.id, "child_id": uuid.uuid4()}
    notes = [f"writer {i}" for i in range(5)]

    async def attempt(note: str) -> AttendanceRecord:
        async with db.SessionMaker() as writer_session:
            return await AttendanceRecordRepository(writer_session).upsert(
                key, {"status": AttendanceStatus.checked_in, "check_in_notes": note}
            )

    results = await asyncio.gather(*(attempt(note) for note in notes))

    assert len({record.id for record in results}) == 1
    assert sorted(record.version for record in results) == [1, 2, 3, 4, 5]
    assert await _count(key["session_id"], key["child_id"]) == 1

    async with db.SessionMaker() as verify_session:
        stored = await AttendanceRecordRepository(verify_session).get_by_session_and_child(
            key["session_id"], key["child_id"]
        )
        assert stored is not None
        assert stored.version == 5
        last_committed = max(results, key=lambda record: record.version)
        assert stored.check_in_notes == last_committed.check_in_notes
        assert stored.check_in_notes in notes


@pytest.mark.asyncio
async def test_upsert_validation_failure_writes_nothing(db_session: AsyncSession) -> None:
    program_session = await create_program_session(db_session)
    child_id = uuid.uuid4()

    with pytest.raises(ValidationError) as excinfo:
        await AttendanceRecordRepository(db_session).upsert(
            {"session_id": program_session.id, "child_id": child_id},
            {"status": AttendanceStatus.checked_in, "check_in_notes": "x" * 501},
        )

    assert "check_in_notes" in excinfo.value.errors
    assert await _count(program_session.id, child_id) == 0


@pytest.mark.asyncio
async def test_upsert_requires_the_natural_key(db_session: AsyncSession) -> None:
    repo = AttendanceRecordRepository(db_session)

    with pytest.raises(ValueError):
        await repo.upsert({"session_id": uuid.uuid4()}, {"status": AttendanceStatus.absent})
    with pytest.raises(ValueError):
        await ProgramRepository(db_session).upsert({"id": uuid.uuid4()}, {"title": "x"})
