from __future__ import annotations

import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from youthbook.attendance import (
    absent_changes,
    check_in_changes,
    check_in_fields,
    check_out_changes,
    excused_changes,
    submit_changes,
)
from youthbook.db.models import AttendanceRecord, utcnow
from youthbook.db.repos import (
    AttendanceRecordRepository,
    ProgramSessionRepository,
    VersionedChange,
)
from youthbook.errors import NotFoundError, ValidationError


@dataclass(frozen=True)
class RecordRef:
    """A record id together with the version the caller last saw."""

    id: uuid.UUID
    version: int


async def record_check_in(
    session: AsyncSession,
    *,
    session_id: uuid.UUID,
    child_id: uuid.UUID,
    provider_id: uuid.UUID,
    notes: str | None = None,
    at: datetime | None = None,
) -> AttendanceRecord:
    """Check a child in, creating the attendance record on first contact.

    Safe to call concurrently for the same child and session. A record that
    has already been submitted is never overwritten.
    """
    if await ProgramSessionRepository(session).get(session_id) is None:
        raise NotFoundError("ProgramSession", {"id": session_id})
    return await AttendanceRecordRepository(session).upsert(
        {"session_id": session_id, "child_id": child_id},
        check_in_fields(at=at or utcnow(), provider_id=provider_id, notes=notes),
        conflict_where=AttendanceRecord.submitted.is_(False),
        conflict_errors={"submitted": "cannot check in a submitted record"},
    )


async def _load(repo: AttendanceRecordRepository, record_id: uuid.UUID) -> AttendanceRecord:
    record = await repo.get(record_id)
    if record is None:
        raise NotFoundError("AttendanceRecord", {"id": record_id})
    return record


async def record_check_out(
    session: AsyncSession,
    *,
    record_id: uuid.UUID,
    expected_version: int,
    provider_id: uuid.UUID,
    notes: str | None = None,
    at: datetime | None = None,
) -> AttendanceRecord:
    repo = AttendanceRecordRepository(session)
    record = await _load(repo, record_id)
    changes = check_out_changes(record, at=at or utcnow(), by=provider_id, notes=notes)
    return await repo.update_versioned(record_id, expected_version, changes)


async def mark_absent(
    session: AsyncSession, *, record_id: uuid.UUID, expected_version: int
) -> AttendanceRecord:
    repo = AttendanceRecordRepository(session)
    record = await _load(repo, record_id)
    return await repo.update_versioned(record_id, expected_version, absent_changes(record))


async def mark_excused(
    session: AsyncSession, *, record_id: uuid.UUID, expected_version: int
) -> AttendanceRecord:
    repo = AttendanceRecordRepository(session)
    record = await _load(repo, record_id)
    return await repo.update_versioned(record_id, expected_version, excused_changes(record))


async def _apply_to_batch(
    session: AsyncSession,
    refs: Sequence[RecordRef],
    transition: Callable[[AttendanceRecord], dict[str, Any]],
) -> list[AttendanceRecord]:
    if not refs:
        raise ValidationError({"records": "can't be empty"})
    ids = [ref.id for ref in refs]
    if len(set(ids)) != len(ids):
        raise ValidationError({"records": "must not contain duplicates"})

    repo = AttendanceRecordRepository(session)
    loaded = {record.id: record for record in await repo.get_many(ids)}

    changes: list[VersionedChange] = []
    for index, ref in enumerate(refs):
        record = loaded.get(ref.id)
        if record is None:
            raise NotFoundError("AttendanceRecord", {"id": ref.id}).at_batch_position(index, ref.id)
        try:
            record_changes = transition(record)
        except ValidationError as exc:
            exc.at_batch_position(index, ref.id)
            raise
        changes.append(VersionedChange(ref.id, ref.version, record_changes))

    return await repo.submit_batch(changes)


async def bulk_check_in(
    session: AsyncSession,
    *,
    records: Sequence[RecordRef],
    provider_id: uuid.UUID,
    notes: str | None = None,
    at: datetime | None = None,
) -> list[AttendanceRecord]:
    """Check in every referenced record, or none of them."""
    check_in_at = at or utcnow()
    return await _apply_to_batch(
        session,
        records,
        lambda record: check_in_changes(record, at=check_in_at, by=provider_id, notes=notes),
    )


async def submit_attendance(
    session: AsyncSession,
    *,
    records: Sequence[RecordRef],
    submitted_by: uuid.UUID,
    at: datetime | None = None,
) -> list[AttendanceRecord]:
    """Freeze a batch of finished records for payroll, or none of them."""
    submitted_at = at or utcnow()
    return await _apply_to_batch(
        session,
        records,
        lambda record: submit_changes(record, at=submitted_at, by=submitted_by),
    )
