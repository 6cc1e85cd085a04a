from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from youthbook.db import get_session
from youthbook.db.repos import AttendanceRecordRepository
from youthbook.logging_config import log_with_fields
from youthbook.services.attendance import (
    RecordRef,
    bulk_check_in,
    mark_absent,
    mark_excused,
    record_check_in,
    record_check_out,
    submit_attendance,
)
from youthbook.web.routes.schemas import (
    AttendanceOut,
    AttendancePage,
    BulkCheckInIn,
    CheckInIn,
    CheckOutIn,
    SubmitAttendanceIn,
    VersionIn,
)

router = APIRouter()

logger = logging.getLogger("youthbook.attendance")


@router.post("/sessions/{session_id}/check-ins", response_model=AttendanceOut)
async def check_in(
    session_id: uuid.UUID,
    payload: CheckInIn,
    session: AsyncSession = Depends(get_session),
) -> AttendanceOut:
    record = await record_check_in(
        session,
        session_id=session_id,
        child_id=payload.child_id,
        provider_id=payload.provider_id,
        notes=payload.notes,
    )
    log_with_fields(
        logger,
        logging.INFO,
        "child checked in",
        record_id=record.id,
        session_id=session_id,
        version=record.version,
    )
    return AttendanceOut.model_validate(record)


@router.post("/attendance/{record_id}/check-out", response_model=AttendanceOut)
async def check_out(
    record_id: uuid.UUID,
    payload: CheckOutIn,
    session: AsyncSession = Depends(get_session),
) -> AttendanceOut:
    record = await record_check_out(
        session,
        record_id=record_id,
        expected_version=payload.version,
        provider_id=payload.provider_id,
        notes=payload.notes,
    )
    log_with_fields(logger, logging.INFO, "child checked out", record_id=record.id)
    return AttendanceOut.model_validate(record)


@router.post("/attendance/{record_id}/absent", response_model=AttendanceOut)
async def absent(
    record_id: uuid.UUID,
    payload: VersionIn,
    session: AsyncSession = Depends(get_session),
) -> AttendanceOut:
    record = await mark_absent(session, record_id=record_id, expected_version=payload.version)
    return AttendanceOut.model_validate(record)


@router.post("/attendance/{record_id}/excused", response_model=AttendanceOut)
async def excused(
    record_id: uuid.UUID,
    payload: VersionIn,
    session: AsyncSession = Depends(get_session),
) -> AttendanceOut:
    record = await mark_excused(session, record_id=record_id, expected_version=payload.version)
    return AttendanceOut.model_validate(record)


@router.post("/attendance/bulk-check-in", response_model=list[AttendanceOut])
async def bulk_check_in_route(
    payload: BulkCheckInIn,
    session: AsyncSession = Depends(get_session),
) -> list[AttendanceOut]:
    records = await bulk_check_in(
        session,
        records=[RecordRef(id=ref.id, version=ref.version) for ref in payload.records],
        provider_id=payload.provider_id,
        notes=payload.notes,
    )
    log_with_fields(logger, logging.INFO, "bulk check-in committed", count=len(records))
    return [AttendanceOut.model_validate(record) for record in records]


@router.post("/attendance/submit", response_model=list[AttendanceOut])
async def submit_route(
    payload: SubmitAttendanceIn,
    session: AsyncSession = Depends(get_session),
) -> list[AttendanceOut]:
    records = await submit_attendance(
        session,
        records=[RecordRef(id=ref.id, version=ref.version) for ref in payload.records],
        submitted_by=payload.submitted_by,
    )
    log_with_fields(
        logger,
        logging.INFO,
        "attendance submitted",
        count=len(records),
        submitted_by=payload.submitted_by,
    )
    return [AttendanceOut.model_validate(record) for record in records]


@router.get("/children/{child_id}/attendance", response_model=AttendancePage)
async def child_attendance(
    child_id: uuid.UUID,
    limit: int | None = None,
    cursor: str | None = None,
    session: AsyncSession = Depends(get_session),
) -> AttendancePage:
    page = await AttendanceRecordRepository(session).list_for_child_paginated(
        child_id, limit, cursor
    )
    return AttendancePage(
        items=[AttendanceOut.model_validate(record) for record in page.items],
        has_more=page.has_more,
        next_cursor=page.next_cursor,
        returned_count=page.returned_count,
    )
