from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from youthbook.attendance import validate_attendance_fields
from youthbook.db.models import AttendanceRecord
from youthbook.db.repos.base import VersionedRepository
from youthbook.pagination import PageResult


class AttendanceRecordRepository(VersionedRepository[AttendanceRecord]):
    # One record per child per session.
    natural_key = ("session_id", "child_id")

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AttendanceRecord)

    def validate_changes(self, changes: Mapping[str, Any], *, creating: bool) -> dict[str, str]:
        return validate_attendance_fields(changes, creating=creating)

    async def get_by_session_and_child(
        self, session_id: uuid.UUID, child_id: uuid.UUID
    ) -> AttendanceRecord | None:
        result = await self.session.execute(
            select(AttendanceRecord)
            .where(
                AttendanceRecord.session_id == session_id,
                AttendanceRecord.child_id == child_id,
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_by_session(self, session_id: uuid.UUID) -> list[AttendanceRecord]:
        result = await self.session.execute(
            select(AttendanceRecord)
            .where(AttendanceRecord.session_id == session_id)
            .order_by(AttendanceRecord.child_id.asc())
        )
        return list(result.scalars().all())

    async def list_for_child_paginated(
        self,
        child_id: uuid.UUID,
        limit: int | None,
        cursor: str | None,
    ) -> PageResult[AttendanceRecord]:
        stmt = select(AttendanceRecord).where(AttendanceRecord.child_id == child_id)
        return await self.fetch_page(stmt, limit=limit, cursor=cursor)
