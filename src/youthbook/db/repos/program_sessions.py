from __future__ import annotations

import uuid
from collections.abc import Mapping
from datetime import date, time
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from youthbook.db.models import ProgramSession, SessionStatus
from youthbook.db.repos.base import VersionedRepository


class ProgramSessionRepository(VersionedRepository[ProgramSession]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ProgramSession)

    def validate_changes(self, changes: Mapping[str, Any], *, creating: bool) -> dict[str, str]:
        errors: dict[str, str] = {}
        if creating:
            for name in ("program_id", "session_date", "start_time", "end_time"):
                if changes.get(name) is None:
                    errors[name] = "can't be blank"
        if "session_date" in changes and not isinstance(changes["session_date"], date):
            errors["session_date"] = "is invalid"
        start, end = changes.get("start_time"), changes.get("end_time")
        if isinstance(start, time) and isinstance(end, time) and end <= start:
            errors["end_time"] = "must be after start time"
        if "status" in changes:
            try:
                SessionStatus(changes["status"])
            except ValueError:
                errors["status"] = "is invalid"
        max_capacity = changes.get("max_capacity")
        if max_capacity is not None and (
            isinstance(max_capacity, bool) or not isinstance(max_capacity, int) or max_capacity < 0
        ):
            errors["max_capacity"] = "must be greater than or equal to 0"
        return errors

    async def list_for_program(self, program_id: uuid.UUID) -> list[ProgramSession]:
        result = await self.session.execute(
            select(ProgramSession)
            .where(ProgramSession.program_id == program_id)
            .order_by(ProgramSession.session_date.asc(), ProgramSession.start_time.asc())
        )
        return list(result.scalars().all())
