from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from youthbook.catalog import validate_program_fields
from youthbook.db.models import Program, ProgramCategory
from youthbook.db.repos.base import VersionedRepository
from youthbook.pagination import PageResult


class ProgramRepository(VersionedRepository[Program]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Program)

    def validate_changes(self, changes: Mapping[str, Any], *, creating: bool) -> dict[str, str]:
        return validate_program_fields(changes, creating=creating)

    async def get_by_id(self, program_id: uuid.UUID) -> Program | None:
        return await self.get(program_id)

    async def list_paginated(
        self,
        limit: int | None,
        cursor: str | None,
        category: ProgramCategory | None = None,
    ) -> PageResult[Program]:
        """Newest-first page of the live catalog, optionally for one category."""
        stmt = select(Program).where(Program.archived_at.is_(None))
        if category is not None:
            stmt = stmt.where(Program.category == category)
        return await self.fetch_page(stmt, limit=limit, cursor=cursor)
