from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from youthbook.catalog import validate_program_fields
from youthbook.db.models import Program, ProgramCategory, utcnow
from youthbook.db.repos import ProgramRepository
from youthbook.errors import NotFoundError, ValidationError
from youthbook.pagination import PageResult


async def browse_programs(
    session: AsyncSession,
    *,
    limit: int | None,
    cursor: str | None,
    category: ProgramCategory | None = None,
) -> PageResult[Program]:
    return await ProgramRepository(session).list_paginated(limit, cursor, category)


async def create_program(session: AsyncSession, fields: Mapping[str, Any]) -> Program:
    return await ProgramRepository(session).create(fields)


async def update_program(
    session: AsyncSession,
    *,
    program_id: uuid.UUID,
    expected_version: int,
    changes: Mapping[str, Any],
) -> Program:
    """Apply ``changes`` to the program the caller saw at ``expected_version``.

    Capacity rules span two fields, so they are checked against the current
    row merged with ``changes``. Whether the write happens is still decided by
    the versioned update alone.
    """
    repo = ProgramRepository(session)
    current = await repo.get_by_id(program_id)
    if current is None:
        raise NotFoundError("Program", {"id": program_id})
    if current.archived_at is not None:
        raise ValidationError({"archived_at": "archived programs cannot be edited"})

    merged = {
        "capacity": current.capacity,
        "current_enrollment": current.current_enrollment,
        **changes,
    }
    errors = validate_program_fields(merged)
    if errors:
        raise ValidationError(errors)

    return await repo.update_versioned(program_id, expected_version, changes)


async def archive_program(
    session: AsyncSession, *, program_id: uuid.UUID, expected_version: int
) -> Program:
    repo = ProgramRepository(session)
    current = await repo.get_by_id(program_id)
    if current is None:
        raise NotFoundError("Program", {"id": program_id})
    if current.archived_at is not None:
        raise ValidationError({"archived_at": "program is already archived"})
    return await repo.update_versioned(program_id, expected_version, {"archived_at": utcnow()})
