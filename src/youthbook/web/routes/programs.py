from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from youthbook.db import get_session
from youthbook.db.models import ProgramCategory
from youthbook.errors import InvalidCursor
from youthbook.logging_config import log_with_fields
from youthbook.services.catalog import (
    archive_program,
    browse_programs,
    create_program,
    update_program,
)
from youthbook.web.routes.schemas import (
    ProgramCreate,
    ProgramOut,
    ProgramPage,
    ProgramUpdate,
    VersionIn,
)

router = APIRouter()

logger = logging.getLogger("youthbook.catalog")


@router.get("/programs", response_model=ProgramPage)
async def list_programs(
    limit: int | None = None,
    cursor: str | None = None,
    category: ProgramCategory | None = None,
    session: AsyncSession = Depends(get_session),
) -> ProgramPage:
    cursor_reset = False
    try:
        page = await browse_programs(session, limit=limit, cursor=cursor, category=category)
    except InvalidCursor as exc:
        # A stale or mangled "load more" link starts the listing over.
        log_with_fields(
            logger,
            logging.INFO,
            "invalid catalog cursor; serving first page",
            reason=exc.reason,
        )
        page = await browse_programs(session, limit=limit, cursor=None, category=category)
        cursor_reset = True

    return ProgramPage(
        items=[ProgramOut.model_validate(program) for program in page.items],
        has_more=page.has_more,
        next_cursor=page.next_cursor,
        returned_count=page.returned_count,
        cursor_reset=cursor_reset,
    )


@router.post("/programs", response_model=ProgramOut, status_code=201)
async def create_program_route(
    payload: ProgramCreate,
    session: AsyncSession = Depends(get_session),
) -> ProgramOut:
    program = await create_program(session, payload.model_dump())
    log_with_fields(
        logger,
        logging.INFO,
        "program created",
        program_id=program.id,
        provider_id=program.provider_id,
    )
    return ProgramOut.model_validate(program)


@router.patch("/programs/{program_id}", response_model=ProgramOut)
async def update_program_route(
    program_id: uuid.UUID,
    payload: ProgramUpdate,
    session: AsyncSession = Depends(get_session),
) -> ProgramOut:
    changes = payload.model_dump(exclude_unset=True, exclude={"version"})
    program = await update_program(
        session,
        program_id=program_id,
        expected_version=payload.version,
        changes=changes,
    )
    log_with_fields(
        logger,
        logging.INFO,
        "program updated",
        program_id=program.id,
        version=program.version,
        fields=",".join(sorted(changes)),
    )
    return ProgramOut.model_validate(program)


@router.post("/programs/{program_id}/archive", response_model=ProgramOut)
async def archive_program_route(
    program_id: uuid.UUID,
    payload: VersionIn,
    session: AsyncSession = Depends(get_session),
) -> ProgramOut:
    program = await archive_program(
        session, program_id=program_id, expected_version=payload.version
    )
    log_with_fields(logger, logging.INFO, "program archived", program_id=program.id)
    return ProgramOut.model_validate(program)
