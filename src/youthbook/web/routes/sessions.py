from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from youthbook.db import get_session
from youthbook.logging_config import log_with_fields
from youthbook.services.sessions import (
    list_sessions,
    remove_session,
    schedule_session,
    session_roster,
    update_session,
)
from youthbook.web.routes.schemas import AttendanceOut, SessionCreate, SessionOut, SessionUpdate

router = APIRouter()

logger = logging.getLogger("youthbook.catalog")


@router.get("/programs/{program_id}/sessions", response_model=list[SessionOut])
async def program_sessions(
    program_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
) -> list[SessionOut]:
    sessions = await list_sessions(session, program_id=program_id)
    return [SessionOut.model_validate(program_session) for program_session in sessions]


@router.post("/programs/{program_id}/sessions", response_model=SessionOut, status_code=201)
async def schedule_session_route(
    program_id: uuid.UUID,
    payload: SessionCreate,
    session: AsyncSession = Depends(get_session),
) -> SessionOut:
    program_session = await schedule_session(
        session, program_id=program_id, fields=payload.model_dump()
    )
    log_with_fields(
        logger,
        logging.INFO,
        "session scheduled",
        program_id=program_id,
        session_id=program_session.id,
    )
    return SessionOut.model_validate(program_session)


@router.patch("/sessions/{session_id}", response_model=SessionOut)
async def update_session_route(
    session_id: uuid.UUID,
    payload: SessionUpdate,
    session: AsyncSession = Depends(get_session),
) -> SessionOut:
    program_session = await update_session(
        session,
        session_id=session_id,
        expected_version=payload.version,
        changes=payload.model_dump(exclude_unset=True, exclude={"version"}),
    )
    return SessionOut.model_validate(program_session)


@router.delete("/sessions/{session_id}", status_code=204)
async def remove_session_route(
    session_id: uuid.UUID,
    version: int,
    session: AsyncSession = Depends(get_session),
) -> Response:
    await remove_session(session, session_id=session_id, expected_version=version)
    log_with_fields(logger, logging.INFO, "session removed", session_id=session_id)
    return Response(status_code=204)


@router.get("/sessions/{session_id}/attendance", response_model=list[AttendanceOut])
async def roster(
    session_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
) -> list[AttendanceOut]:
    records = await session_roster(session, session_id=session_id)
    return [AttendanceOut.model_validate(record) for record in records]
