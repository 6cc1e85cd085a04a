from __future__ import annotations

from fastapi import APIRouter

from youthbook.web.routes.attendance import router as attendance_router
from youthbook.web.routes.programs import router as programs_router
from youthbook.web.routes.sessions import router as sessions_router

router = APIRouter()
router.include_router(programs_router)
router.include_router(sessions_router)
router.include_router(attendance_router)
