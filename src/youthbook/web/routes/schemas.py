from __future__ import annotations

import uuid
from datetime import date, datetime, time

from pydantic import BaseModel, ConfigDict

from youthbook.db.models import AttendanceStatus, ProgramCategory, SessionStatus


class ProgramOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    version: int
    provider_id: uuid.UUID
    title: str
    description: str
    category: ProgramCategory
    age_range: str
    price_cents: int
    pricing_period: str
    capacity: int
    current_enrollment: int
    archived_at: datetime | None
    inserted_at: datetime
    updated_at: datetime


class ProgramPage(BaseModel):
    items: list[ProgramOut]
    has_more: bool
    next_cursor: str | None
    returned_count: int
    # Set when the requested cursor was unusable and the first page was served instead.
    cursor_reset: bool = False


class ProgramCreate(BaseModel):
    provider_id: uuid.UUID
    title: str
    description: str
    category: ProgramCategory
    capacity: int
    age_range: str = ""
    price_cents: int = 0
    pricing_period: str = "program"
    current_enrollment: int = 0


class ProgramUpdate(BaseModel):
    version: int
    title: str | None = None
    description: str | None = None
    category: ProgramCategory | None = None
    age_range: str | None = None
    price_cents: int | None = None
    pricing_period: str | None = None
    capacity: int | None = None
    current_enrollment: int | None = None


class VersionIn(BaseModel):
    version: int


class AttendanceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    version: int
    session_id: uuid.UUID
    child_id: uuid.UUID
    provider_id: uuid.UUID | None
    status: AttendanceStatus
    check_in_at: datetime | None
    check_in_notes: str | None
    check_out_at: datetime | None
    check_out_notes: str | None
    submitted: bool
    submitted_at: datetime | None
    inserted_at: datetime
    updated_at: datetime


class AttendancePage(BaseModel):
    items: list[AttendanceOut]
    has_more: bool
    next_cursor: str | None
    returned_count: int


class CheckInIn(BaseModel):
    child_id: uuid.UUID
    provider_id: uuid.UUID
    notes: str | None = None


class CheckOutIn(BaseModel):
    version: int
    provider_id: uuid.UUID
    notes: str | None = None


class RecordRefIn(BaseModel):
    id: uuid.UUID
    version: int


class BulkCheckInIn(BaseModel):
    records: list[RecordRefIn]
    provider_id: uuid.UUID
    notes: str | None = None


class SubmitAttendanceIn(BaseModel):
    records: list[RecordRefIn]
    submitted_by: uuid.UUID


class SessionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    version: int
    program_id: uuid.UUID
    session_date: date
    start_time: time
    end_time: time
    location: str | None
    max_capacity: int | None
    status: SessionStatus
    notes: str | None


class SessionCreate(BaseModel):
    session_date: date
    start_time: time
    end_time: time
    location: str | None = None
    max_capacity: int | None = None
    notes: str | None = None


class SessionUpdate(BaseModel):
    version: int
    session_date: date | None = None
    start_time: time | None = None
    end_time: time | None = None
    location: str | None = None
    max_capacity: int | None = None
    status: SessionStatus | None = None
    notes: str | None = None
