from __future__ import annotations

import enum
import uuid
from datetime import UTC, date, datetime, time

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    return datetime.now(UTC)


class VersionedMixin:
    """Columns shared by every record written through optimistic concurrency.

    ``version`` starts at 1 and only moves forward, by exactly one per
    successful write. ``inserted_at`` doubles as the keyset sort timestamp.
    """

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    version: Mapped[int] = mapped_column(Integer, default=1)
    inserted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class ProgramCategory(enum.StrEnum):
    sports = "sports"
    arts = "arts"
    music = "music"
    education = "education"
    life_skills = "life_skills"
    camps = "camps"
    workshops = "workshops"


class SessionStatus(enum.StrEnum):
    scheduled = "scheduled"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


class AttendanceStatus(enum.StrEnum):
    expected = "expected"
    checked_in = "checked_in"
    checked_out = "checked_out"
    absent = "absent"
    excused = "excused"


class Program(VersionedMixin, Base):
    __tablename__ = "programs"
    __table_args__ = (Index("ix_programs_inserted_at_id", "inserted_at", "id"),)

    provider_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), index=True)

    title: Mapped[str] = mapped_column(String(100))
    description: Mapped[str] = mapped_column(Text)
    category: Mapped[ProgramCategory] = mapped_column(Enum(ProgramCategory), index=True)
    age_range: Mapped[str] = mapped_column(String(50), default="")

    price_cents: Mapped[int] = mapped_column(Integer, default=0)
    pricing_period: Mapped[str] = mapped_column(String(50), default="program")

    capacity: Mapped[int] = mapped_column(Integer, default=0)
    current_enrollment: Mapped[int] = mapped_column(Integer, default=0)

    # Soft-retired programs keep their row but drop out of the catalog.
    archived_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    sessions: Mapped[list[ProgramSession]] = relationship(
        back_populates="program", cascade="all, delete-orphan"
    )


class ProgramSession(VersionedMixin, Base):
    __tablename__ = "program_sessions"

    program_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("programs.id"), index=True)

    session_date: Mapped[date] = mapped_column(Date, index=True)
    start_time: Mapped[time] = mapped_column(Time)
    end_time: Mapped[time] = mapped_column(Time)
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    max_capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[SessionStatus] = mapped_column(
        Enum(SessionStatus), default=SessionStatus.scheduled
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    program: Mapped[Program] = relationship(back_populates="sessions")
    attendance_records: Mapped[list[AttendanceRecord]] = relationship(
        back_populates="session", cascade="all, delete-orphan"
    )


class AttendanceRecord(VersionedMixin, Base):
    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("session_id", "child_id", name="uq_attendance_session_child"),
        Index("ix_attendance_child_inserted_at_id", "child_id", "inserted_at", "id"),
    )

    session_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("program_sessions.id"), index=True)
    child_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True))
    parent_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    provider_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)

    status: Mapped[AttendanceStatus] = mapped_column(
        Enum(AttendanceStatus), default=AttendanceStatus.expected
    )

    check_in_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    check_in_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    check_in_by: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)

    check_out_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    check_out_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    check_out_by: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)

    # Submitted records are frozen for payroll.
    submitted: Mapped[bool] = mapped_column(Boolean, default=False)
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    submitted_by: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)

    session: Mapped[ProgramSession] = relationship(back_populates="attendance_records")
