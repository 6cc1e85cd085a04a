"""Attendance status transitions.

``expected -> checked_in -> checked_out`` is the normal flow;
``expected | checked_in -> absent | excused`` covers non-attendance and
clears any check-in/out data. Submitted records are frozen.

Each transition reads the record a caller already loaded and returns the
field changes to persist with a versioned write; it never touches the
database itself.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from youthbook.cursors import as_utc
from youthbook.db.models import AttendanceRecord, AttendanceStatus
from youthbook.errors import ValidationError

NOTES_MAX_LENGTH = 500

SUBMITTABLE_STATUSES = frozenset(
    {AttendanceStatus.checked_out, AttendanceStatus.absent, AttendanceStatus.excused}
)

_CLEARED_ON_NON_ATTENDANCE: dict[str, Any] = {
    "check_in_at": None,
    "check_in_notes": None,
    "check_in_by": None,
    "check_out_at": None,
    "check_out_notes": None,
    "check_out_by": None,
}


def _ensure_not_submitted(record: AttendanceRecord, action: str) -> None:
    if record.submitted:
        raise ValidationError({"submitted": f"cannot {action} a submitted record"})


def check_in_fields(
    *, at: datetime, provider_id: uuid.UUID, notes: str | None = None
) -> dict[str, Any]:
    """Fields written by an idempotent check-in, whether or not the record exists yet."""
    return {
        "status": AttendanceStatus.checked_in,
        "provider_id": provider_id,
        "check_in_at": at,
        "check_in_notes": notes,
        "check_in_by": provider_id,
    }


def check_in_changes(
    record: AttendanceRecord, *, at: datetime, by: uuid.UUID, notes: str | None = None
) -> dict[str, Any]:
    _ensure_not_submitted(record, "check in")
    if record.status != AttendanceStatus.expected:
        raise ValidationError({"status": f"cannot check in with status: {record.status}"})
    return {
        "status": AttendanceStatus.checked_in,
        "check_in_at": at,
        "check_in_notes": notes,
        "check_in_by": by,
    }


def check_out_changes(
    record: AttendanceRecord, *, at: datetime, by: uuid.UUID, notes: str | None = None
) -> dict[str, Any]:
    _ensure_not_submitted(record, "check out")
    if record.status != AttendanceStatus.checked_in:
        raise ValidationError({"status": f"cannot check out with status: {record.status}"})
    if record.check_in_at is not None and as_utc(at) < as_utc(record.check_in_at):
        raise ValidationError({"check_out_at": "check-out time cannot be before check-in time"})
    return {
        "status": AttendanceStatus.checked_out,
        "check_out_at": at,
        "check_out_notes": notes,
        "check_out_by": by,
    }


def _non_attendance_changes(record: AttendanceRecord, status: AttendanceStatus) -> dict[str, Any]:
    _ensure_not_submitted(record, f"mark as {status}")
    if record.status not in (AttendanceStatus.expected, AttendanceStatus.checked_in):
        raise ValidationError({"status": f"cannot mark as {status} with status: {record.status}"})
    return {"status": status, **_CLEARED_ON_NON_ATTENDANCE}


def absent_changes(record: AttendanceRecord) -> dict[str, Any]:
    return _non_attendance_changes(record, AttendanceStatus.absent)


def excused_changes(record: AttendanceRecord) -> dict[str, Any]:
    return _non_attendance_changes(record, AttendanceStatus.excused)


def submit_changes(record: AttendanceRecord, *, at: datetime, by: uuid.UUID) -> dict[str, Any]:
    _ensure_not_submitted(record, "submit")
    if record.status not in SUBMITTABLE_STATUSES:
        raise ValidationError({"status": f"cannot submit a record with status: {record.status}"})
    return {"submitted": True, "submitted_at": at, "submitted_by": by}


def validate_attendance_fields(fields: Mapping[str, Any], *, creating: bool = False) -> dict[str, str]:
    errors: dict[str, str] = {}

    if creating:
        for name in ("session_id", "child_id"):
            if fields.get(name) is None:
                errors[name] = "can't be blank"

    if "status" in fields:
        try:
            AttendanceStatus(fields["status"])
        except ValueError:
            errors["status"] = "is invalid"

    for name in ("check_in_notes", "check_out_notes"):
        notes = fields.get(name)
        if notes is not None and (not isinstance(notes, str) or len(notes) > NOTES_MAX_LENGTH):
            errors[name] = f"should be at most {NOTES_MAX_LENGTH} character(s)"

    check_in_at = fields.get("check_in_at")
    check_out_at = fields.get("check_out_at")
    if check_in_at is not None and check_out_at is not None and as_utc(check_out_at) < as_utc(check_in_at):
        errors["check_out_at"] = "check-out time cannot be before check-in time"

    if fields.get("submitted"):
        for name in ("submitted_at", "submitted_by"):
            if fields.get(name) is None:
                errors[name] = "is required when submitting"

    return errors
