"""Program catalog field rules.

Pure checks, shared by the program repository (per-write field constraints)
and the catalog service (whole-entity constraints after merging a change
onto the state the caller read).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from youthbook.db.models import ProgramCategory

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
AGE_RANGE_MAX_LENGTH = 50

REQUIRED_ON_CREATE = ("provider_id", "title", "description", "category", "capacity")


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_text(errors: dict[str, str], fields: Mapping[str, Any], name: str, max_length: int) -> None:
    if name not in fields:
        return
    value = fields[name]
    if not isinstance(value, str) or not value.strip():
        errors[name] = "can't be blank"
    elif len(value) > max_length:
        errors[name] = f"should be at most {max_length} character(s)"


def _check_count(errors: dict[str, str], fields: Mapping[str, Any], name: str) -> None:
    if name not in fields:
        return
    value = fields[name]
    if not _is_int(value):
        errors[name] = "must be an integer"
    elif value < 0:
        errors[name] = "must be greater than or equal to 0"


def validate_program_fields(fields: Mapping[str, Any], *, creating: bool = False) -> dict[str, str]:
    errors: dict[str, str] = {}

    if creating:
        for name in REQUIRED_ON_CREATE:
            if fields.get(name) is None:
                errors[name] = "can't be blank"

    _check_text(errors, fields, "title", TITLE_MAX_LENGTH)
    _check_text(errors, fields, "description", DESCRIPTION_MAX_LENGTH)

    if "age_range" in fields:
        age_range = fields["age_range"]
        if not isinstance(age_range, str) or len(age_range) > AGE_RANGE_MAX_LENGTH:
            errors["age_range"] = f"should be at most {AGE_RANGE_MAX_LENGTH} character(s)"

    if "category" in fields and fields["category"] is not None:
        try:
            ProgramCategory(fields["category"])
        except ValueError:
            errors["category"] = "is invalid"

    _check_count(errors, fields, "capacity")
    _check_count(errors, fields, "current_enrollment")
    _check_count(errors, fields, "price_cents")

    capacity = fields.get("capacity")
    enrollment = fields.get("current_enrollment")
    if (
        "capacity" not in errors
        and "current_enrollment" not in errors
        and _is_int(capacity)
        and _is_int(enrollment)
        and enrollment > capacity
    ):
        errors["current_enrollment"] = "cannot exceed capacity"

    return errors
