from youthbook.services.attendance import (
    RecordRef,
    bulk_check_in,
    mark_absent,
    mark_excused,
    record_check_in,
    record_check_out,
    submit_attendance,
)
from youthbook.services.catalog import (
    archive_program,
    browse_programs,
    create_program,
    update_program,
)
from youthbook.services.sessions import (
    list_sessions,
    remove_session,
    schedule_session,
    session_roster,
    update_session,
)

__all__ = [
    "RecordRef",
    "archive_program",
    "browse_programs",
    "bulk_check_in",
    "create_program",
    "list_sessions",
    "mark_absent",
    "mark_excused",
    "record_check_in",
    "record_check_out",
    "remove_session",
    "schedule_session",
    "session_roster",
    "submit_attendance",
    "update_program",
    "update_session",
]
