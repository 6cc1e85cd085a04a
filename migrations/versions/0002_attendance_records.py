"""Attendance records, one per child per session.

Revision ID: 0002
Revises: 0001
Create Date: 2026-09-21
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None

ATTENDANCE_STATUSES = ("expected", "checked_in", "checked_out", "absent", "excused")


def upgrade() -> None:
    op.create_table(
        "attendance_records",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("inserted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("session_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("child_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("parent_id", sa.Uuid(as_uuid=True), nullable=True),
        sa.Column("provider_id", sa.Uuid(as_uuid=True), nullable=True),
        sa.Column(
            "status", sa.Enum(*ATTENDANCE_STATUSES, name="attendancestatus"), nullable=False
        ),
        sa.Column("check_in_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("check_in_notes", sa.Text(), nullable=True),
        sa.Column("check_in_by", sa.Uuid(as_uuid=True), nullable=True),
        sa.Column("check_out_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("check_out_notes", sa.Text(), nullable=True),
        sa.Column("check_out_by", sa.Uuid(as_uuid=True), nullable=True),
        sa.Column("submitted", sa.Boolean(), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("submitted_by", sa.Uuid(as_uuid=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["session_id"], ["program_sessions.id"], name="fk_attendance_session"
        ),
        # Upserts on (session_id, child_id) rely on this constraint.
        sa.UniqueConstraint("session_id", "child_id", name="uq_attendance_session_child"),
    )
    op.create_index(
        "ix_attendance_records_session_id", "attendance_records", ["session_id"], unique=False
    )
    op.create_index(
        "ix_attendance_child_inserted_at_id",
        "attendance_records",
        ["child_id", "inserted_at", "id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_attendance_child_inserted_at_id", table_name="attendance_records")
    op.drop_index("ix_attendance_records_session_id", table_name="attendance_records")
    op.drop_table("attendance_records")
    sa.Enum(name="attendancestatus").drop(op.get_bind(), checkfirst=True)
