"""Catalog schema: programs and their sessions.

Revision ID: 0001
Revises:
Create Date: 2026-09-14

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

PROGRAM_CATEGORIES = (
    "sports",
    "arts",
    "music",
    "education",
    "life_skills",
    "camps",
    "workshops",
)
SESSION_STATUSES = ("scheduled", "in_progress", "completed", "cancelled")


def _versioned_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("inserted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "programs",
        *_versioned_columns(),
        sa.Column("provider_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "category", sa.Enum(*PROGRAM_CATEGORIES, name="programcategory"), nullable=False
        ),
        sa.Column("age_range", sa.String(length=50), nullable=False),
        sa.Column("price_cents", sa.Integer(), nullable=False),
        sa.Column("pricing_period", sa.String(length=50), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("current_enrollment", sa.Integer(), nullable=False),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_programs_provider_id", "programs", ["provider_id"], unique=False)
    op.create_index("ix_programs_category", "programs", ["category"], unique=False)
    op.create_index("ix_programs_inserted_at_id", "programs", ["inserted_at", "id"], unique=False)

    op.create_table(
        "program_sessions",
        *_versioned_columns(),
        sa.Column("program_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("session_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("location", sa.String(length=200), nullable=True),
        sa.Column("max_capacity", sa.Integer(), nullable=True),
        sa.Column("status", sa.Enum(*SESSION_STATUSES, name="sessionstatus"), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["program_id"], ["programs.id"], name="fk_session_program"),
    )
    op.create_index(
        "ix_program_sessions_program_id", "program_sessions", ["program_id"], unique=False
    )
    op.create_index(
        "ix_program_sessions_session_date", "program_sessions", ["session_date"], unique=False
    )


def downgrade() -> None:
    op.drop_index("ix_program_sessions_session_date", table_name="program_sessions")
    op.drop_index("ix_program_sessions_program_id", table_name="program_sessions")
    op.drop_table("program_sessions")

    op.drop_index("ix_programs_inserted_at_id", table_name="programs")
    op.drop_index("ix_programs_category", table_name="programs")
    op.drop_index("ix_programs_provider_id", table_name="programs")
    op.drop_table("programs")

    sa.Enum(name="sessionstatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="programcategory").drop(op.get_bind(), checkfirst=True)
