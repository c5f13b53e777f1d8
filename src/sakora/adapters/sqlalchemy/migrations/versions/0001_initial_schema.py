"""Shadow ledger, audit trail and course management tables

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-17 12:00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from sakora.adapters.sqlalchemy.mappings import MembershipModeType, UTCDateTime

revision: str = "0001_initial_schema"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "shadow_membership",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("user_key", sa.String(length=255), nullable=False),
        sa.Column("container_key", sa.String(length=255), nullable=False),
        sa.Column("mode", MembershipModeType, nullable=False),
        sa.Column("role", sa.String(length=255), nullable=False),
        sa.Column("last_seen_stamp", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_shadow_membership")),
    )
    op.create_index(
        "ix_shadow_membership_lookup",
        "shadow_membership",
        ["mode", "user_key", "container_key"],
    )
    op.create_index(
        "ix_shadow_membership_stamp",
        "shadow_membership",
        ["mode", "last_seen_stamp"],
    )

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("component", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_audit_log")),
    )

    op.create_table(
        "academic_session",
        sa.Column("key", sa.String(length=255), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=True),
        sa.Column("is_current", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("key", name=op.f("pk_academic_session")),
    )
    op.create_table(
        "course_offering",
        sa.Column("key", sa.String(length=255), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=True),
        sa.Column("session_key", sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(
            ["session_key"],
            ["academic_session.key"],
            name=op.f("fk_course_offering_session_key_academic_session"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("key", name=op.f("pk_course_offering")),
    )
    op.create_table(
        "enrollment_set",
        sa.Column("key", sa.String(length=255), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=255), nullable=False),
        sa.Column("default_credits", sa.String(length=32), nullable=True),
        sa.Column("course_offering_key", sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint("key", name=op.f("pk_enrollment_set")),
    )
    op.create_table(
        "section",
        sa.Column("key", sa.String(length=255), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=255), nullable=True),
        sa.Column("course_offering_key", sa.String(length=255), nullable=True),
        sa.Column("enrollment_set_key", sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(
            ["course_offering_key"],
            ["course_offering.key"],
            name=op.f("fk_section_course_offering_key_course_offering"),
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["enrollment_set_key"],
            ["enrollment_set.key"],
            name=op.f("fk_section_enrollment_set_key_enrollment_set"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("key", name=op.f("pk_section")),
    )
    op.create_table(
        "official_instructor",
        sa.Column("enrollment_set_key", sa.String(length=255), nullable=False),
        sa.Column("user_key", sa.String(length=255), nullable=False),
        sa.ForeignKeyConstraint(
            ["enrollment_set_key"],
            ["enrollment_set.key"],
            name=op.f("fk_official_instructor_enrollment_set_key_enrollment_set"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint(
            "enrollment_set_key", "user_key", name=op.f("pk_official_instructor")
        ),
    )
    op.create_table(
        "section_membership",
        sa.Column("section_key", sa.String(length=255), nullable=False),
        sa.Column("user_key", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=255), nullable=False),
        sa.ForeignKeyConstraint(
            ["section_key"],
            ["section.key"],
            name=op.f("fk_section_membership_section_key_section"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("section_key", "user_key", name=op.f("pk_section_membership")),
    )
    op.create_table(
        "course_offering_membership",
        sa.Column("course_offering_key", sa.String(length=255), nullable=False),
        sa.Column("user_key", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=255), nullable=False),
        sa.ForeignKeyConstraint(
            ["course_offering_key"],
            ["course_offering.key"],
            name=op.f("fk_course_offering_membership_course_offering_key_course_offering"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint(
            "course_offering_key", "user_key", name=op.f("pk_course_offering_membership")
        ),
    )
    op.create_table(
        "enrollment",
        sa.Column("enrollment_set_key", sa.String(length=255), nullable=False),
        sa.Column("user_key", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=255), nullable=False),
        sa.Column("credits", sa.String(length=32), nullable=True),
        sa.Column("grading_scheme", sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(
            ["enrollment_set_key"],
            ["enrollment_set.key"],
            name=op.f("fk_enrollment_enrollment_set_key_enrollment_set"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("enrollment_set_key", "user_key", name=op.f("pk_enrollment")),
    )


def downgrade() -> None:
    op.drop_table("enrollment")
    op.drop_table("course_offering_membership")
    op.drop_table("section_membership")
    op.drop_table("official_instructor")
    op.drop_table("section")
    op.drop_table("enrollment_set")
    op.drop_table("course_offering")
    op.drop_table("academic_session")
    op.drop_table("audit_log")
    op.drop_index("ix_shadow_membership_stamp", table_name="shadow_membership")
    op.drop_index("ix_shadow_membership_lookup", table_name="shadow_membership")
    op.drop_table("shadow_membership")
