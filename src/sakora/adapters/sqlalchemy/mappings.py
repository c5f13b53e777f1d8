"""SQLAlchemy mapping metadata for the shadow ledger and course management tables."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from functools import cache

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    orm,
)
from sqlalchemy.orm import configure_mappers

from sakora.domain.model import AuditLogEntry, MembershipMode, ShadowMembership

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


MembershipModeType = Enum(
    MembershipMode,
    native_enum=False,
    length=16,
    values_callable=lambda modes: [mode.value for mode in modes],
)

mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Shadow ledger ---------------------------------------------------------------

shadow_membership_table = Table(
    "shadow_membership",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_key", String(255), nullable=False),
    Column("container_key", String(255), nullable=False),
    Column("mode", MembershipModeType, nullable=False),
    Column("role", String(255), nullable=False),
    Column("last_seen_stamp", UTCDateTime, nullable=False),
    Index("ix_shadow_membership_lookup", "mode", "user_key", "container_key"),
    Index("ix_shadow_membership_stamp", "mode", "last_seen_stamp"),
)

audit_log_table = Table(
    "audit_log",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("component", String(255), nullable=False),
    Column("message", Text, nullable=False),
    Column("created_at", UTCDateTime, nullable=False),
)

# Course management -----------------------------------------------------------

academic_session_table = Table(
    "academic_session",
    mapper_registry.metadata,
    Column("key", String(255), primary_key=True),
    Column("title", String(255), nullable=True),
    Column("is_current", Boolean, nullable=False, default=False),
)

course_offering_table = Table(
    "course_offering",
    mapper_registry.metadata,
    Column("key", String(255), primary_key=True),
    Column("title", String(255), nullable=True),
    Column(
        "session_key",
        String(255),
        ForeignKey("academic_session.key", ondelete="SET NULL"),
        nullable=True,
    ),
)

enrollment_set_table = Table(
    "enrollment_set",
    mapper_registry.metadata,
    Column("key", String(255), primary_key=True),
    Column("title", String(255), nullable=True),
    Column("description", Text, nullable=True),
    Column("category", String(255), nullable=False),
    Column("default_credits", String(32), nullable=True),
    Column("course_offering_key", String(255), nullable=True),
)

section_table = Table(
    "section",
    mapper_registry.metadata,
    Column("key", String(255), primary_key=True),
    Column("title", String(255), nullable=True),
    Column("description", Text, nullable=True),
    Column("category", String(255), nullable=True),
    Column(
        "course_offering_key",
        String(255),
        ForeignKey("course_offering.key", ondelete="SET NULL"),
        nullable=True,
    ),
    Column(
        "enrollment_set_key",
        String(255),
        ForeignKey("enrollment_set.key", ondelete="SET NULL"),
        nullable=True,
    ),
)

official_instructor_table = Table(
    "official_instructor",
    mapper_registry.metadata,
    Column(
        "enrollment_set_key",
        String(255),
        ForeignKey("enrollment_set.key", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("user_key", String(255), primary_key=True),
)

section_membership_table = Table(
    "section_membership",
    mapper_registry.metadata,
    Column(
        "section_key",
        String(255),
        ForeignKey("section.key", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("user_key", String(255), primary_key=True),
    Column("role", String(255), nullable=False),
    Column("status", String(255), nullable=False),
)

course_offering_membership_table = Table(
    "course_offering_membership",
    mapper_registry.metadata,
    Column(
        "course_offering_key",
        String(255),
        ForeignKey("course_offering.key", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("user_key", String(255), primary_key=True),
    Column("role", String(255), nullable=False),
    Column("status", String(255), nullable=False),
)

enrollment_table = Table(
    "enrollment",
    mapper_registry.metadata,
    Column(
        "enrollment_set_key",
        String(255),
        ForeignKey("enrollment_set.key", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("user_key", String(255), primary_key=True),
    Column("status", String(255), nullable=False),
    Column("credits", String(32), nullable=True),
    Column("grading_scheme", String(255), nullable=True),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the ledger model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(ShadowMembership, shadow_membership_table)
    mapper_registry.map_imperatively(AuditLogEntry, audit_log_table)

    configure_mappers()
    return mapper_registry
