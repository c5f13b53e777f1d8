"""SQLAlchemy adapter package for Sakora."""

from __future__ import annotations

from .course_management import SqlAlchemyCourseManagement
from .mappings import mapper_registry, start_mappers
from .repositories import SqlAlchemyAuditLogRepository, SqlAlchemyShadowLedgerRepository

__all__ = [
    "SqlAlchemyAuditLogRepository",
    "SqlAlchemyCourseManagement",
    "SqlAlchemyShadowLedgerRepository",
    "mapper_registry",
    "start_mappers",
]
