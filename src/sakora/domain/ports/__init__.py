"""Domain port definitions for adapters."""

from __future__ import annotations

from .course_management import ContainerCatalog, CourseManagement
from .persistence import AuditLogRepository, Repository, ShadowLedgerRepository
from .unit_of_work import MembershipRepositories, MembershipUnitOfWork

__all__ = [
    "AuditLogRepository",
    "ContainerCatalog",
    "CourseManagement",
    "MembershipRepositories",
    "MembershipUnitOfWork",
    "Repository",
    "ShadowLedgerRepository",
]
