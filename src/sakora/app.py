"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from sakora.adapters.csv_source import read_rows
from sakora.adapters.sqlalchemy import SqlAlchemyCourseManagement
from sakora.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyMembershipUnitOfWork,
    configured_session_factory,
    is_started,
    startup,
)
from sakora.domain.membership_sync import (
    ContainerScope,
    MembershipReconciliationEngine,
    MembershipSyncResult,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from datetime import datetime

    from sakora.config import MembershipSyncConfig
    from sakora.domain.model import AuditLogEntry
    from sakora.domain.ports import ContainerCatalog, CourseManagement, MembershipUnitOfWork

type UnitOfWorkFactory = Callable[[], MembershipUnitOfWork]


log = getLogger(__name__)


def _ensure_started() -> None:
    if not is_started():
        startup()


def sync_memberships(  # noqa: PLR0913
    source: Path | Iterable[Sequence[str | None]],
    *,
    config: MembershipSyncConfig,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    course_management: CourseManagement | None = None,
    catalog: ContainerCatalog | None = None,
    clock: Callable[[], datetime] | None = None,
    skip_header: bool = False,
) -> MembershipSyncResult:
    """Reconcile a membership extract using the configured adapters."""

    if unit_of_work_factory is None or course_management is None:
        _ensure_started()
    effective_uow = unit_of_work_factory or SqlAlchemyMembershipUnitOfWork
    if course_management is None:
        sql_store = SqlAlchemyCourseManagement(configured_session_factory())
        course_management = sql_store
        catalog = catalog or sql_store
    if catalog is None:
        raise ValueError("A container catalog is required with a custom course management store")

    rows = read_rows(source, skip_header=skip_header) if isinstance(source, Path) else source
    log.info(
        "Starting membership sync: mode=%s, ignore_membership_removals=%s, "
        "ignore_missing_sessions=%s, page_size=%s",
        config.mode,
        config.ignore_membership_removals,
        config.ignore_missing_sessions,
        config.search_page_size,
    )

    engine = MembershipReconciliationEngine(
        config=config,
        course_management=course_management,
        scope=ContainerScope.from_config(config, catalog),
        unit_of_work_factory=effective_uow,
        clock=clock,
    )
    return engine.run(rows)


def recent_audit_log(
    *,
    limit: int = 20,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[AuditLogEntry]:
    if unit_of_work_factory is None:
        _ensure_started()
    effective_uow = unit_of_work_factory or SqlAlchemyMembershipUnitOfWork
    with effective_uow() as uow:
        return list(uow.repositories.audit_log.recent(limit=limit))
