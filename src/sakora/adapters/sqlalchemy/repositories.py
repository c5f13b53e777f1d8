"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import func, select

from sakora.adapters.sqlalchemy.mappings import audit_log_table, shadow_membership_table
from sakora.domain.model import AuditLogEntry, ShadowMembership

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence

    from sqlalchemy.orm import Session

    from sakora.domain.model import MembershipMode, RunStamp


class SqlAlchemyShadowLedgerRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ShadowMembership) -> None:
        self.session.add(entity)

    def find(
        self,
        *,
        mode: MembershipMode,
        user_key: str,
        container_key: str,
    ) -> Sequence[ShadowMembership]:
        stmt = (
            select(ShadowMembership)
            .where(shadow_membership_table.c.mode == mode)
            .where(shadow_membership_table.c.user_key == user_key)
            .where(shadow_membership_table.c.container_key == container_key)
            .order_by(shadow_membership_table.c.id)
        )
        return self.session.execute(stmt).scalars().all()

    def find_stale(
        self,
        *,
        mode: MembershipMode,
        stamp: RunStamp,
        container_keys: Collection[str] | None = None,
        after_id: int | None = None,
        limit: int,
    ) -> Sequence[ShadowMembership]:
        stmt = (
            select(ShadowMembership)
            .where(shadow_membership_table.c.mode == mode)
            .where(shadow_membership_table.c.last_seen_stamp != stamp)
        )
        if container_keys is not None:
            stmt = stmt.where(shadow_membership_table.c.container_key.in_(list(container_keys)))
        if after_id is not None:
            stmt = stmt.where(shadow_membership_table.c.id > after_id)
        stmt = stmt.order_by(shadow_membership_table.c.id).limit(limit)
        return self.session.execute(stmt).scalars().all()

    def delete(self, entity: ShadowMembership) -> None:
        self.session.delete(entity)

    def count(self, *, mode: MembershipMode | None = None) -> int:
        stmt = select(func.count()).select_from(shadow_membership_table)
        if mode is not None:
            stmt = stmt.where(shadow_membership_table.c.mode == mode)
        return cast(int, self.session.execute(stmt).scalar_one())


class SqlAlchemyAuditLogRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: AuditLogEntry) -> None:
        self.session.add(entity)

    def recent(self, *, limit: int = 50) -> Sequence[AuditLogEntry]:
        stmt = (
            select(AuditLogEntry)
            .order_by(audit_log_table.c.created_at.desc(), audit_log_table.c.id.desc())
            .limit(limit)
        )
        return self.session.execute(stmt).scalars().all()


if TYPE_CHECKING:
    from sakora.domain.ports.persistence import AuditLogRepository, ShadowLedgerRepository

    _session_stub = cast("Session", object())
    _ledger_check: ShadowLedgerRepository = SqlAlchemyShadowLedgerRepository(_session_stub)
    _audit_check: AuditLogRepository = SqlAlchemyAuditLogRepository(_session_stub)
