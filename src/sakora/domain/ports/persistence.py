"""Ports for persisting the shadow ledger and the audit trail."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from sakora.domain.model import AuditLogEntry, ShadowMembership

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence

    from sakora.domain.model import MembershipMode, RunStamp


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class ShadowLedgerRepository(Repository[ShadowMembership], Protocol):
    """Persistence contract for shadow membership entries."""

    def find(
        self,
        *,
        mode: MembershipMode,
        user_key: str,
        container_key: str,
    ) -> Sequence[ShadowMembership]:
        """Return matching entries, oldest first."""
        ...

    def find_stale(
        self,
        *,
        mode: MembershipMode,
        stamp: RunStamp,
        container_keys: Collection[str] | None = None,
        after_id: int | None = None,
        limit: int,
    ) -> Sequence[ShadowMembership]:
        """Return up to ``limit`` entries not stamped with ``stamp``, ordered by id."""
        ...

    def delete(self, entity: ShadowMembership) -> None: ...

    def count(self, *, mode: MembershipMode | None = None) -> int: ...


@runtime_checkable
class AuditLogRepository(Repository[AuditLogEntry], Protocol):
    """Persistence contract for audit trail records."""

    def recent(self, *, limit: int = 50) -> Sequence[AuditLogEntry]: ...
