"""Transaction boundary used by the reconciliation engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from sakora.domain.ports.persistence import AuditLogRepository, ShadowLedgerRepository


@dataclass(slots=True)
class MembershipRepositories:
    shadow_memberships: ShadowLedgerRepository
    audit_log: AuditLogRepository


@runtime_checkable
class MembershipUnitOfWork(Protocol):
    """Ledger and audit log repositories sharing one transaction.

    Nothing is persisted until ``commit``; leaving the context manager on an
    exception discards uncommitted work. The engine commits after every ledger
    mutation, so a crash mid-run keeps what was done so far.
    """

    @property
    def repositories(self) -> MembershipRepositories: ...

    def __enter__(self) -> MembershipUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
