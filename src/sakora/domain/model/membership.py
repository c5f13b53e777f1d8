"""Membership rows read from CSV extracts and the shadow ledger that tracks them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Literal

from .enums import RejectionReason

if TYPE_CHECKING:
    from .enums import MembershipMode


type RunStamp = datetime


@dataclass(frozen=True, slots=True, kw_only=True)
class MembershipRecord:
    """One validated input row: a user holding a role in a container."""

    container_key: str
    user_key: str
    role: str
    status: str
    credits: str
    grading_scheme: str


@dataclass(frozen=True, slots=True, kw_only=True)
class RowRejected:
    """Normalization outcome for a row that cannot be processed."""

    reason: RejectionReason
    field_name: str | None = None
    detail: str | None = None

    @property
    def too_few_fields(self) -> bool:
        return self.reason is RejectionReason.TOO_FEW_FIELDS


type NormalizedRow = MembershipRecord | RowRejected


@dataclass(eq=False, kw_only=True)
class ShadowMembership:
    """Ledger entry recording the last run in which a membership was seen.

    Entries whose ``last_seen_stamp`` differs from the current run stamp after all
    rows have been read describe memberships that vanished from the extract.
    """

    user_key: str
    container_key: str
    mode: MembershipMode
    role: str
    last_seen_stamp: RunStamp
    id: int | None = None

    def touch(self, *, role: str, stamp: RunStamp) -> None:
        self.role = role
        self.last_seen_stamp = stamp


@dataclass(eq=False, kw_only=True)
class AuditLogEntry:
    """Persistent audit trail record written by sync handlers."""

    component: str
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    id: int | None = None


type LedgerOutcome = Literal["created", "updated"]
