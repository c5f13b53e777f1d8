"""Per-run statistics for membership reconciliation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sakora.domain.model import MembershipMode, RunStamp


@dataclass(slots=True)
class RunTally:
    rows_read: int = 0
    errors: int = 0
    updates: int = 0
    deletes: int = 0
    skipped: int = 0
    not_found: int = 0

    def freeze(self, *, mode: MembershipMode, run_stamp: RunStamp) -> MembershipSyncResult:
        return MembershipSyncResult(
            mode=mode,
            run_stamp=run_stamp,
            rows_read=self.rows_read,
            errors=self.errors,
            updates=self.updates,
            deletes=self.deletes,
            skipped=self.skipped,
            not_found=self.not_found,
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class MembershipSyncResult:
    """Outcome of one membership reconciliation run."""

    mode: MembershipMode
    run_stamp: RunStamp
    rows_read: int
    errors: int
    updates: int
    deletes: int
    skipped: int
    not_found: int

    @property
    def summary(self) -> str:
        return (
            f"Finished processing input, added or updated {self.updates} items "
            f"and removed {self.deletes}"
        )
