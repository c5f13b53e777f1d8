"""Public domain model surface."""

from __future__ import annotations

from sakora.domain.model.course import EnrollmentSet, Section
from sakora.domain.model.enums import MembershipMode, RejectionReason
from sakora.domain.model.membership import (
    AuditLogEntry,
    LedgerOutcome,
    MembershipRecord,
    NormalizedRow,
    RowRejected,
    RunStamp,
    ShadowMembership,
)

__all__ = [
    "AuditLogEntry",
    "EnrollmentSet",
    "LedgerOutcome",
    "MembershipMode",
    "MembershipRecord",
    "NormalizedRow",
    "RejectionReason",
    "RowRejected",
    "RunStamp",
    "Section",
    "ShadowMembership",
]
