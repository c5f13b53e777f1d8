"""Membership reconciliation: row upserts, shadow ledger upkeep and stale sweeps."""

from __future__ import annotations

from .engine import CONTAINER_CHUNK_SIZE, MembershipReconciliationEngine
from .result import MembershipSyncResult
from .scope import ContainerScope

__all__ = [
    "CONTAINER_CHUNK_SIZE",
    "ContainerScope",
    "MembershipReconciliationEngine",
    "MembershipSyncResult",
]
