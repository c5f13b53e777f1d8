"""Turn raw CSV rows into membership records.

Expected column order::

    Section or Course Eid, User Eid, Role, Status, [Credits], [Grading Scheme]

The two trailing columns are optional; missing or blank values fall back to the
configured defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final

from sakora.domain.model import MembershipRecord, RejectionReason, RowRejected

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sakora.domain.model import NormalizedRow

MIN_FIELD_COUNT: Final[int] = 4
REQUIRED_FIELDS: Final[tuple[str, ...]] = ("Container Eid", "User Eid", "Role", "Status")

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RowDefaults:
    credits: str
    grading_scheme: str


def trim_all(fields: Sequence[str | None]) -> list[str | None]:
    return [value.strip() if value is not None else None for value in fields]


def _optional(fields: Sequence[str | None], index: int, default: str) -> str:
    if len(fields) <= index:
        return default
    value = fields[index]
    return value if value else default


def normalize_row(fields: Sequence[str | None], defaults: RowDefaults) -> NormalizedRow:
    """Validate ``fields`` and return a record, or the reason it was rejected."""

    if len(fields) < MIN_FIELD_COUNT:
        log.error(
            "Skipping short line (expected at least [%s] fields): %s",
            MIN_FIELD_COUNT,
            list(fields),
        )
        return RowRejected(
            reason=RejectionReason.TOO_FEW_FIELDS,
            detail=f"got {len(fields)} fields",
        )

    trimmed = trim_all(fields)
    for index, name in enumerate(REQUIRED_FIELDS):
        if not trimmed[index]:
            log.error("Missing required parameter %s, skipping item %s", name, trimmed[0])
            return RowRejected(reason=RejectionReason.MISSING_REQUIRED_FIELD, field_name=name)

    container_key, user_key, role, status = (str(value) for value in trimmed[:MIN_FIELD_COUNT])
    return MembershipRecord(
        container_key=container_key,
        user_key=user_key,
        role=role,
        status=status,
        credits=_optional(trimmed, 4, defaults.credits),
        grading_scheme=_optional(trimmed, 5, defaults.grading_scheme),
    )
