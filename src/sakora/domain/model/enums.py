"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class MembershipMode(StrEnum):
    """Which kind of container memberships a sync run reconciles."""

    SECTION = "section"
    COURSE = "course"

    @property
    def handler_name(self) -> str:
        return "SectionMembership" if self is MembershipMode.SECTION else "CourseMembership"


class RejectionReason(StrEnum):
    TOO_FEW_FIELDS = "too_few_fields"
    MISSING_REQUIRED_FIELD = "missing_required_field"
