"""Ports for the external course management store.

The store is the system of record for sections, course offerings, enrollment
sets and the memberships attached to them. Every method raises
:class:`~sakora.domain.errors.TargetNotFoundError` when the container does not
exist. Removal methods return whether a membership was actually removed.

``create_enrollment_set`` returns the stored set unchanged when one with that
key already exists, e.g. left unlinked by an interrupted run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Collection
    from contextlib import AbstractContextManager

    from sakora.domain.model import EnrollmentSet, MembershipMode, Section


@runtime_checkable
class CourseManagement(Protocol):
    def get_section(self, key: str) -> Section: ...

    def create_enrollment_set(  # noqa: PLR0913
        self,
        key: str,
        *,
        title: str | None,
        description: str | None,
        category: str,
        default_credits: str | None,
        course_offering_key: str | None,
    ) -> EnrollmentSet: ...

    def update_section(self, section: Section) -> None: ...

    def update_enrollment_set(self, enrollment_set: EnrollmentSet) -> None: ...

    def add_or_update_section_membership(
        self, user_key: str, role: str, section_key: str, status: str
    ) -> None: ...

    def add_or_update_enrollment(  # noqa: PLR0913
        self,
        user_key: str,
        enrollment_set_key: str,
        status: str,
        credits: str | None,
        grading_scheme: str | None,
    ) -> None: ...

    def add_or_update_course_offering_membership(
        self, user_key: str, role: str, course_offering_key: str, status: str
    ) -> None: ...

    def remove_section_membership(self, user_key: str, section_key: str) -> bool: ...

    def remove_enrollment(self, user_key: str, enrollment_set_key: str) -> bool: ...

    def remove_course_offering_membership(
        self, user_key: str, course_offering_key: str
    ) -> bool: ...

    def admin_session(self) -> AbstractContextManager[None]:
        """Hold elevated access to the store for the duration of the block."""
        ...


@runtime_checkable
class ContainerCatalog(Protocol):
    """Read-only view used to decide which containers belong to current sessions."""

    def current_session_keys(self) -> frozenset[str]: ...

    def session_key_for(self, container_key: str, mode: MembershipMode) -> str | None: ...

    def container_keys_in_sessions(
        self, session_keys: Collection[str], mode: MembershipMode
    ) -> frozenset[str]: ...
