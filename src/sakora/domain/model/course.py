"""Course management containers as seen by the membership sync."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(eq=False, kw_only=True)
class EnrollmentSet:
    """Section-level grouping of student enrollments and official instructors."""

    key: str
    title: str | None = None
    description: str | None = None
    category: str
    default_credits: str | None = None
    course_offering_key: str | None = None
    official_instructors: set[str] = field(default_factory=set[str])

    def add_official_instructor(self, user_key: str) -> bool:
        """Add ``user_key``; return whether the set changed."""

        if user_key in self.official_instructors:
            return False
        self.official_instructors.add(user_key)
        return True


@dataclass(eq=False, kw_only=True)
class Section:
    key: str
    title: str | None = None
    description: str | None = None
    category: str | None = None
    course_offering_key: str | None = None
    enrollment_set: EnrollmentSet | None = None

    @property
    def enrollment_set_key(self) -> str:
        """Key used when an enrollment set has to be created for this section."""

        return f"{self.key}_ES"
