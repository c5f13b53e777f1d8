"""Course management store backed by SQLAlchemy Core tables.

Every public call runs in its own transaction, matching the per-call
semantics of a remote course management service.
"""

from __future__ import annotations

from contextlib import contextmanager
from logging import getLogger
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import and_, delete, insert, select, update

from sakora.adapters.sqlalchemy.mappings import (
    academic_session_table,
    course_offering_membership_table,
    course_offering_table,
    enrollment_set_table,
    enrollment_table,
    official_instructor_table,
    section_membership_table,
    section_table,
)
from sakora.domain.errors import TargetNotFoundError
from sakora.domain.model import EnrollmentSet, MembershipMode, Section

if TYPE_CHECKING:
    from collections.abc import Collection, Iterator, Mapping

    from sqlalchemy import Table
    from sqlalchemy.orm import Session, sessionmaker

log = getLogger(__name__)


class SqlAlchemyCourseManagement:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory
        self._admin_depth = 0

    # Containers --------------------------------------------------------------

    def add_academic_session(self, key: str, *, title: str | None = None, current: bool) -> None:
        with self.session_factory.begin() as session:
            session.execute(
                insert(academic_session_table).values(key=key, title=title, is_current=current)
            )

    def add_course_offering(
        self, key: str, *, title: str | None = None, session_key: str | None = None
    ) -> None:
        with self.session_factory.begin() as session:
            session.execute(
                insert(course_offering_table).values(key=key, title=title, session_key=session_key)
            )

    def add_section(  # noqa: PLR0913
        self,
        key: str,
        *,
        title: str | None = None,
        description: str | None = None,
        category: str | None = None,
        course_offering_key: str | None = None,
        enrollment_set_key: str | None = None,
    ) -> None:
        with self.session_factory.begin() as session:
            session.execute(
                insert(section_table).values(
                    key=key,
                    title=title,
                    description=description,
                    category=category,
                    course_offering_key=course_offering_key,
                    enrollment_set_key=enrollment_set_key,
                )
            )

    def get_section(self, key: str) -> Section:
        with self.session_factory() as session:
            row = session.execute(
                select(section_table).where(section_table.c.key == key)
            ).mappings().one_or_none()
            if row is None:
                raise TargetNotFoundError("section", key)
            enrollment_set = None
            if row["enrollment_set_key"] is not None:
                enrollment_set = self._load_enrollment_set(session, row["enrollment_set_key"])
            return Section(
                key=row["key"],
                title=row["title"],
                description=row["description"],
                category=row["category"],
                course_offering_key=row["course_offering_key"],
                enrollment_set=enrollment_set,
            )

    def update_section(self, section: Section) -> None:
        with self.session_factory.begin() as session:
            self._require(session, section_table, "section", section.key)
            session.execute(
                update(section_table)
                .where(section_table.c.key == section.key)
                .values(
                    title=section.title,
                    description=section.description,
                    category=section.category,
                    course_offering_key=section.course_offering_key,
                    enrollment_set_key=(
                        section.enrollment_set.key if section.enrollment_set else None
                    ),
                )
            )

    def get_enrollment_set(self, key: str) -> EnrollmentSet:
        with self.session_factory() as session:
            return self._load_enrollment_set(session, key)

    def create_enrollment_set(  # noqa: PLR0913
        self,
        key: str,
        *,
        title: str | None,
        description: str | None,
        category: str,
        default_credits: str | None,
        course_offering_key: str | None,
    ) -> EnrollmentSet:
        with self.session_factory.begin() as session:
            existing = session.execute(
                select(enrollment_set_table.c.key).where(enrollment_set_table.c.key == key)
            ).first()
            if existing is not None:
                log.warning("Enrollment set %s already exists, reusing it", key)
                return self._load_enrollment_set(session, key)
            session.execute(
                insert(enrollment_set_table).values(
                    key=key,
                    title=title,
                    description=description,
                    category=category,
                    default_credits=default_credits,
                    course_offering_key=course_offering_key,
                )
            )
        log.debug("Created enrollment set %s", key)
        return EnrollmentSet(
            key=key,
            title=title,
            description=description,
            category=category,
            default_credits=default_credits,
            course_offering_key=course_offering_key,
        )

    def update_enrollment_set(self, enrollment_set: EnrollmentSet) -> None:
        with self.session_factory.begin() as session:
            self._require(session, enrollment_set_table, "enrollment set", enrollment_set.key)
            session.execute(
                update(enrollment_set_table)
                .where(enrollment_set_table.c.key == enrollment_set.key)
                .values(
                    title=enrollment_set.title,
                    description=enrollment_set.description,
                    category=enrollment_set.category,
                    default_credits=enrollment_set.default_credits,
                    course_offering_key=enrollment_set.course_offering_key,
                )
            )
            stored = set(
                session.execute(
                    select(official_instructor_table.c.user_key).where(
                        official_instructor_table.c.enrollment_set_key == enrollment_set.key
                    )
                ).scalars()
            )
            added = enrollment_set.official_instructors - stored
            removed = stored - enrollment_set.official_instructors
            if added:
                session.execute(
                    insert(official_instructor_table),
                    [
                        {"enrollment_set_key": enrollment_set.key, "user_key": user_key}
                        for user_key in sorted(added)
                    ],
                )
            if removed:
                session.execute(
                    delete(official_instructor_table)
                    .where(official_instructor_table.c.enrollment_set_key == enrollment_set.key)
                    .where(official_instructor_table.c.user_key.in_(removed))
                )

    # Memberships -------------------------------------------------------------

    def add_or_update_section_membership(
        self, user_key: str, role: str, section_key: str, status: str
    ) -> None:
        with self.session_factory.begin() as session:
            self._require(session, section_table, "section", section_key)
            self._upsert(
                session,
                section_membership_table,
                keys={"section_key": section_key, "user_key": user_key},
                values={"role": role, "status": status},
            )

    def add_or_update_enrollment(  # noqa: PLR0913
        self,
        user_key: str,
        enrollment_set_key: str,
        status: str,
        credits: str | None,
        grading_scheme: str | None,
    ) -> None:
        with self.session_factory.begin() as session:
            self._require(session, enrollment_set_table, "enrollment set", enrollment_set_key)
            self._upsert(
                session,
                enrollment_table,
                keys={"enrollment_set_key": enrollment_set_key, "user_key": user_key},
                values={"status": status, "credits": credits, "grading_scheme": grading_scheme},
            )

    def add_or_update_course_offering_membership(
        self, user_key: str, role: str, course_offering_key: str, status: str
    ) -> None:
        with self.session_factory.begin() as session:
            self._require(session, course_offering_table, "course offering", course_offering_key)
            self._upsert(
                session,
                course_offering_membership_table,
                keys={"course_offering_key": course_offering_key, "user_key": user_key},
                values={"role": role, "status": status},
            )

    def remove_section_membership(self, user_key: str, section_key: str) -> bool:
        with self.session_factory.begin() as session:
            self._require(session, section_table, "section", section_key)
            return self._delete(
                session,
                section_membership_table,
                keys={"section_key": section_key, "user_key": user_key},
            )

    def remove_enrollment(self, user_key: str, enrollment_set_key: str) -> bool:
        with self.session_factory.begin() as session:
            self._require(session, enrollment_set_table, "enrollment set", enrollment_set_key)
            return self._delete(
                session,
                enrollment_table,
                keys={"enrollment_set_key": enrollment_set_key, "user_key": user_key},
            )

    def remove_course_offering_membership(self, user_key: str, course_offering_key: str) -> bool:
        with self.session_factory.begin() as session:
            self._require(session, course_offering_table, "course offering", course_offering_key)
            return self._delete(
                session,
                course_offering_membership_table,
                keys={"course_offering_key": course_offering_key, "user_key": user_key},
            )

    def section_memberships(self, section_key: str) -> dict[str, tuple[str, str]]:
        """Return ``{user_key: (role, status)}`` for a section."""

        with self.session_factory() as session:
            rows = session.execute(
                select(section_membership_table).where(
                    section_membership_table.c.section_key == section_key
                )
            ).mappings()
            return {row["user_key"]: (row["role"], row["status"]) for row in rows}

    def course_offering_memberships(self, course_offering_key: str) -> dict[str, tuple[str, str]]:
        with self.session_factory() as session:
            rows = session.execute(
                select(course_offering_membership_table).where(
                    course_offering_membership_table.c.course_offering_key == course_offering_key
                )
            ).mappings()
            return {row["user_key"]: (row["role"], row["status"]) for row in rows}

    def enrollments(self, enrollment_set_key: str) -> dict[str, tuple[str, str | None, str | None]]:
        """Return ``{user_key: (status, credits, grading_scheme)}`` for an enrollment set."""

        with self.session_factory() as session:
            rows = session.execute(
                select(enrollment_table).where(
                    enrollment_table.c.enrollment_set_key == enrollment_set_key
                )
            ).mappings()
            return {
                row["user_key"]: (row["status"], row["credits"], row["grading_scheme"])
                for row in rows
            }

    @contextmanager
    def admin_session(self) -> Iterator[None]:
        self._admin_depth += 1
        log.debug("Acquired course management admin session (depth=%s)", self._admin_depth)
        try:
            yield
        finally:
            self._admin_depth -= 1
            log.debug("Released course management admin session (depth=%s)", self._admin_depth)

    @property
    def in_admin_session(self) -> bool:
        return self._admin_depth > 0

    # Catalog -----------------------------------------------------------------

    def current_session_keys(self) -> frozenset[str]:
        with self.session_factory() as session:
            keys = session.execute(
                select(academic_session_table.c.key).where(academic_session_table.c.is_current)
            ).scalars()
            return frozenset(keys)

    def session_key_for(self, container_key: str, mode: MembershipMode) -> str | None:
        if mode is MembershipMode.SECTION:
            stmt = (
                select(course_offering_table.c.session_key)
                .select_from(section_table)
                .join(
                    course_offering_table,
                    section_table.c.course_offering_key == course_offering_table.c.key,
                )
                .where(section_table.c.key == container_key)
            )
        else:
            stmt = select(course_offering_table.c.session_key).where(
                course_offering_table.c.key == container_key
            )
        with self.session_factory() as session:
            return session.execute(stmt).scalar_one_or_none()

    def container_keys_in_sessions(
        self, session_keys: Collection[str], mode: MembershipMode
    ) -> frozenset[str]:
        if not session_keys:
            return frozenset()
        in_sessions = course_offering_table.c.session_key.in_(list(session_keys))
        if mode is MembershipMode.SECTION:
            stmt = (
                select(section_table.c.key)
                .select_from(section_table)
                .join(
                    course_offering_table,
                    section_table.c.course_offering_key == course_offering_table.c.key,
                )
                .where(in_sessions)
            )
        else:
            stmt = select(course_offering_table.c.key).where(in_sessions)
        with self.session_factory() as session:
            return frozenset(session.execute(stmt).scalars())

    # Helpers -----------------------------------------------------------------

    def _load_enrollment_set(self, session: Session, key: str) -> EnrollmentSet:
        row = session.execute(
            select(enrollment_set_table).where(enrollment_set_table.c.key == key)
        ).mappings().one_or_none()
        if row is None:
            raise TargetNotFoundError("enrollment set", key)
        instructors = session.execute(
            select(official_instructor_table.c.user_key).where(
                official_instructor_table.c.enrollment_set_key == key
            )
        ).scalars()
        return EnrollmentSet(
            key=row["key"],
            title=row["title"],
            description=row["description"],
            category=row["category"],
            default_credits=row["default_credits"],
            course_offering_key=row["course_offering_key"],
            official_instructors=set(instructors),
        )

    @staticmethod
    def _require(session: Session, table: Table, kind: str, key: str) -> None:
        found = session.execute(select(table.c.key).where(table.c.key == key)).first()
        if found is None:
            raise TargetNotFoundError(kind, key)

    @staticmethod
    def _match(table: Table, keys: Mapping[str, Any]) -> Any:
        return and_(*(table.c[name] == value for name, value in keys.items()))

    def _upsert(
        self,
        session: Session,
        table: Table,
        *,
        keys: Mapping[str, Any],
        values: Mapping[str, Any],
    ) -> None:
        condition = self._match(table, keys)
        existing = session.execute(select(*table.primary_key.columns).where(condition)).first()
        if existing is None:
            session.execute(insert(table).values({**keys, **values}))
        else:
            session.execute(update(table).where(condition).values(dict(values)))

    def _delete(self, session: Session, table: Table, *, keys: Mapping[str, Any]) -> bool:
        result = session.execute(delete(table).where(self._match(table, keys)))
        return bool(result.rowcount)


if TYPE_CHECKING:
    from sakora.domain.ports import ContainerCatalog, CourseManagement

    _factory_stub = cast("sessionmaker[Session]", object())
    _cm_check: CourseManagement = SqlAlchemyCourseManagement(_factory_stub)
    _catalog_check: ContainerCatalog = SqlAlchemyCourseManagement(_factory_stub)
