"""Tests for the SQLAlchemy-backed course management store."""

from __future__ import annotations

import pytest

from sakora.adapters.sqlalchemy import SqlAlchemyCourseManagement  # noqa: TC001
from sakora.domain.errors import TargetNotFoundError
from sakora.domain.model import MembershipMode


@pytest.fixture
def store(sqlite_course_management: SqlAlchemyCourseManagement) -> SqlAlchemyCourseManagement:
    sqlite_course_management.add_academic_session("FA26", title="Fall 2026", current=True)
    sqlite_course_management.add_academic_session("SP26", title="Spring 2026", current=False)
    sqlite_course_management.add_course_offering("CO1", title="Biology", session_key="FA26")
    sqlite_course_management.add_course_offering("CO2", title="History", session_key="SP26")
    sqlite_course_management.add_section(
        "SEC1", title="Biology lab", category="LAB", course_offering_key="CO1"
    )
    sqlite_course_management.add_section("SEC2", course_offering_key="CO2")
    return sqlite_course_management


def test_get_section_without_enrollment_set(store: SqlAlchemyCourseManagement) -> None:
    section = store.get_section("SEC1")

    assert section.title == "Biology lab"
    assert section.category == "LAB"
    assert section.course_offering_key == "CO1"
    assert section.enrollment_set is None


def test_get_missing_section_raises(store: SqlAlchemyCourseManagement) -> None:
    with pytest.raises(TargetNotFoundError) as excinfo:
        store.get_section("NOPE")

    assert excinfo.value.kind == "section"
    assert excinfo.value.key == "NOPE"


def test_enrollment_set_creation_and_linking(store: SqlAlchemyCourseManagement) -> None:
    section = store.get_section("SEC1")
    enrollment_set = store.create_enrollment_set(
        section.enrollment_set_key,
        title=section.title,
        description=section.description,
        category="LAB",
        default_credits="3",
        course_offering_key=section.course_offering_key,
    )
    section.enrollment_set = enrollment_set
    store.update_section(section)

    reloaded = store.get_section("SEC1")

    assert reloaded.enrollment_set is not None
    assert reloaded.enrollment_set.key == "SEC1_ES"
    assert reloaded.enrollment_set.default_credits == "3"
    assert reloaded.enrollment_set.category == "LAB"


def test_official_instructors_are_synchronised(store: SqlAlchemyCourseManagement) -> None:
    enrollment_set = store.create_enrollment_set(
        "SEC1_ES",
        title=None,
        description=None,
        category="NONE",
        default_credits=None,
        course_offering_key="CO1",
    )
    enrollment_set.add_official_instructor("PROF1")
    enrollment_set.add_official_instructor("PROF2")
    store.update_enrollment_set(enrollment_set)

    enrollment_set.official_instructors.discard("PROF1")
    store.update_enrollment_set(enrollment_set)

    assert store.get_enrollment_set("SEC1_ES").official_instructors == {"PROF2"}


def test_section_membership_upsert_and_removal(store: SqlAlchemyCourseManagement) -> None:
    store.add_or_update_section_membership("U1", "Student", "SEC1", "Active")
    store.add_or_update_section_membership("U1", "TA", "SEC1", "Active")

    assert store.section_memberships("SEC1") == {"U1": ("TA", "Active")}

    assert store.remove_section_membership("U1", "SEC1") is True
    assert store.remove_section_membership("U1", "SEC1") is False
    assert store.section_memberships("SEC1") == {}


def test_enrollment_upsert_and_removal(store: SqlAlchemyCourseManagement) -> None:
    store.create_enrollment_set(
        "SEC1_ES",
        title=None,
        description=None,
        category="NONE",
        default_credits="4",
        course_offering_key="CO1",
    )

    store.add_or_update_enrollment("U1", "SEC1_ES", "Active", "4", "Letter Grade")
    store.add_or_update_enrollment("U1", "SEC1_ES", "Dropped", "4", "Pass/Fail")

    assert store.enrollments("SEC1_ES") == {"U1": ("Dropped", "4", "Pass/Fail")}
    assert store.remove_enrollment("U1", "SEC1_ES") is True
    assert store.remove_enrollment("U1", "SEC1_ES") is False


def test_course_offering_membership_round_trip(store: SqlAlchemyCourseManagement) -> None:
    store.add_or_update_course_offering_membership("U1", "Instructor", "CO1", "Active")

    assert store.course_offering_memberships("CO1") == {"U1": ("Instructor", "Active")}
    assert store.remove_course_offering_membership("U1", "CO1") is True
    assert store.course_offering_memberships("CO1") == {}


@pytest.mark.parametrize(
    ("operation", "kind"),
    [
        (lambda store: store.add_or_update_section_membership("U1", "Student", "X", "A"), "section"),
        (lambda store: store.remove_section_membership("U1", "X"), "section"),
        (lambda store: store.add_or_update_enrollment("U1", "X", "A", None, None), "enrollment set"),
        (lambda store: store.remove_enrollment("U1", "X"), "enrollment set"),
        (
            lambda store: store.add_or_update_course_offering_membership("U1", "S", "X", "A"),
            "course offering",
        ),
        (lambda store: store.remove_course_offering_membership("U1", "X"), "course offering"),
    ],
)
def test_missing_targets_raise_not_found(store: SqlAlchemyCourseManagement, operation, kind) -> None:  # noqa: ANN001
    with pytest.raises(TargetNotFoundError) as excinfo:
        operation(store)

    assert excinfo.value.kind == kind


def test_catalog_queries(store: SqlAlchemyCourseManagement) -> None:
    assert store.current_session_keys() == frozenset({"FA26"})
    assert store.session_key_for("SEC1", MembershipMode.SECTION) == "FA26"
    assert store.session_key_for("CO2", MembershipMode.COURSE) == "SP26"
    assert store.session_key_for("NOPE", MembershipMode.SECTION) is None
    assert store.container_keys_in_sessions({"FA26"}, MembershipMode.SECTION) == {"SEC1"}
    assert store.container_keys_in_sessions({"FA26", "SP26"}, MembershipMode.COURSE) == {
        "CO1",
        "CO2",
    }
    assert store.container_keys_in_sessions(set(), MembershipMode.COURSE) == frozenset()


def test_admin_session_is_reentrant(store: SqlAlchemyCourseManagement) -> None:
    assert not store.in_admin_session
    with store.admin_session():
        with store.admin_session():
            assert store.in_admin_session
        assert store.in_admin_session
    assert not store.in_admin_session


def test_create_enrollment_set_reuses_existing_key(store: SqlAlchemyCourseManagement) -> None:
    store.create_enrollment_set(
        "SEC1_ES",
        title="Orphan",
        description=None,
        category="LAB",
        default_credits="5",
        course_offering_key="CO1",
    )

    again = store.create_enrollment_set(
        "SEC1_ES",
        title="Biology lab",
        description=None,
        category="NONE",
        default_credits="0",
        course_offering_key="CO1",
    )

    assert again.title == "Orphan"
    assert again.default_credits == "5"
    assert store.get_enrollment_set("SEC1_ES").category == "LAB"
