"""End-to-end membership sync against SQLite."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from sakora.adapters.sqlalchemy import SqlAlchemyCourseManagement  # noqa: TC001
from sakora.app import recent_audit_log, sync_memberships
from sakora.domain.model import MembershipMode
from tests.helpers.memberships import CURRENT_RUN, PREVIOUS_RUN, fixed_clock, make_config

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from sakora.adapters.sqlalchemy.unit_of_work import SqlAlchemyMembershipUnitOfWork

    type UowFactory = Callable[[], SqlAlchemyMembershipUnitOfWork]


@pytest.fixture
def store(sqlite_course_management: SqlAlchemyCourseManagement) -> SqlAlchemyCourseManagement:
    sqlite_course_management.add_academic_session("FA26", current=True)
    sqlite_course_management.add_academic_session("SP26", current=False)
    sqlite_course_management.add_course_offering("CO1", session_key="FA26")
    sqlite_course_management.add_course_offering("CO2", session_key="SP26")
    sqlite_course_management.add_section(
        "SEC1", title="Biology lab", category="LAB", course_offering_key="CO1"
    )
    sqlite_course_management.add_section("SEC2", course_offering_key="CO2")
    return sqlite_course_management


def _ledger_count(uow_factory: UowFactory, mode: MembershipMode = MembershipMode.SECTION) -> int:
    with uow_factory() as uow:
        return uow.repositories.shadow_memberships.count(mode=mode)


def test_second_run_removes_memberships_missing_from_extract(
    store: SqlAlchemyCourseManagement,
    sqlite_unit_of_work: UowFactory,
) -> None:
    config = make_config()
    first = sync_memberships(
        [
            ["SEC1", "U1", "Student", "Active", "4", "Pass/Fail"],
            ["SEC1", "U2", "Student", "Active"],
            ["SEC1", "PROF", "Instructor", "Active"],
        ],
        config=config,
        unit_of_work_factory=sqlite_unit_of_work,
        course_management=store,
        catalog=store,
        clock=fixed_clock(PREVIOUS_RUN),
    )

    assert first.updates == 3
    assert first.deletes == 0
    section = store.get_section("SEC1")
    assert section.enrollment_set is not None
    assert section.enrollment_set.key == "SEC1_ES"
    assert section.enrollment_set.category == "LAB"
    assert section.enrollment_set.official_instructors == {"PROF"}
    assert store.enrollments("SEC1_ES") == {
        "U1": ("Active", "4", "Pass/Fail"),
        "U2": ("Active", "0", "Letter Grade"),
    }
    assert _ledger_count(sqlite_unit_of_work) == 3

    second = sync_memberships(
        [
            ["SEC1", "U1", "Student", "Active", "4", "Pass/Fail"],
            ["SEC1", "PROF", "Instructor", "Active"],
        ],
        config=config,
        unit_of_work_factory=sqlite_unit_of_work,
        course_management=store,
        catalog=store,
        clock=fixed_clock(CURRENT_RUN),
    )

    assert second.updates == 2
    assert second.deletes == 1
    assert set(store.section_memberships("SEC1")) == {"U1", "PROF"}
    assert set(store.enrollments("SEC1_ES")) == {"U1"}
    assert _ledger_count(sqlite_unit_of_work) == 2
    assert not store.in_admin_session

    messages = [entry.message for entry in recent_audit_log(unit_of_work_factory=sqlite_unit_of_work)]
    assert messages[0] == second.summary


def test_scoped_run_leaves_other_sessions_alone(
    store: SqlAlchemyCourseManagement,
    sqlite_unit_of_work: UowFactory,
) -> None:
    seed_config = make_config()
    sync_memberships(
        [["SEC1", "U1", "Student", "Active"], ["SEC2", "U9", "Student", "Active"]],
        config=seed_config,
        unit_of_work_factory=sqlite_unit_of_work,
        course_management=store,
        catalog=store,
        clock=fixed_clock(PREVIOUS_RUN),
    )

    scoped = sync_memberships(
        [["SEC2", "U8", "Student", "Active"]],
        config=make_config(ignore_missing_sessions=True),
        unit_of_work_factory=sqlite_unit_of_work,
        course_management=store,
        catalog=store,
        clock=fixed_clock(CURRENT_RUN),
    )

    assert scoped.skipped == 1
    assert scoped.updates == 0
    assert scoped.deletes == 1
    assert store.section_memberships("SEC1") == {}
    assert set(store.section_memberships("SEC2")) == {"U9"}
    assert _ledger_count(sqlite_unit_of_work) == 1


def test_course_mode_ledger_is_independent(
    store: SqlAlchemyCourseManagement,
    sqlite_unit_of_work: UowFactory,
) -> None:
    sync_memberships(
        [["SEC1", "U1", "Student", "Active"]],
        config=make_config(),
        unit_of_work_factory=sqlite_unit_of_work,
        course_management=store,
        catalog=store,
        clock=fixed_clock(PREVIOUS_RUN),
    )

    result = sync_memberships(
        [["CO1", "U1", "Student", "Active"], ["MISSING", "U2", "Student", "Active"]],
        config=make_config(mode=MembershipMode.COURSE),
        unit_of_work_factory=sqlite_unit_of_work,
        course_management=store,
        catalog=store,
        clock=fixed_clock(CURRENT_RUN),
    )

    assert result.updates == 1
    assert result.not_found == 1
    assert result.deletes == 0
    assert store.course_offering_memberships("CO1") == {"U1": ("Student", "Active")}
    assert set(store.section_memberships("SEC1")) == {"U1"}
    assert _ledger_count(sqlite_unit_of_work, MembershipMode.SECTION) == 1
    assert _ledger_count(sqlite_unit_of_work, MembershipMode.COURSE) == 1


def test_sync_from_csv_file_with_default_adapters(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    from sakora.adapters.sqlalchemy.unit_of_work import (  # noqa: PLC0415
        configured_session_factory,
        shutdown,
        startup,
    )

    database = tmp_path / "sakora.db"
    monkeypatch.setenv("DATABASE_URI", f"sqlite+pysqlite:///{database}")
    shutdown()
    startup(force=True)
    try:
        seed = SqlAlchemyCourseManagement(configured_session_factory())
        seed.add_course_offering("CO1")
        seed.add_section("SEC1", course_offering_key="CO1")

        extract = tmp_path / "memberships.csv"
        extract.write_text(
            "Container Eid,User Eid,Role,Status\n"
            "SEC1, U1, Student, Active\n"
            "\n"
            "SEC1,U2\n",
            encoding="utf-8",
        )

        result = sync_memberships(extract, config=make_config(), skip_header=True)
    finally:
        shutdown()

    assert result.rows_read == 2
    assert result.errors == 1
    assert result.updates == 1
    assert database.exists()


def test_unlinked_enrollment_set_is_adopted_on_next_run(
    store: SqlAlchemyCourseManagement,
    sqlite_unit_of_work: UowFactory,
) -> None:
    # an interrupted run created the set but never linked it to the section
    store.create_enrollment_set(
        "SEC1_ES",
        title="Biology lab",
        description=None,
        category="LAB",
        default_credits="5",
        course_offering_key="CO1",
    )
    assert store.get_section("SEC1").enrollment_set is None

    result = sync_memberships(
        [["SEC1", "U1", "Student", "Active"]],
        config=make_config(),
        unit_of_work_factory=sqlite_unit_of_work,
        course_management=store,
        catalog=store,
        clock=fixed_clock(CURRENT_RUN),
    )

    assert result.updates == 1
    section = store.get_section("SEC1")
    assert section.enrollment_set is not None
    assert section.enrollment_set.key == "SEC1_ES"
    assert store.enrollments("SEC1_ES") == {"U1": ("Active", "5", "Letter Grade")}
