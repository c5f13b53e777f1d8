from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from sakora.adapters.sqlalchemy import SqlAlchemyCourseManagement, start_mappers
from sakora.adapters.sqlalchemy.migrations import upgrade_head
from sakora.adapters.sqlalchemy.unit_of_work import SqlAlchemyMembershipUnitOfWork

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    # in-memory SQLite keeps one connection per thread, so every session sees the schema
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    start_mappers()
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session_factory(sqlite_engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=sqlite_engine, expire_on_commit=False)


@pytest.fixture
def sqlite_session(sqlite_session_factory: sessionmaker[Session]) -> Iterator[Session]:
    with sqlite_session_factory() as session:
        yield session


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_session_factory: sessionmaker[Session],
) -> Callable[[], SqlAlchemyMembershipUnitOfWork]:
    def factory() -> SqlAlchemyMembershipUnitOfWork:
        return SqlAlchemyMembershipUnitOfWork(sqlite_session_factory)

    return factory


@pytest.fixture
def sqlite_course_management(
    sqlite_session_factory: sessionmaker[Session],
) -> SqlAlchemyCourseManagement:
    return SqlAlchemyCourseManagement(sqlite_session_factory)
