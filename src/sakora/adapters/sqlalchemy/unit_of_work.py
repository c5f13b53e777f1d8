"""SQLAlchemy engine lifecycle and the membership unit of work."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from sakora.adapters.sqlalchemy.mappings import start_mappers
from sakora.adapters.sqlalchemy.migrations import upgrade_head
from sakora.adapters.sqlalchemy.repositories import (
    SqlAlchemyAuditLogRepository,
    SqlAlchemyShadowLedgerRepository,
)
from sakora.config import get_database_config
from sakora.domain.ports.unit_of_work import MembershipRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the SQLAlchemy adapter is used before (or after) its lifetime."""


@dataclass(slots=True)
class _AdapterState:
    engine: Engine | None = None
    session_factory: sessionmaker[Session] | None = None

    def bind(self, engine: Engine) -> None:
        self.engine = engine
        self.session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    def clear(self) -> None:
        self.engine = None
        self.session_factory = None


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> Engine:
    """Create (or adopt) the engine, map the entities and migrate the schema.

    Calling it twice is an error unless ``force`` is set, in which case the
    previous engine is replaced without being disposed.
    """

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    if engine is None:
        database = get_database_config()
        engine = create_engine(database_uri or database.uri, echo=database.echo, future=True)
    start_mappers()
    upgrade_head(engine=engine)
    _STATE.bind(engine)
    log.debug("SQLAlchemy adapter bound to %s", engine.url.render_as_string(hide_password=True))
    return engine


def configured_engine() -> Engine | None:
    return _STATE.engine


def configured_session_factory() -> sessionmaker[Session]:
    if _STATE.session_factory is None:
        raise StartupError(
            "SQLAlchemy adapter not initialised. Call sakora.adapters.sqlalchemy."
            "unit_of_work.startup() first."
        )
    return _STATE.session_factory


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and forget it (mostly for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.clear()


class SqlAlchemyMembershipUnitOfWork:
    """One session shared by the shadow ledger and the audit log.

    Commits are explicit; leaving the ``with`` block on an exception rolls back
    whatever was not committed yet.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self.session_factory = session_factory or configured_session_factory()
        self._session: Session | None = None
        self._repositories: MembershipRepositories | None = None

    def __enter__(self) -> SqlAlchemyMembershipUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = self.session_factory()
        self._repositories = MembershipRepositories(
            shadow_memberships=SqlAlchemyShadowLedgerRepository(self._session),
            audit_log=SqlAlchemyAuditLogRepository(self._session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @property
    def repositories(self) -> MembershipRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from sakora.domain.ports.unit_of_work import MembershipUnitOfWork

    _uow_check: MembershipUnitOfWork = SqlAlchemyMembershipUnitOfWork()
