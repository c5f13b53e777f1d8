"""CSV-driven membership reconciliation.

A run has two phases:

1. *Upsert*: each input row is pushed to the course management store and its
   (mode, user, container) triple is stamped with the run stamp in the shadow
   ledger.
2. *Sweep*: ledger entries of the current mode that did not receive the run
   stamp describe memberships missing from the extract; they are removed from
   the store and from the ledger.

The sweep never loads the whole stale set: the container scope is split into
chunks (bounding the size of the ``IN`` predicate) and every chunk is read page
by page.
"""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Final

from sakora.domain.errors import TargetNotFoundError
from sakora.domain.model import (
    AuditLogEntry,
    MembershipMode,
    RowRejected,
    ShadowMembership,
)
from sakora.domain.normalization import RowDefaults, normalize_row

from .result import RunTally

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Sequence

    from sakora.config import MembershipSyncConfig
    from sakora.domain.model import (
        EnrollmentSet,
        LedgerOutcome,
        MembershipRecord,
        RunStamp,
        Section,
    )
    from sakora.domain.ports import CourseManagement, MembershipUnitOfWork

    from .result import MembershipSyncResult
    from .scope import ContainerScope

CONTAINER_CHUNK_SIZE: Final[int] = 1000

log = getLogger(__name__)


def _utcnow() -> datetime:
    # whole seconds survive every backend's datetime column, so stamps compare equal
    return datetime.now(UTC).replace(microsecond=0)


def chunked(keys: Sequence[str], size: int) -> Iterator[Sequence[str]]:
    for start in range(0, len(keys), size):
        yield keys[start : start + size]


class MembershipReconciliationEngine:
    """Reconcile one membership extract against the course management store."""

    def __init__(
        self,
        *,
        config: MembershipSyncConfig,
        course_management: CourseManagement,
        scope: ContainerScope,
        unit_of_work_factory: Callable[[], MembershipUnitOfWork],
        clock: Callable[[], RunStamp] | None = None,
    ) -> None:
        self.config = config
        self.course_management = course_management
        self.scope = scope
        self.unit_of_work_factory = unit_of_work_factory
        self.clock = clock or _utcnow

    @property
    def mode(self) -> MembershipMode:
        return self.config.mode

    @property
    def name(self) -> str:
        return self.mode.handler_name

    def run(self, rows: Iterable[Sequence[str | None]]) -> MembershipSyncResult:
        """Process every row in order, then sweep stale memberships."""

        stamp = self.clock()
        tally = RunTally()
        defaults = RowDefaults(
            credits=self.config.default_credits,
            grading_scheme=self.config.default_grading_scheme,
        )
        log.info("Starting %s sync with run stamp %s", self.name, stamp.isoformat())

        with self.unit_of_work_factory() as uow:
            for fields in rows:
                tally.rows_read += 1
                normalized = normalize_row(fields, defaults)
                if isinstance(normalized, RowRejected):
                    tally.errors += 1
                    continue
                self._process_record(uow, normalized, stamp, tally)

            if self.scope.ignore_membership_removals:
                log.debug(
                    "Skipping %s membership removals, ignore_membership_removals=true",
                    self.mode,
                )
            else:
                self._sweep(uow, stamp, tally)

            result = tally.freeze(mode=self.mode, run_stamp=stamp)
            self._audit(uow, result.summary)

        log.info(
            "Finished %s sync: rows=%s, updates=%s, deletes=%s, errors=%s, skipped=%s",
            self.name,
            result.rows_read,
            result.updates,
            result.deletes,
            result.errors,
            result.skipped,
        )
        return result

    # Upsert ------------------------------------------------------------------

    def _process_record(
        self,
        uow: MembershipUnitOfWork,
        record: MembershipRecord,
        stamp: RunStamp,
        tally: RunTally,
    ) -> None:
        self.scope.add_current_container(record.container_key, self.mode)
        try:
            if not self.scope.is_container_current(record.container_key, self.mode):
                log.debug(
                    "Skipped %s membership for user (%s) in %s (%s): "
                    "academic session is being skipped",
                    self.mode,
                    record.user_key,
                    self.mode,
                    record.container_key,
                )
                tally.skipped += 1
                return

            if self.mode is MembershipMode.SECTION:
                self._upsert_section_membership(record)
            else:
                self.course_management.add_or_update_course_offering_membership(
                    record.user_key, record.role, record.container_key, record.status
                )
            # the store upserts, so adds and updates are not told apart
            tally.updates += 1

            if self.scope.ignore_membership_removals:
                log.debug(
                    "Skipping ledger update for user (%s) and %s (%s), "
                    "ignore_membership_removals=true",
                    record.user_key,
                    self.mode,
                    record.container_key,
                )
            else:
                outcome = self._record_sighting(uow, record, stamp)
                log.debug(
                    "Ledger entry %s for user (%s) in %s (%s)",
                    outcome,
                    record.user_key,
                    self.mode,
                    record.container_key,
                )
        except TargetNotFoundError as exc:
            tally.not_found += 1
            self._audit(uow, str(exc))

    def _upsert_section_membership(self, record: MembershipRecord) -> None:
        cm = self.course_management
        section = cm.get_section(record.container_key)
        enrollment_set = section.enrollment_set
        if enrollment_set is None:
            enrollment_set = self._create_enrollment_set(section)
            section.enrollment_set = enrollment_set
            cm.update_section(section)

        if self.config.is_instructor(record.role) and enrollment_set.add_official_instructor(
            record.user_key
        ):
            cm.update_enrollment_set(enrollment_set)

        cm.add_or_update_section_membership(
            record.user_key, record.role, record.container_key, record.status
        )

        if self.config.is_student(record.role):
            credits = record.credits
            if credits == self.config.default_credits:
                credits = enrollment_set.default_credits
            cm.add_or_update_enrollment(
                record.user_key,
                enrollment_set.key,
                record.status,
                credits,
                record.grading_scheme,
            )

    def _create_enrollment_set(self, section: Section) -> EnrollmentSet:
        log.debug(
            "Section [%s] has no enrollment set, creating one with eid [%s]",
            section.key,
            section.enrollment_set_key,
        )
        return self.course_management.create_enrollment_set(
            section.enrollment_set_key,
            title=section.title,
            description=section.description,
            category=section.category or self.config.default_enrollment_set_category,
            default_credits=self.config.default_credits,
            course_offering_key=section.course_offering_key,
        )

    def _record_sighting(
        self,
        uow: MembershipUnitOfWork,
        record: MembershipRecord,
        stamp: RunStamp,
    ) -> LedgerOutcome:
        ledger = uow.repositories.shadow_memberships
        existing = ledger.find(
            mode=self.mode,
            user_key=record.user_key,
            container_key=record.container_key,
        )
        if not existing:
            ledger.add(
                ShadowMembership(
                    user_key=record.user_key,
                    container_key=record.container_key,
                    mode=self.mode,
                    role=record.role,
                    last_seen_stamp=stamp,
                )
            )
            uow.commit()
            return "created"

        *duplicates, newest = existing
        for duplicate in duplicates:
            # a leftover duplicate keeps an old stamp and would get swept later
            log.warning(
                "Removing duplicate ledger entry %s for user (%s) in %s (%s)",
                duplicate.id,
                record.user_key,
                self.mode,
                record.container_key,
            )
            ledger.delete(duplicate)
            uow.commit()

        newest.touch(role=record.role, stamp=stamp)
        uow.commit()
        return "updated"

    # Sweep -------------------------------------------------------------------

    def _sweep(self, uow: MembershipUnitOfWork, stamp: RunStamp, tally: RunTally) -> None:
        with self.course_management.admin_session():
            chunks: Iterable[Sequence[str] | None]
            current_keys = self.scope.current_container_keys(self.mode)
            if current_keys is None:
                chunks = (None,)
            elif not current_keys:
                log.warning(
                    "%sHandler: no current containers, skipping all membership removals",
                    self.name,
                )
                return
            else:
                chunks = chunked(sorted(current_keys), CONTAINER_CHUNK_SIZE)

            for chunk in chunks:
                if chunk is not None:
                    log.info(
                        "Limiting %s membership removals to %s %s containers",
                        self.mode,
                        len(chunk),
                        self.mode,
                    )
                self._sweep_chunk(uow, stamp, chunk, tally)

    def _sweep_chunk(
        self,
        uow: MembershipUnitOfWork,
        stamp: RunStamp,
        container_keys: Sequence[str] | None,
        tally: RunTally,
    ) -> None:
        ledger = uow.repositories.shadow_memberships
        after_id: int | None = None
        while True:
            page = ledger.find_stale(
                mode=self.mode,
                stamp=stamp,
                container_keys=container_keys,
                after_id=after_id,
                limit=self.config.search_page_size,
            )
            if not page:
                break
            log.debug("Processing %s %s membership removals", len(page), self.mode)
            after_id = page[-1].id
            for entry in page:
                self._remove_membership(uow, entry, tally)
                ledger.delete(entry)
            uow.commit()

    def _remove_membership(
        self,
        uow: MembershipUnitOfWork,
        entry: ShadowMembership,
        tally: RunTally,
    ) -> None:
        cm = self.course_management
        try:
            if self.mode is MembershipMode.SECTION:
                removed = cm.remove_section_membership(entry.user_key, entry.container_key)
                section = cm.get_section(entry.container_key)
                if section.enrollment_set is None:
                    log.info(
                        "No enrollment set found for section %s, "
                        "enrollments for this section can't be removed",
                        section.key,
                    )
                else:
                    removed = (
                        cm.remove_enrollment(entry.user_key, section.enrollment_set.key) or removed
                    )
            else:
                removed = cm.remove_course_offering_membership(entry.user_key, entry.container_key)
        except TargetNotFoundError as exc:
            tally.not_found += 1
            self._audit(uow, str(exc))
            return

        if removed:
            tally.deletes += 1
            log.debug(
                "Removed %s membership for %s: %s",
                self.mode,
                entry.user_key,
                entry.container_key,
            )

    def _audit(self, uow: MembershipUnitOfWork, message: str) -> None:
        uow.repositories.audit_log.add(AuditLogEntry(component=self.name, message=message))
        uow.commit()
