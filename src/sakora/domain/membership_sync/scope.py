"""Decide which containers a run may touch.

With ``ignore_missing_sessions`` enabled only containers belonging to a current
academic session are processed, and only memberships in those containers are
swept. With it disabled every container is treated as current.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from sakora.domain.model import MembershipMode

if TYPE_CHECKING:
    from sakora.config import MembershipSyncConfig
    from sakora.domain.ports import ContainerCatalog

log = getLogger(__name__)


class ContainerScope:
    def __init__(
        self,
        catalog: ContainerCatalog,
        *,
        ignore_missing_sessions: bool = False,
        ignore_membership_removals: bool = False,
        current_sessions: frozenset[str] | None = None,
    ) -> None:
        self._catalog = catalog
        self._ignore_missing_sessions = ignore_missing_sessions
        self._ignore_membership_removals = ignore_membership_removals
        self._current_sessions = current_sessions
        self._seen: dict[MembershipMode, set[str]] = {mode: set() for mode in MembershipMode}
        self._current_by_key: dict[tuple[MembershipMode, str], bool] = {}
        self._current_keys: dict[MembershipMode, frozenset[str]] = {}

    @classmethod
    def from_config(cls, config: MembershipSyncConfig, catalog: ContainerCatalog) -> ContainerScope:
        return cls(
            catalog,
            ignore_missing_sessions=config.ignore_missing_sessions,
            ignore_membership_removals=config.ignore_membership_removals,
            current_sessions=config.current_sessions,
        )

    @property
    def ignore_missing_sessions(self) -> bool:
        return self._ignore_missing_sessions

    @property
    def ignore_membership_removals(self) -> bool:
        return self._ignore_membership_removals

    @property
    def current_sessions(self) -> frozenset[str]:
        if self._current_sessions is None:
            self._current_sessions = self._catalog.current_session_keys()
            log.debug("Current academic sessions: %s", sorted(self._current_sessions))
        return self._current_sessions

    def add_current_container(self, key: str, mode: MembershipMode) -> None:
        """Remember that ``key`` appeared in this run's input."""

        self._seen[mode].add(key)

    def seen_container_keys(self, mode: MembershipMode) -> frozenset[str]:
        return frozenset(self._seen[mode])

    def is_container_current(self, key: str, mode: MembershipMode) -> bool:
        if not self._ignore_missing_sessions:
            return True
        cache_key = (mode, key)
        cached = self._current_by_key.get(cache_key)
        if cached is None:
            session_key = self._catalog.session_key_for(key, mode)
            cached = session_key is not None and session_key in self.current_sessions
            self._current_by_key[cache_key] = cached
        return cached

    def current_container_keys(self, mode: MembershipMode) -> frozenset[str] | None:
        """Containers eligible for membership removal, computed once per run.

        ``None`` means unbounded: without session filtering every container is
        current.
        """

        if not self._ignore_missing_sessions:
            return None
        cached = self._current_keys.get(mode)
        if cached is None:
            in_sessions = self._catalog.container_keys_in_sessions(self.current_sessions, mode)
            seen_current = {key for key in self._seen[mode] if self.is_container_current(key, mode)}
            cached = frozenset(in_sessions) | frozenset(seen_current)
            self._current_keys[mode] = cached
        return cached
