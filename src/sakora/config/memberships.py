"""Settings for CSV membership reconciliation runs."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Final

from sakora.domain.model import MembershipMode

from .env import env_bool, env_int, env_list, env_str
from .errors import ConfigurationError, MissingConfigurationError

DEFAULT_CREDITS: Final[str] = "0"
DEFAULT_GRADING_SCHEME: Final[str] = "Letter Grade"
DEFAULT_ENROLLMENT_SET_CATEGORY: Final[str] = "NONE"
DEFAULT_SEARCH_PAGE_SIZE: Final[int] = 1000
DEFAULT_STUDENT_ROLE: Final[str] = "Student"
DEFAULT_INSTRUCTOR_ROLE: Final[str] = "Instructor"
DEFAULT_TA_ROLE: Final[str] = "TA"


def _parse_mode(value: MembershipMode | str) -> MembershipMode:
    if isinstance(value, MembershipMode):
        return value
    try:
        return MembershipMode(value.strip().lower())
    except ValueError as exc:
        choices = ", ".join(mode.value for mode in MembershipMode)
        raise ConfigurationError(
            f"Invalid membership mode {value!r} (expected {choices})", setting="mode"
        ) from exc


@dataclass(frozen=True, slots=True, kw_only=True)
class MembershipSyncConfig:
    mode: MembershipMode = MembershipMode.SECTION
    ta_role: str = DEFAULT_TA_ROLE
    student_role: str = DEFAULT_STUDENT_ROLE
    instructor_role: str = DEFAULT_INSTRUCTOR_ROLE
    default_credits: str = DEFAULT_CREDITS
    default_grading_scheme: str = DEFAULT_GRADING_SCHEME
    default_enrollment_set_category: str = DEFAULT_ENROLLMENT_SET_CATEGORY
    ignore_membership_removals: bool = False
    ignore_missing_sessions: bool = False
    search_page_size: int = DEFAULT_SEARCH_PAGE_SIZE
    current_sessions: frozenset[str] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", _parse_mode(self.mode))
        for name in ("student_role", "instructor_role", "ta_role"):
            value = getattr(self, name)
            if value is None or not value.strip():
                raise MissingConfigurationError([name])
            object.__setattr__(self, name, value.strip())
        if self.search_page_size <= 0:
            raise ConfigurationError(
                f"search_page_size must be positive, got {self.search_page_size}",
                setting="search_page_size",
            )
        if not self.default_enrollment_set_category.strip():
            raise MissingConfigurationError(["default_enrollment_set_category"])

    def is_student(self, role: str) -> bool:
        return role.casefold() == self.student_role.casefold()

    def is_instructor(self, role: str) -> bool:
        return role.casefold() == self.instructor_role.casefold()

    def with_overrides(self, **overrides: Any) -> MembershipSyncConfig:
        """Return a copy with the non-``None`` overrides applied."""

        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes) if changes else self

    @classmethod
    def from_environment(cls) -> MembershipSyncConfig:
        return cls(
            mode=_parse_mode(env_str("SAKORA_MODE", MembershipMode.SECTION.value)),
            ta_role=env_str("SAKORA_TA_ROLE", DEFAULT_TA_ROLE),
            student_role=env_str("SAKORA_STUDENT_ROLE", DEFAULT_STUDENT_ROLE),
            instructor_role=env_str("SAKORA_INSTRUCTOR_ROLE", DEFAULT_INSTRUCTOR_ROLE),
            default_credits=env_str("SAKORA_DEFAULT_CREDITS", DEFAULT_CREDITS),
            default_grading_scheme=env_str(
                "SAKORA_DEFAULT_GRADING_SCHEME", DEFAULT_GRADING_SCHEME
            ),
            default_enrollment_set_category=env_str(
                "SAKORA_DEFAULT_ENROLLMENT_SET_CATEGORY", DEFAULT_ENROLLMENT_SET_CATEGORY
            ),
            ignore_membership_removals=env_bool("SAKORA_IGNORE_MEMBERSHIP_REMOVALS"),
            ignore_missing_sessions=env_bool("SAKORA_IGNORE_MISSING_SESSIONS"),
            search_page_size=env_int("SAKORA_SEARCH_PAGE_SIZE", DEFAULT_SEARCH_PAGE_SIZE),
            current_sessions=env_list("SAKORA_CURRENT_SESSIONS"),
        )


def get_membership_sync_config() -> MembershipSyncConfig:
    return MembershipSyncConfig.from_environment()
