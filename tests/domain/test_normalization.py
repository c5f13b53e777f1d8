from __future__ import annotations

import pytest

from sakora.domain.model import MembershipRecord, RejectionReason, RowRejected
from sakora.domain.normalization import RowDefaults, normalize_row

DEFAULTS = RowDefaults(credits="0", grading_scheme="Letter Grade")


def test_normalize_row_trims_fields_and_applies_defaults() -> None:
    result = normalize_row([" SEC1 ", "U1 ", " Student", "Active  "], DEFAULTS)

    assert result == MembershipRecord(
        container_key="SEC1",
        user_key="U1",
        role="Student",
        status="Active",
        credits="0",
        grading_scheme="Letter Grade",
    )


def test_normalize_row_keeps_optional_fields_when_present() -> None:
    result = normalize_row(["SEC1", "U1", "Student", "Active", "3", "Pass/Fail"], DEFAULTS)

    assert isinstance(result, MembershipRecord)
    assert result.credits == "3"
    assert result.grading_scheme == "Pass/Fail"


def test_normalize_row_blank_optional_fields_fall_back_to_defaults() -> None:
    result = normalize_row(["SEC1", "U1", "Student", "Active", "  ", ""], DEFAULTS)

    assert isinstance(result, MembershipRecord)
    assert result.credits == "0"
    assert result.grading_scheme == "Letter Grade"


def test_normalize_row_ignores_extra_fields() -> None:
    result = normalize_row(["SEC1", "U1", "Student", "Active", "4", "Letter", "x"], DEFAULTS)

    assert isinstance(result, MembershipRecord)
    assert result.credits == "4"


@pytest.mark.parametrize("fields", [[], ["SEC1"], ["SEC1", "U1", "Student"]])
def test_normalize_row_rejects_short_rows(fields: list[str]) -> None:
    result = normalize_row(fields, DEFAULTS)

    assert isinstance(result, RowRejected)
    assert result.reason is RejectionReason.TOO_FEW_FIELDS
    assert result.too_few_fields


@pytest.mark.parametrize(
    ("fields", "missing"),
    [
        (["", "U1", "Student", "Active"], "Container Eid"),
        (["SEC1", "  ", "Student", "Active"], "User Eid"),
        (["SEC1", "U1", "", "Active"], "Role"),
        (["SEC1", "U1", "Student", None], "Status"),
    ],
)
def test_normalize_row_rejects_missing_required_field(
    fields: list[str | None], missing: str
) -> None:
    result = normalize_row(fields, DEFAULTS)

    assert result == RowRejected(
        reason=RejectionReason.MISSING_REQUIRED_FIELD,
        field_name=missing,
    )
