"""Read membership extracts from CSV files."""

from __future__ import annotations

import csv
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

log = getLogger(__name__)


def read_rows(
    path: Path,
    *,
    skip_header: bool = False,
    encoding: str = "utf-8",
) -> Iterator[list[str]]:
    """Yield the raw fields of each non-empty line of ``path``, lazily."""

    with path.open(newline="", encoding=encoding) as handle:
        reader = csv.reader(handle, skipinitialspace=True)
        for line_number, fields in enumerate(reader, start=1):
            if skip_header and line_number == 1:
                log.debug("Skipping header line of %s: %s", path, fields)
                continue
            if not any(field.strip() for field in fields):
                continue
            yield fields
