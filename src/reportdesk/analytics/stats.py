"""Summary metrics over a canonical report collection."""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Iterable, Optional

from reportdesk.ingest.models import UNKNOWN, Report
from reportdesk.processing.filename import normalize_date

SIZE_PATTERN = re.compile(r"^\s*([-+]?\d+(?:\.\d+)?)\s*([KMG]?B)?\s*$", re.IGNORECASE)
UNIT_TO_KB = {
    "B": 1 / 1024,
    "KB": 1.0,
    "MB": 1024.0,
    "GB": 1024.0 * 1024.0,
}
NO_DATA = "No data"


def parse_size(value: object) -> float:
    """Return a size label such as ``"12.5 KB"`` or ``"1.2 MB"`` in kilobytes.

    Bare numbers are taken as kilobytes. Anything unparseable, negative or
    non-finite counts as ``0.0``.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number, unit = float(value), "KB"
    elif isinstance(value, str):
        match = SIZE_PATTERN.match(value)
        if not match:
            if value.strip():
                logging.debug("Unparseable size label %r counted as 0", value)
            return 0.0
        number, unit = float(match.group(1)), (match.group(2) or "KB").upper()
    else:
        return 0.0

    if not math.isfinite(number) or number < 0:
        return 0.0
    return number * UNIT_TO_KB[unit]


@dataclass(frozen=True)
class AggregateStats:
    total_reports: int = 0
    total_size_kb: float = 0.0
    total_records: int = 0
    latest: Optional[str] = None

    @property
    def total_size(self) -> str:
        return f"{self.total_size_kb:.1f} KB"

    @property
    def has_data(self) -> bool:
        return self.latest is not None

    @property
    def latest_label(self) -> str:
        return self.latest or NO_DATA


def compute_stats(reports: Iterable[Report]) -> AggregateStats:
    """Derive summary metrics; an empty collection yields zeroed stats and no latest date."""
    total_reports = 0
    total_size_kb = 0.0
    total_records = 0
    latest: Optional[str] = None

    for report in reports:
        total_reports += 1
        total_size_kb += report.size_kb
        total_records += max(report.record_count, 0)

        if report.date == UNKNOWN:
            continue
        day = normalize_date(report.date)
        if day and (latest is None or day > latest):
            latest = day

    return AggregateStats(
        total_reports=total_reports,
        total_size_kb=total_size_kb,
        total_records=total_records,
        latest=latest,
    )
