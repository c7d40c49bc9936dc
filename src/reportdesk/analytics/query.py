"""Search, filter, sort and paginate canonical reports for table display."""
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from reportdesk.ingest.models import UNKNOWN, Report, RosterEntry

ALL = "all"
DEFAULT_PAGE_SIZE = 10
FILTER_FIELDS = ("batch", "subject", "section")

SORT_KEYS: Dict[str, Callable[[Report], object]] = {
    "file_name": lambda report: report.display_name.lower(),
    "batch": lambda report: report.batch,
    "subject": lambda report: report.subject,
    "section": lambda report: report.section,
    "date": lambda report: report.date,
    "status": lambda report: report.status.value,
    "size": lambda report: report.size_kb,
    "records": lambda report: report.record_count,
}


@dataclass(frozen=True)
class QueryState:
    """User-controlled table parameters. Transitions return new states."""

    search: str = ""
    batch: str = ALL
    subject: str = ALL
    section: str = ALL
    sort_key: Optional[str] = None
    descending: bool = False
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def toggle_sort(self, key: str) -> "QueryState":
        if key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {key}")
        if key == self.sort_key:
            return replace(self, descending=not self.descending)
        return replace(self, sort_key=key, descending=False)

    def with_search(self, search: str) -> "QueryState":
        return replace(self, search=search, page=1)

    def with_filter(self, name: str, value: str) -> "QueryState":
        if name not in FILTER_FIELDS:
            raise ValueError(f"Unknown filter: {name}")
        return replace(self, page=1, **{name: value or ALL})

    def with_page(self, page: int) -> "QueryState":
        return replace(self, page=page)


@dataclass
class QueryResult:
    items: List[Report] = field(default_factory=list)
    total_matching: int = 0
    total_pages: int = 1
    page: int = 1


def search_text(report: Report) -> str:
    return " ".join((report.batch, report.subject, report.section, report.date)).lower()


def matches(report: Report, state: QueryState) -> bool:
    needle = state.search.strip().lower()
    if needle and needle not in search_text(report):
        return False
    for name in FILTER_FIELDS:
        selected = getattr(state, name)
        if selected != ALL and getattr(report, name) != selected:
            return False
    return True


def apply_query(reports: Sequence[Report], state: QueryState) -> QueryResult:
    """Return the visible page for ``state``; ``reports`` is left untouched.

    Out-of-range pages are clamped, and an empty result still reports one page.
    """
    if state.page_size < 1:
        raise ValueError("page_size must be positive")

    selected = [report for report in reports if matches(report, state)]
    if state.sort_key is not None:
        key = SORT_KEYS.get(state.sort_key)
        if key is None:
            raise ValueError(f"Unknown sort key: {state.sort_key}")
        selected = sorted(selected, key=key, reverse=state.descending)

    total = len(selected)
    total_pages = max(1, math.ceil(total / state.page_size))
    page = min(max(state.page, 1), total_pages)
    start = (page - 1) * state.page_size

    return QueryResult(
        items=selected[start : start + state.page_size],
        total_matching=total,
        total_pages=total_pages,
        page=page,
    )


def filter_options(reports: Iterable[Report]) -> Dict[str, List[str]]:
    """Distinct known values per filter column, for populating dropdowns."""
    options: Dict[str, set] = {name: set() for name in FILTER_FIELDS}
    for report in reports:
        for name in FILTER_FIELDS:
            value = getattr(report, name)
            if value != UNKNOWN:
                options[name].add(value)
    return {name: sorted(values) for name, values in options.items()}


def search_roster(entries: Iterable[RosterEntry], term: str) -> List[RosterEntry]:
    needle = term.strip().lower()
    if not needle:
        return list(entries)
    return [
        entry
        for entry in entries
        if needle in entry.name.lower() or needle in entry.identifier.lower()
    ]
