"""Report fetch lifecycle: the latest initiated fetch wins."""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional

from reportdesk.analytics.stats import AggregateStats, compute_stats
from reportdesk.ingest.models import Report
from reportdesk.processing.normalizer import normalize_reports

Fetcher = Callable[[], Iterable[Any]]


class FeedState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class ReportFeed:
    """Holds the canonical collection for one dashboard view.

    Every fetch takes a ticket from ``begin``; a response is applied only if
    its ticket is still the newest one, so a slow early request can never
    overwrite the result of a later one. The collection is replaced
    wholesale on success and emptied on failure.
    """

    def __init__(self, fetcher: Fetcher) -> None:
        self.fetcher = fetcher
        self.state = FeedState.IDLE
        self.reports: List[Report] = []
        self.stats = AggregateStats()
        self.error: Optional[str] = None
        self._ticket = 0
        self._lock = threading.Lock()

    @property
    def is_empty(self) -> bool:
        return self.state == FeedState.LOADED and not self.reports

    def begin(self) -> int:
        with self._lock:
            self._ticket += 1
            self.state = FeedState.LOADING
            return self._ticket

    def cancel(self) -> None:
        """Supersede any in-flight fetch, e.g. when the view goes away."""
        with self._lock:
            self._ticket += 1
            if self.state == FeedState.LOADING:
                self.state = FeedState.IDLE

    def _is_current(self, ticket: int) -> bool:
        if ticket != self._ticket:
            logging.info("Discarding stale report response (ticket %d, latest %d)", ticket, self._ticket)
            return False
        return True

    def complete(self, ticket: int, raws: Iterable[Any]) -> bool:
        reports = normalize_reports(raws)
        with self._lock:
            if not self._is_current(ticket):
                return False
            self.reports = reports
            self.stats = compute_stats(reports)
            self.error = None
            self.state = FeedState.LOADED
        return True

    def fail(self, ticket: int, exc: BaseException) -> bool:
        with self._lock:
            if not self._is_current(ticket):
                return False
            logging.error("Report fetch failed: %s", exc)
            self.reports = []
            self.stats = AggregateStats()
            self.error = str(exc) or exc.__class__.__name__
            self.state = FeedState.FAILED
        return True

    def _run(self, ticket: int) -> bool:
        try:
            raws = list(self.fetcher())
        except Exception as exc:
            return self.fail(ticket, exc)
        return self.complete(ticket, raws)

    def refresh(self) -> FeedState:
        self._run(self.begin())
        return self.state

    def refresh_async(self, executor: Executor) -> "Future[bool]":
        """Start a fetch on ``executor``; the future resolves to whether it was applied."""
        return executor.submit(self._run, self.begin())
