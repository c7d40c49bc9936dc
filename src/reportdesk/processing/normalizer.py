"""Turn raw backend report records into canonical reports."""
from __future__ import annotations

import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Union

from pydantic import ValidationError

from reportdesk.analytics.stats import parse_size
from reportdesk.ingest.models import UNKNOWN, RawReportRecord, Report, ReportStatus
from reportdesk.processing.filename import normalize_date, parse_file_name

STATUS_ALIASES: Dict[str, ReportStatus] = {
    "ready": ReportStatus.READY,
    "completed": ReportStatus.READY,
    "complete": ReportStatus.READY,
    "done": ReportStatus.READY,
    "success": ReportStatus.READY,
    "available": ReportStatus.READY,
    "generating": ReportStatus.GENERATING,
    "pending": ReportStatus.GENERATING,
    "processing": ReportStatus.GENERATING,
    "queued": ReportStatus.GENERATING,
    "in_progress": ReportStatus.GENERATING,
    "error": ReportStatus.ERROR,
    "failed": ReportStatus.ERROR,
}

RawInput = Union[RawReportRecord, Mapping[str, Any]]


def _text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def coerce_record_count(value: Any) -> int:
    """Non-numeric, negative or non-finite counts become 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            logging.debug("Non-numeric record count %r counted as 0", value)
            return 0
    if isinstance(value, (int, float)) and math.isfinite(value) and value > 0:
        return int(value)
    return 0


def coerce_status(value: Optional[str]) -> ReportStatus:
    key = (_text(value) or "ready").lower().replace(" ", "_").replace("-", "_")
    status = STATUS_ALIASES.get(key)
    if status is None:
        logging.debug("Unknown report status %r mapped to error", value)
        return ReportStatus.ERROR
    return status


def to_raw_record(item: RawInput) -> RawReportRecord:
    """Validate a mapping, dropping only the fields that fail validation."""
    if isinstance(item, RawReportRecord):
        return item

    if not isinstance(item, Mapping):
        logging.warning("Ignoring non-object report entry %r", item)
        item = {}
    data = dict(item)
    try:
        return RawReportRecord.model_validate(data)
    except ValidationError as exc:
        bad_fields = {error["loc"][0] for error in exc.errors() if error["loc"]}
        logging.warning("Dropping malformed report fields %s", sorted(map(str, bad_fields)))
        for name in bad_fields:
            data.pop(name, None)
        return RawReportRecord.model_validate(data)


def normalize_report(item: RawInput, index: int = 0) -> Report:
    """Merge file-name metadata with backend fields.

    For batch, subject, section and date the value decoded from the file name
    wins, then a non-empty backend value, then ``UNKNOWN``.
    """
    raw = to_raw_record(item)
    display_name = _text(raw.display_name)
    file_name = _text(raw.file_name) or ""
    parsed = parse_file_name(display_name or file_name)

    backend_date = normalize_date(raw.date) if _text(raw.date) else None
    if _text(raw.date) and backend_date is None:
        logging.debug("Unparseable report date %r", raw.date)

    return Report(
        id=_text(None if raw.id is None else str(raw.id)) or f"report_{index:04d}",
        file_name=file_name,
        display_name=display_name or file_name,
        batch=parsed.class_name or _text(raw.batch) or UNKNOWN,
        subject=parsed.subject or _text(raw.subject) or UNKNOWN,
        section=parsed.section or _text(raw.section) or UNKNOWN,
        date=parsed.date or backend_date or UNKNOWN,
        size="" if raw.size is None else str(raw.size),
        size_kb=parse_size(raw.size),
        record_count=coerce_record_count(raw.records),
        status=coerce_status(raw.status),
        url=_text(raw.url) or "",
        students=list(raw.students or []),
    )


def normalize_reports(items: Iterable[RawInput]) -> List[Report]:
    """Normalize a whole fetch; order and length are preserved.

    Repeated backend ids are suffixed with the record position to keep ids unique.
    """
    reports: List[Report] = []
    seen: Set[str] = set()
    for index, item in enumerate(items):
        report = normalize_report(item, index)
        if report.id in seen:
            logging.warning("Duplicate report id %s at position %d", report.id, index)
            report = report.model_copy(update={"id": f"{report.id}#{index}"})
        seen.add(report.id)
        reports.append(report)
    return reports
