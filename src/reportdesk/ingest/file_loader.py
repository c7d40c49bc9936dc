"""Load raw report listings from local JSON or CSV dumps."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from reportdesk.ingest.models import RawReportRecord, ReportBatch
from reportdesk.processing.normalizer import to_raw_record


COLUMN_ALIASES: Dict[str, List[str]] = {
    "id": ["id", "report_id", "uid"],
    "fileName": ["fileName", "file_name", "filename", "name"],
    "userFriendlyName": ["userFriendlyName", "display_name", "friendly_name", "title"],
    "batch": ["batch", "class", "class_name", "batch_name"],
    "subject": ["subject", "subject_name"],
    "section": ["section", "division", "lab_name"],
    "date": ["date", "created", "created_at", "date_created"],
    "size": ["size", "file_size"],
    "records": ["records", "record_count", "rows"],
    "status": ["status", "state"],
    "url": ["url", "link", "download_url"],
    "students": ["students", "student_names"],
}


def _match_column(columns: List[str], candidates: List[str]) -> Optional[str]:
    lower = {c.lower(): c for c in columns}
    for alias in candidates:
        if alias.lower() in lower:
            return lower[alias.lower()]
    return None


def _clean(value: Any) -> Any:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def _split_students(value: Any) -> Optional[List[str]]:
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    if isinstance(value, str):
        return [s.strip() for s in value.replace(";", ",").split(",") if s.strip()]
    return None


def _load_frame(path: Path) -> pd.DataFrame:
    if path.suffix.lower() == ".json":
        with path.open(encoding="utf-8") as f:
            payload = json.load(f)
        if isinstance(payload, dict):
            payload = payload.get("reports", [])
        return pd.DataFrame([row for row in payload if isinstance(row, dict)], dtype=object)
    return pd.read_csv(path, dtype=str, keep_default_na=False)


def load_reports_file(path: Path, source_name: Optional[str] = None) -> ReportBatch:
    """Load raw report records from a JSON list or CSV export."""
    source_name = source_name or path.stem
    df = _load_frame(path)
    column_cache: Dict[str, Optional[str]] = {
        field: _match_column(df.columns.tolist(), aliases)
        for field, aliases in COLUMN_ALIASES.items()
    }

    records: List[RawReportRecord] = []
    issues: List[str] = []

    for idx, row in df.iterrows():
        data: Dict[str, Any] = {}
        for field_name, column_name in column_cache.items():
            if column_name is None:
                continue
            value = row.get(column_name)
            if not isinstance(value, list):
                value = _clean(value)
            if value is not None:
                data[field_name] = value

        if not str(data.get("fileName") or "").strip():
            issues.append(f"Row {idx} missing file name; skipped")
            continue

        if "students" in data:
            data["students"] = _split_students(data["students"])
        records.append(to_raw_record(data))

    return ReportBatch(
        source_name=source_name,
        records=records,
        raw_path=str(path),
        issues=issues,
    )
