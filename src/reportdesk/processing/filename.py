"""Recover report metadata encoded in report file names."""
from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Dict, Optional

EXTENSION_PATTERN = re.compile(r"\.[A-Za-z0-9]{1,5}$")

# YYYYMMDD_Class_Section_Subject
DATE_FIRST_PATTERN = re.compile(r"^(\d{4})(\d{2})(\d{2})_([^_]+)_([^_]+)_([^_]+)$")
# Class_Subject_Section_DD-MM-YYYY
DATE_LAST_PATTERN = re.compile(r"^([^_]+)_([^_]+)_([^_]+)_(\d{2})-(\d{2})-(\d{4})$")

DATE_FORMATS = ("%Y-%m-%d", "%d-%m-%Y", "%d/%m/%Y", "%Y/%m/%d", "%Y%m%d")
LEADING_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:[T ]|$)")


@dataclass
class FileNameMetadata:
    """Fields decoded from a file name; ``None`` means the name did not carry it."""

    class_name: Optional[str] = None
    subject: Optional[str] = None
    section: Optional[str] = None
    date: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.as_dict()

    def as_dict(self) -> Dict[str, str]:
        return {key: value for key, value in asdict(self).items() if value is not None}


def _calendar_date(year: str, month: str, day: str) -> Optional[str]:
    try:
        return date(int(year), int(month), int(day)).isoformat()
    except ValueError:
        return None


def strip_extension(name: str) -> str:
    return EXTENSION_PATTERN.sub("", name.strip())


def parse_file_name(name: object) -> FileNameMetadata:
    """Decode class, subject, section and date from a report file name.

    Two encodings are recognized, tried in order:

    * ``20240115_10A_B_Maths.xlsx`` (date, class, section, subject)
    * ``10A_Maths_B_15-01-2024.xlsx`` (class, subject, section, date)

    Names matching neither come back as an empty ``FileNameMetadata``.
    """
    if not isinstance(name, str) or not name.strip():
        return FileNameMetadata()

    stem = strip_extension(name)

    match = DATE_FIRST_PATTERN.match(stem)
    if match:
        year, month, day, class_name, section, subject = match.groups()
        iso = _calendar_date(year, month, day)
        if iso:
            return FileNameMetadata(class_name=class_name, subject=subject, section=section, date=iso)

    match = DATE_LAST_PATTERN.match(stem)
    if match:
        class_name, subject, section, day, month, year = match.groups()
        iso = _calendar_date(year, month, day)
        if iso:
            return FileNameMetadata(class_name=class_name, subject=subject, section=section, date=iso)

    return FileNameMetadata()


def normalize_date(value: object) -> Optional[str]:
    """Return ``value`` as ``YYYY-MM-DD`` or ``None`` when it is not a recognizable date."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue

    # Timestamps fromisoformat rejects on older interpreters, e.g. 2024-01-15T10:30:00.1234Z
    match = LEADING_ISO_DATE.match(text)
    if match:
        return _calendar_date(*match.groups())
    return None
