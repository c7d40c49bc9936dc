"""Data models for the reporting layer."""
from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN = "-"


class ReportStatus(str, Enum):
    READY = "ready"
    GENERATING = "generating"
    ERROR = "error"


class RawReportRecord(BaseModel):
    """Report descriptor exactly as the backend delivers it."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    id: Optional[Union[str, int]] = None
    file_name: str = Field(default="", alias="fileName")
    display_name: Optional[str] = Field(default=None, alias="userFriendlyName")
    batch: Optional[str] = None
    subject: Optional[str] = None
    section: Optional[str] = None
    date: Optional[str] = None
    size: Any = ""
    records: Any = 0
    status: Optional[str] = None
    url: Optional[str] = None
    students: Optional[List[str]] = None


class Report(BaseModel):
    """Canonical report; filter, sort and search fields always hold a value or ``UNKNOWN``."""

    model_config = ConfigDict(frozen=True)

    id: str
    file_name: str
    display_name: str
    batch: str = UNKNOWN
    subject: str = UNKNOWN
    section: str = UNKNOWN
    date: str = UNKNOWN
    size: str = ""
    size_kb: float = Field(default=0.0, ge=0)
    record_count: int = Field(default=0, ge=0)
    status: ReportStatus = ReportStatus.READY
    url: str = ""
    students: List[str] = Field(default_factory=list)


class ReportBatch(BaseModel):
    """Container for loaded raw records along with provenance metadata."""

    source_name: str
    records: List[RawReportRecord]
    raw_path: str
    issues: List[str] = Field(default_factory=list)

    def iter_records(self) -> Iterable[RawReportRecord]:
        return iter(self.records)


class RosterEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    identifier: str = Field(default="", alias="er_number")
    name: str = ""


class AttendanceResult(BaseModel):
    """Response of the attendance-taking backend.

    Older backends answer with a flat ``recognized_students`` list, newer ones
    with structured ``present`` / ``absent`` rosters.
    """

    model_config = ConfigDict(extra="ignore")

    success: bool = False
    message: Optional[str] = None
    error: Optional[str] = None
    recognized_students: List[str] = Field(default_factory=list)
    present: List[RosterEntry] = Field(default_factory=list)
    absent: List[RosterEntry] = Field(default_factory=list)

    def roster_names(self) -> List[str]:
        if self.present:
            return [entry.name for entry in self.present]
        return list(self.recognized_students)
