"""Spreadsheet export for rosters and report tables."""
from __future__ import annotations

import io
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from reportdesk.ingest.models import Report, RosterEntry

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
ROSTER_HEADER = ["#", "Student Name"]
ATTENDANCE_HEADER = ["#", "ER Number", "Student Name"]
REPORT_HEADER = ["File Name", "Batch", "Subject", "Section", "Date", "Size", "Records", "Status", "URL"]

THIN = Side(border_style="thin", color="000000")
THIN_BORDER = Border(left=THIN, right=THIN, top=THIN, bottom=THIN)
HEADER_FILL = PatternFill(start_color="D9E1F2", end_color="D9E1F2", fill_type="solid")
HEADER_FONT = Font(bold=True, size=11)
CENTER = Alignment(horizontal="center", vertical="center", wrap_text=True)
LEFT = Alignment(horizontal="left", vertical="center")

MAX_COLUMN_WIDTH = 60


@dataclass
class ExportArtifact:
    """A generated spreadsheet, ready to hand to the browser or write to disk."""

    file_name: str
    content: bytes
    media_type: str = XLSX_MEDIA_TYPE

    def save(self, directory: Path) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / Path(self.file_name).name
        target.write_bytes(self.content)
        return target


def _xlsx_name(file_name: str) -> str:
    # Batch names such as "CSE/A" end up in file names; keep the result a single path component.
    name = re.sub(r"[\\/]+", "-", file_name.strip()).strip(". ") or "export"
    return name if name.lower().endswith(".xlsx") else f"{name}.xlsx"


def build_workbook(header: Sequence[object], rows: Iterable[Sequence[object]], sheet_name: str = "Attendance"):
    wb = openpyxl.Workbook()
    ws = wb.active
    # Excel caps sheet titles at 31 characters.
    ws.title = (sheet_name or "Sheet1")[:31]

    widths: List[int] = [len(str(value)) for value in header]

    for col, value in enumerate(header, start=1):
        cell = ws.cell(row=1, column=col, value=value)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = CENTER
        cell.border = THIN_BORDER

    for row_idx, row in enumerate(rows, start=2):
        for col, value in enumerate(row, start=1):
            cell = ws.cell(row=row_idx, column=col, value=value)
            cell.alignment = LEFT
            cell.border = THIN_BORDER
            text_len = len(str(value)) if value is not None else 0
            if col > len(widths):
                widths.append(text_len)
            else:
                widths[col - 1] = max(widths[col - 1], text_len)

    for col, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(col)].width = min(max(width + 2, 6), MAX_COLUMN_WIDTH)

    ws.freeze_panes = "A2"
    return wb


def export_rows(
    header: Sequence[object],
    rows: Iterable[Sequence[object]],
    file_name: str,
    sheet_name: str = "Attendance",
) -> ExportArtifact:
    """Write ``header`` and ``rows`` to a single-sheet workbook.

    An empty ``rows`` still produces a valid workbook holding just the header.
    """
    wb = build_workbook(header, rows, sheet_name=sheet_name)
    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    return ExportArtifact(file_name=_xlsx_name(file_name), content=output.read())


def roster_rows(names: Iterable[str]) -> List[List[object]]:
    return [[idx, name] for idx, name in enumerate(names, start=1)]


def attendance_rows(entries: Iterable[RosterEntry]) -> List[List[object]]:
    return [[idx, entry.identifier, entry.name] for idx, entry in enumerate(entries, start=1)]


def report_rows(reports: Iterable[Report]) -> List[List[object]]:
    return [
        [
            report.display_name,
            report.batch,
            report.subject,
            report.section,
            report.date,
            report.size,
            report.record_count,
            report.status.value,
            report.url,
        ]
        for report in reports
    ]


def export_roster(names: Iterable[str], file_name: str, sheet_name: Optional[str] = None) -> ExportArtifact:
    return export_rows(ROSTER_HEADER, roster_rows(names), file_name, sheet_name=sheet_name or "Attendance")


def export_reports(reports: Iterable[Report], file_name: str) -> ExportArtifact:
    return export_rows(REPORT_HEADER, report_rows(reports), file_name, sheet_name="Reports")
