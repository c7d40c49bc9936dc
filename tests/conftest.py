from __future__ import annotations

from typing import Any, Dict, List

import pytest


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    """Keep a developer's .env and REPORTDESK_* variables out of the tests."""
    from reportdesk.config import get_settings

    monkeypatch.chdir(tmp_path)
    for name in ("API_BASE", "TIMEOUT", "PAGE_SIZE", "USERNAME", "PASSWORD"):
        monkeypatch.delenv(f"REPORTDESK_{name}", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def raw_reports() -> List[Dict[str, Any]]:
    return [
        {
            "id": "r1",
            "fileName": "20240115_10A_B_Maths.xlsx",
            "size": "12.5 KB",
            "records": 30,
            "status": "ready",
            "date": "2024-01-16T09:00:00",
            "url": "http://backend/reports/r1",
            "students": ["Asha", "Ravi"],
        },
        {
            "id": "r2",
            "fileName": "report-2.xlsx",
            "userFriendlyName": "10B_Physics_A_20-01-2024.xlsx",
            "size": "7.5 KB",
            "records": 25,
            "status": "ready",
            "url": "http://backend/reports/r2",
        },
        {
            "id": "r3",
            "fileName": "weekly.xlsx",
            "batch": "10A",
            "subject": "Chemistry",
            "section": "C",
            "date": "2024-01-10",
            "size": "bad",
            "records": "bad",
            "status": "generating",
            "url": "http://backend/reports/r3",
        },
        {
            "id": "r4",
            "fileName": "misc.xlsx",
            "size": "5 KB",
            "records": 5,
            "status": "error",
        },
    ]
