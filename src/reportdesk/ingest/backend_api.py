"""Client for the attendance backend: report listing, attendance capture, registration."""
from __future__ import annotations

import logging
from contextlib import ExitStack
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import requests
from pydantic import ValidationError

from reportdesk.config import get_settings
from reportdesk.ingest.models import AttendanceResult

REPORTS_PATH = "/api/reports"
TAKE_ATTENDANCE_PATH = "/take_attendance"
STUDENT_COUNT_PATH = "/students/count"
DASHBOARD_PATH = "/dashboard"
UPLOAD_PATH = "/action/upload"
DEFAULT_BUCKET = "ict-attendance"


class BackendAPIError(RuntimeError):
    """Raised when the backend is unreachable or returns an error response."""


class BackendClient:
    """Thin wrapper around the backend HTTP API that applies base URL, timeout and error handling."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[int] = None) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout or settings.request_timeout

    def _request(self, method: str, path: str, accept_error_body: bool = False, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = requests.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise BackendAPIError(f"Backend request to {url} failed: {exc}") from exc
        if not response.ok:
            if accept_error_body:
                try:
                    payload = response.json()
                except ValueError:
                    payload = None
                # Endpoints that report failure as {"success": false, "error": ...}
                if isinstance(payload, dict) and "success" in payload:
                    logging.warning("Backend error %s: %s", response.status_code, payload.get("error"))
                    return payload
            raise BackendAPIError(f"Backend error {response.status_code}: {response.text}")
        try:
            return response.json()
        except ValueError as exc:
            raise BackendAPIError(f"Backend returned non-JSON body from {url}") from exc

    def list_reports(self) -> List[Dict[str, Any]]:
        """Fetch raw report descriptors; malformed entries are validated later by the normalizer."""
        payload = self._request("GET", REPORTS_PATH)
        if isinstance(payload, dict):
            payload = payload.get("reports", [])
        if not isinstance(payload, list):
            raise BackendAPIError(f"Unexpected reports payload type: {type(payload).__name__}")
        logging.info("Fetched %d reports from %s", len(payload), self.base_url)
        return payload

    def student_count(self) -> int:
        payload = self._request("GET", STUDENT_COUNT_PATH)
        try:
            return int(payload.get("count") or 0)
        except (AttributeError, TypeError, ValueError):
            return 0

    def dashboard_summary(self) -> Dict[str, Any]:
        """Aggregate figures from the backend dashboard, e.g. ``avg_attendance_pct``."""
        payload = self._request("GET", DASHBOARD_PATH)
        if not isinstance(payload, dict):
            raise BackendAPIError(f"Unexpected dashboard payload type: {type(payload).__name__}")
        return payload

    def take_attendance(
        self,
        image_paths: Sequence[Path],
        batch: str,
        subject: str,
        section: str = "",
    ) -> AttendanceResult:
        """Upload class photos and return the recognized roster."""
        if not image_paths:
            raise ValueError("At least one class image is required")
        data = {"batch_name": batch, "subject_name": subject, "lab_name": section or ""}
        with ExitStack() as stack:
            files = [
                ("class_images", (path.name, stack.enter_context(path.open("rb"))))
                for path in image_paths
            ]
            payload = self._request(
                "POST", TAKE_ATTENDANCE_PATH, accept_error_body=True, data=data, files=files
            )
        try:
            result = AttendanceResult.model_validate(payload)
        except ValidationError as exc:
            raise BackendAPIError(f"Unexpected attendance payload: {exc}") from exc
        if not result.success:
            logging.warning("Attendance failed: %s", result.error or "unknown error")
        return result

    def register_student(
        self,
        image_path: Path,
        name: str,
        er_number: str,
        batch: str,
        bucket: str = DEFAULT_BUCKET,
    ) -> Dict[str, Any]:
        data = {
            "student_name": name,
            "er_number": er_number,
            "batch_name": batch,
            "bucket_name": bucket,
        }
        with image_path.open("rb") as fh:
            return self._request("POST", UPLOAD_PATH, data=data, files={"file": (image_path.name, fh)})
