import pytest
import requests

from reportdesk.ingest import backend_api
from reportdesk.ingest.backend_api import BackendAPIError, BackendClient


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=""):
        self._payload = payload
        self.status_code = status_code
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class RecordedCalls(list):
    """Requests made so far, plus the queue of canned responses."""

    def __init__(self):
        super().__init__()
        self.responses = []


@pytest.fixture
def calls(monkeypatch):
    recorded = RecordedCalls()

    def fake_request(method, url, **kwargs):
        recorded.append((method, url, kwargs))
        result = recorded.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    monkeypatch.setattr(backend_api.requests, "request", fake_request)
    return recorded


@pytest.fixture
def client(calls):
    return BackendClient(base_url="http://backend:5000/", timeout=5)


def test_base_url_comes_from_settings(monkeypatch):
    monkeypatch.setenv("REPORTDESK_API_BASE", "http://10.0.0.5:5000")
    monkeypatch.setenv("REPORTDESK_TIMEOUT", "12")
    client = BackendClient()
    assert client.base_url == "http://10.0.0.5:5000"
    assert client.timeout == 12


def test_list_reports(client, calls, raw_reports):
    calls.responses.append(FakeResponse(raw_reports))
    assert client.list_reports() == raw_reports
    method, url, kwargs = calls[0]
    assert (method, url, kwargs["timeout"]) == ("GET", "http://backend:5000/api/reports", 5)


def test_list_reports_accepts_wrapped_payload(client, calls, raw_reports):
    calls.responses.append(FakeResponse({"reports": raw_reports}))
    assert len(client.list_reports()) == 4


def test_error_status_raises(client, calls):
    calls.responses.append(FakeResponse({"error": "boom"}, status_code=500, text="boom"))
    with pytest.raises(BackendAPIError, match="500"):
        client.list_reports()


def test_transport_failure_raises(client, calls):
    calls.responses.append(requests.ConnectionError("refused"))
    with pytest.raises(BackendAPIError, match="refused"):
        client.list_reports()


def test_non_json_body_raises(client, calls):
    calls.responses.append(FakeResponse(None))
    with pytest.raises(BackendAPIError):
        client.list_reports()


def test_student_count(client, calls):
    calls.responses.append(FakeResponse({"count": 42}))
    assert client.student_count() == 42
    calls.responses.append(FakeResponse({}))
    assert client.student_count() == 0


def test_take_attendance_structured_roster(client, calls, tmp_path):
    image = tmp_path / "class.jpg"
    image.write_bytes(b"jpeg")
    calls.responses.append(
        FakeResponse(
            {
                "success": True,
                "present": [{"er_number": "ER001", "name": "John Doe"}],
                "absent": [{"er_number": "ER002", "name": "Jane Smith"}],
            }
        )
    )
    result = client.take_attendance([image], batch="2021-2024", subject="Maths", section="Lab1")
    assert result.success
    assert result.roster_names() == ["John Doe"]
    assert result.present[0].identifier == "ER001"
    assert result.absent[0].name == "Jane Smith"

    method, url, kwargs = calls[0]
    assert (method, url) == ("POST", "http://backend:5000/take_attendance")
    assert kwargs["data"] == {"batch_name": "2021-2024", "subject_name": "Maths", "lab_name": "Lab1"}
    assert [name for name, _ in kwargs["files"]] == ["class_images"]


def test_take_attendance_flat_names(client, calls, tmp_path):
    image = tmp_path / "class.jpg"
    image.write_bytes(b"jpeg")
    calls.responses.append(FakeResponse({"success": True, "recognized_students": ["Asha", "Ravi"]}))
    result = client.take_attendance([image], batch="10A", subject="Maths")
    assert result.roster_names() == ["Asha", "Ravi"]


def test_take_attendance_requires_images(client):
    with pytest.raises(ValueError):
        client.take_attendance([], batch="10A", subject="Maths")


def test_register_student(client, calls, tmp_path):
    image = tmp_path / "face.png"
    image.write_bytes(b"png")
    calls.responses.append(FakeResponse({"success": True}))
    assert client.register_student(image, name="Asha", er_number="ER010", batch="10A") == {"success": True}
    method, url, kwargs = calls[0]
    assert url == "http://backend:5000/action/upload"
    assert kwargs["data"]["bucket_name"] == "ict-attendance"


def test_take_attendance_error_body_becomes_result(client, calls, tmp_path):
    image = tmp_path / "class.jpg"
    image.write_bytes(b"jpeg")
    calls.responses.append(
        FakeResponse({"success": False, "error": "No faces detected"}, status_code=400, text="bad request")
    )
    result = client.take_attendance([image], batch="10A", subject="Maths")
    assert not result.success
    assert result.error == "No faces detected"
    assert result.roster_names() == []


def test_take_attendance_error_without_json_body_raises(client, calls, tmp_path):
    image = tmp_path / "class.jpg"
    image.write_bytes(b"jpeg")
    calls.responses.append(FakeResponse(None, status_code=502, text="Bad Gateway"))
    with pytest.raises(BackendAPIError, match="502"):
        client.take_attendance([image], batch="10A", subject="Maths")


def test_dashboard_summary(client, calls):
    calls.responses.append(FakeResponse({"avg_attendance_pct": 87.5, "total_students": 40}))
    summary = client.dashboard_summary()
    assert summary["avg_attendance_pct"] == 87.5
    method, url, _ = calls[0]
    assert (method, url) == ("GET", "http://backend:5000/dashboard")


def test_dashboard_summary_rejects_non_object(client, calls):
    calls.responses.append(FakeResponse([1, 2]))
    with pytest.raises(BackendAPIError):
        client.dashboard_summary()
