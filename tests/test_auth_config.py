from reportdesk.auth import Session, settings_checker
from reportdesk.config import Settings, get_settings


def test_settings_defaults():
    settings = get_settings()
    assert settings.api_base_url == "http://localhost:5000"
    assert settings.request_timeout == 30
    assert settings.page_size == 10
    assert settings.dashboard_username is None


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("REPORTDESK_API_BASE", "http://15.0.0.1:5000")
    monkeypatch.setenv("REPORTDESK_PAGE_SIZE", "25")
    settings = Settings()
    assert settings.api_base_url == "http://15.0.0.1:5000"
    assert settings.page_size == 25


def test_settings_from_env_file(tmp_path):
    (tmp_path / ".env").write_text("REPORTDESK_USERNAME=faculty\nREPORTDESK_PASSWORD=s3cret\n", encoding="utf-8")
    settings = Settings()
    assert settings.dashboard_username == "faculty"
    assert settings.dashboard_password == "s3cret"


def test_session_login_logout():
    session = Session(lambda username, password: (username, password) == ("admin", "pw"))
    assert not session.authenticated

    failed = session.login("admin", "wrong")
    assert not failed.success
    assert failed.error == "Invalid credentials"
    assert not session.authenticated

    assert session.login("admin", "pw").success
    assert session.authenticated
    assert session.username == "admin"

    session.logout()
    assert not session.authenticated
    assert session.username is None


def test_sessions_do_not_share_state():
    check = lambda username, password: True  # noqa: E731
    first, second = Session(check), Session(check)
    first.login("a", "b")
    assert not second.authenticated


def test_settings_checker():
    check = settings_checker(Settings(dashboard_username="faculty", dashboard_password="s3cret"))
    assert check("faculty", "s3cret")
    assert not check("faculty", "nope")
    assert not check("someone", "s3cret")


def test_settings_checker_without_credentials_rejects_everything():
    check = settings_checker(Settings())
    assert not check("", "")
    assert not check("admin", "admin")
