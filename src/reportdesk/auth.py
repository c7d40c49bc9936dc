"""Dashboard session state with an injected credential check."""
from __future__ import annotations

import hmac
from dataclasses import dataclass
from typing import Callable, Optional

from reportdesk.config import Settings

CredentialChecker = Callable[[str, str], bool]


@dataclass
class LoginResult:
    success: bool
    error: Optional[str] = None


def settings_checker(settings: Settings) -> CredentialChecker:
    """Build a checker that accepts only the configured dashboard credentials."""

    def check(username: str, password: str) -> bool:
        if not settings.dashboard_username or not settings.dashboard_password:
            return False
        user_ok = hmac.compare_digest(username.encode(), settings.dashboard_username.encode())
        password_ok = hmac.compare_digest(password.encode(), settings.dashboard_password.encode())
        return user_ok and password_ok

    return check


class Session:
    """Authentication state for one dashboard user; nothing is stored globally."""

    def __init__(self, checker: CredentialChecker) -> None:
        self.checker = checker
        self.authenticated = False
        self.username: Optional[str] = None

    def login(self, username: str, password: str) -> LoginResult:
        if self.checker(username, password):
            self.authenticated = True
            self.username = username
            return LoginResult(success=True)
        return LoginResult(success=False, error="Invalid credentials")

    def logout(self) -> None:
        self.authenticated = False
        self.username = None
