"""
tests/conftest.py -- Shared fixtures for the auth directory tests.

This module provides:
  - settings:   Settings with the lowest bcrypt cost and a known admin email
  - clock:      a manually advanced clock for session expiry tests
  - directory:  a fresh AuthDirectory per test (no shared state between tests)
  - member / admin: a directory with the named account already registered

BCRYPT_ROUNDS must be set before any auth module import: auth/tokens.py
hashes its timing dummy at import time with the configured cost.
"""

from __future__ import annotations

import os

# CRITICAL: Set before any auth/core import so get_settings() picks it up.
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest

from auth.directory import AuthDirectory
from auth.models import User
from auth.sessions import SessionStore
from core.config import Settings

ADMIN_EMAIL = "admin@nammatirupur.com"
ADMIN_PASSWORD = "adminpass1"
MEMBER_EMAIL = "asha@x.com"
MEMBER_PASSWORD = "secret1"


class FakeClock:
    """Callable clock for SessionStore; advance() moves time forward."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def settings() -> Settings:
    return Settings(admin_email=ADMIN_EMAIL, bcrypt_rounds=4, session_expire_seconds=600)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def directory(settings: Settings, clock: FakeClock) -> AuthDirectory:
    return AuthDirectory(
        settings=settings,
        session_store=SessionStore(settings.session_expire_seconds, clock=clock),
    )


@pytest.fixture
def member(directory: AuthDirectory) -> User:
    return directory.register("Asha", MEMBER_EMAIL, MEMBER_PASSWORD, "MEMBER")


@pytest.fixture
def admin(directory: AuthDirectory) -> User:
    return directory.register("Admin", ADMIN_EMAIL, ADMIN_PASSWORD, "ADMIN")
