from __future__ import annotations

import os
import sqlite3
import sys
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest


def pytest_configure():
    # Ensure project root is on sys.path for absolute imports like 'services.directory'
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))
    # Set test environment knobs
    os.environ.setdefault("RUN_ENV", "test")


class FakeLLM:
    """Stand-in text-generation collaborator with scripted behaviour."""

    def __init__(self, responses=None, error=None, configured=True):
        self.responses = dict(responses or {})
        self.error = error
        self.configured = configured
        self.release = threading.Event()
        self.release.set()
        self.calls = []

    def block(self) -> None:
        """Make every call hang until unblock() (simulates a slow collaborator)."""
        self.release.clear()

    def unblock(self) -> None:
        self.release.set()

    def is_configured(self, use_case=None) -> bool:
        return self.configured

    def generate(self, *, use_case, prompt, response_schema=None, prompt_name=None):
        self.calls.append({"use_case": use_case, "prompt": prompt, "response_schema": response_schema})
        self.release.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return self.responses.get(use_case, "")


class StepClock:
    """Deterministic clock: each call advances by `step`."""

    def __init__(self, start=None, step=timedelta(seconds=1)):
        self.current = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        self.current = self.current + self.step
        return self.current


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("LLM_TRACE", raising=False)
    monkeypatch.delenv("AI_PROVIDER", raising=False)
    from config.settings import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def conn(tmp_path):
    from db import schema

    db = sqlite3.connect(str(tmp_path / "t.db"))
    schema.bootstrap(db)
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def store(conn):
    from db.kv_store import SqliteKeyValueStore

    return SqliteKeyValueStore(conn)


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def fake_llm():
    llm = FakeLLM()
    yield llm
    llm.unblock()


@pytest.fixture
def ai(fake_llm):
    from services.ai_enrichment import AIEnrichment

    return AIEnrichment(fake_llm, enhance_timeout=0.5, icebreaker_timeout=0.5)


@pytest.fixture
def directory(store, clock, ai):
    from db.repos.actions_repo import ActionsRepo
    from db.repos.profiles_repo import ProfilesRepo
    from db.repos.sessions_repo import SessionsRepo
    from services.directory import Directory

    return Directory(
        profiles=ProfilesRepo(store, clock=clock),
        actions=ActionsRepo(store),
        sessions=SessionsRepo(store),
        ai=ai,
    )
