"""Tests for the session registry and the SQLite log handler."""

import asyncio
import logging
from datetime import datetime, timedelta

import pytest

from conftest import FixedProvider, make_words
from wordmatch import sessions as session_registry
from wordmatch.database import get_db_connection, init_db
from wordmatch.log_handler import SQLiteHandler
from wordmatch.models import Difficulty


@pytest.fixture(autouse=True)
def clear_sessions():
    yield
    session_registry.sessions.clear()


def test_create_and_lookup(vocabulary):
    session = session_registry.create_session(FixedProvider(make_words(1)), vocabulary)

    assert session_registry.get_active_session(session.session_id) is session
    assert session_registry.get_active_session("unknown") is None
    assert session_registry.get_active_session(None) is None


def test_expired_session_is_dropped(vocabulary):
    session = session_registry.create_session(FixedProvider(make_words(1)), vocabulary)
    session.last_seen = datetime.now() - timedelta(days=1)
    generation = session.controller.generation

    assert session_registry.get_active_session(session.session_id) is None
    assert session.session_id not in session_registry.sessions
    assert session.controller.generation > generation


@pytest.mark.asyncio
async def test_idle_sessions_of_other_cookies_are_swept(vocabulary):
    stale = session_registry.create_session(FixedProvider(make_words(1)), vocabulary)
    await stale.controller.start(Difficulty.PRIMARY)
    tick = stale.controller._tick_task
    stale.last_seen = datetime.now() - timedelta(days=1)

    fresh = session_registry.create_session(FixedProvider(make_words(1)), vocabulary)
    await asyncio.sleep(0)

    assert stale.session_id not in session_registry.sessions
    assert session_registry.get_active_session(fresh.session_id) is fresh
    assert stale.controller._tick_task is None
    assert tick.cancelled()


def test_sweep_expired_reports_dropped_sessions(vocabulary):
    kept = session_registry.create_session(FixedProvider(make_words(1)), vocabulary)
    old = session_registry.create_session(FixedProvider(make_words(1)), vocabulary)
    old.last_seen = datetime.now() - timedelta(days=1)

    assert session_registry.sweep_expired() == 1
    assert list(session_registry.sessions) == [kept.session_id]


def test_shutdown_all(vocabulary):
    for _ in range(3):
        session_registry.create_session(FixedProvider(make_words(1)), vocabulary)

    session_registry.shutdown_all()

    assert session_registry.sessions == {}


def test_sqlite_handler_writes_records(tmp_path):
    db_path = str(tmp_path / "db" / "wordmatch.db")
    init_db(db_path)
    logger = logging.getLogger("wordmatch.test_sqlite")
    handler = SQLiteHandler(db_path)
    logger.addHandler(handler)
    try:
        logger.warning("Word pair provider failed")
    finally:
        logger.removeHandler(handler)

    conn = get_db_connection(db_path)
    rows = conn.execute("SELECT level, logger, message FROM logs").fetchall()
    conn.close()

    assert [tuple(row) for row in rows] == [
        ("WARNING", "wordmatch.test_sqlite", "Word pair provider failed")
    ]
