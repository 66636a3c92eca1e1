from datetime import datetime, timedelta, timezone

import pytest

from board import SynchronizedList
from guard import SubmissionGuard
from local_cache import LocalCache
from models import MoodEntry
from schema import MOOD_SCHEMA
from store import DELETE, INSERT, ChangeEvent

T0 = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def make_entry(id, name="Al", emoji="😀", language="python", comment=None, created_at=T0):
    return MoodEntry(
        id=id,
        participant=name,
        emoji=emoji,
        language=language,
        comment=comment,
        created_at=created_at,
    )


class FakeClock:
    def __init__(self, now=T0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


class FakeStore:
    """In-memory stand-in for MoodStore. Errors can be injected per operation."""

    def __init__(self, rows=None):
        self.rows = list(rows or [])  # newest first
        self.listeners = []
        self.ping_error = None
        self.insert_error = None
        self.fetch_error = None
        self.delete_error = None
        self.insert_calls = 0
        self.fetch_calls = 0
        self.next_id = 1000
        # runs once, after the rows are read but before fetch_recent returns
        self.during_fetch = None

    def ping(self):
        if self.ping_error:
            raise self.ping_error

    def insert(self, entry):
        self.insert_calls += 1
        if self.insert_error:
            raise self.insert_error
        self.next_id += 1
        stored = entry.model_copy(update={"id": self.next_id})
        self.rows.insert(0, stored)
        self._emit(ChangeEvent(INSERT, stored))
        return stored

    def fetch_recent(self, limit):
        self.fetch_calls += 1
        if self.fetch_error:
            raise self.fetch_error
        result = list(self.rows[:limit])
        if self.during_fetch:
            hook, self.during_fetch = self.during_fetch, None
            hook()
        return result

    def delete_all(self):
        if self.delete_error:
            raise self.delete_error
        deleted = len(self.rows)
        self.rows.clear()
        self._emit(ChangeEvent(DELETE))
        return deleted

    def subscribe(self, listener):
        self.listeners.append(listener)
        return lambda: self.listeners.remove(listener)

    def _emit(self, event):
        for listener in list(self.listeners):
            listener(event)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def cache(tmp_path):
    return LocalCache(str(tmp_path / "cache"), MOOD_SCHEMA)


@pytest.fixture
def board(fake_store, cache, clock):
    board = SynchronizedList(fake_store, cache, retrieval_cap=100, clock=clock)
    fake_store.subscribe(board.handle_change)
    return board


@pytest.fixture
def guard(board, clock):
    guard = SubmissionGuard(board, MOOD_SCHEMA, duplicate_window_seconds=30, remote_timeout=2, clock=clock)
    yield guard
    guard.close()
