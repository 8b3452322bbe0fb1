"""Shared fixtures: an in-memory post store and an app wired to it."""

import itertools
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

import main
from core import db
from core.config import Settings
from posts import repository

REPOSITORY_FUNCTIONS = ("create_post", "list_posts", "get_post", "save_post", "delete_post")


class FakePostStore:
    """Stands in for `posts.repository`; one tick of the clock per write."""

    def __init__(self):
        self.rows = {}
        self.fail_with = None
        self._ticks = itertools.count()
        self._epoch = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _now(self):
        return self._epoch + timedelta(seconds=next(self._ticks))

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    async def create_post(self, *, post_id, title, content):
        self._check()
        if post_id in self.rows:
            raise db.DatabaseError("duplicate key value violates unique constraint")
        now = self._now()
        row = {
            "id": post_id,
            "title": title,
            "content": content,
            "created_at": now,
            "updated_at": now,
        }
        self.rows[post_id] = row
        return dict(row)

    async def list_posts(self):
        self._check()
        return [dict(row) for row in self.rows.values()]

    async def get_post(self, post_id):
        self._check()
        row = self.rows.get(post_id)
        return dict(row) if row is not None else None

    async def save_post(self, *, post_id, title, content):
        self._check()
        row = self.rows.get(post_id)
        if row is None:
            return None
        row.update(title=title, content=content, updated_at=self._now())
        return dict(row)

    async def delete_post(self, post_id):
        self._check()
        return self.rows.pop(post_id, None) is not None


class FakePool:
    """Stands in for an asyncpg pool; records every call as (method, sql, args)."""

    def __init__(self, *, error=None, rows=()):
        self.error = error
        self.rows = list(rows)
        self.calls = []
        self.closed = False

    def _record(self, method, sql, args):
        if self.error is not None:
            raise self.error
        self.calls.append((method, sql, args))

    async def fetchrow(self, sql, *args):
        self._record("fetchrow", sql, args)
        return self.rows[0] if self.rows else None

    async def fetch(self, sql, *args):
        self._record("fetch", sql, args)
        return list(self.rows)

    async def execute(self, sql, *args):
        self._record("execute", sql, args)
        return "OK"

    async def close(self):
        self.closed = True


def make_settings(**overrides):
    values = {
        "pg_username": "posts",
        "pg_password": "secret",
        "pg_db_name": "posts",
        "pg_db_host": "localhost",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def fake_pool(monkeypatch):
    pool = FakePool()
    monkeypatch.setattr(db, "_pool", pool)
    return pool


@pytest.fixture
def store(monkeypatch):
    fake = FakePostStore()
    for name in REPOSITORY_FUNCTIONS:
        monkeypatch.setattr(repository, name, getattr(fake, name))
    return fake


@pytest.fixture
def pool_calls(monkeypatch):
    """Replace pool setup/teardown so the app starts without a database."""
    calls = {"init": [], "close": 0}

    async def fake_init_pool(settings, *, schema=()):
        calls["init"].append((settings, tuple(schema)))

    async def fake_close_pool():
        calls["close"] += 1

    monkeypatch.setattr(db, "init_pool", fake_init_pool)
    monkeypatch.setattr(db, "close_pool", fake_close_pool)
    return calls


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def client(store, pool_calls, settings):
    with TestClient(main.create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def lenient_client(store, pool_calls):
    with TestClient(main.create_app(make_settings(strict_decoding=False))) as test_client:
        yield test_client
