import asyncio
import os
import tempfile
from datetime import date

import pytest

# Settings are read at import time: point them at sqlite + a scratch cache dir
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("CACHE_DIR", tempfile.mkdtemp(prefix="habit-cache-"))

from habit_tracker.sync.cache import LocalCache  # noqa: E402
from habit_tracker.sync.engine import SyncEngine  # noqa: E402
from habit_tracker.sync.remote import RemoteError, RemoteStore  # noqa: E402


class FakeRemote(RemoteStore):
    """In-memory stand-in for the relational store.

    - `fail` holds method names that raise RemoteError
    - `gate`, when set, makes fetch_habits wait until the event is set
    """

    def __init__(self):
        self.habits: dict[str, dict] = {}
        self.entries: dict[tuple, dict] = {}
        self.profiles: dict[str, dict] = {}
        self.calls: list[tuple] = []
        self.fail: set[str] = set()
        self.gate: asyncio.Event | None = None

    def _record(self, name, *args):
        self.calls.append((name, *args))
        if name in self.fail:
            raise RemoteError(f"{name} unavailable")

    def calls_to(self, name):
        return [c for c in self.calls if c[0] == name]

    async def fetch_habits(self, user_id):
        if self.gate is not None:
            await self.gate.wait()
        self._record("fetch_habits", user_id)
        rows = [r for r in self.habits.values() if r["user_id"] == user_id]
        return sorted(rows, key=lambda r: r.get("sort_index", 0))

    async def fetch_entries(self, user_id, start, end):
        self._record("fetch_entries", user_id, start, end)
        return [
            r for (uid, d, _), r in self.entries.items()
            if uid == user_id and start <= d <= end
        ]

    async def insert_habit(self, row):
        self._record("insert_habit", row)
        self.habits[row["id"]] = dict(row)

    async def update_habit(self, user_id, habit_id, fields):
        self._record("update_habit", user_id, habit_id, fields)
        self.habits.setdefault(habit_id, {"id": habit_id, "user_id": user_id}).update(fields)

    async def delete_habit(self, user_id, habit_id):
        self._record("delete_habit", user_id, habit_id)
        self.habits.pop(habit_id, None)

    async def upsert_entry(self, row):
        self._record("upsert_entry", row)
        self.entries[(row["user_id"], row["date_iso"], row["habit_id"])] = dict(row)

    async def delete_entry(self, user_id, date_iso, habit_id):
        self._record("delete_entry", user_id, date_iso, habit_id)
        self.entries.pop((user_id, date_iso, habit_id), None)

    async def update_habit_order(self, rows):
        self._record("update_habit_order", rows)
        for r in rows:
            if r["id"] in self.habits:
                self.habits[r["id"]]["sort_index"] = r["sort_index"]

    async def upsert_share_token(self, user_id, token):
        self._record("upsert_share_token", user_id, token)
        self.profiles[user_id] = {"share_token": token, "is_enabled": True}
        return token

    async def get_public_year_data(self, token, year):
        self._record("get_public_year_data", token, year)
        for user_id, p in self.profiles.items():
            if p["share_token"] == token and p["is_enabled"]:
                rows = await self.fetch_entries(user_id, f"{year}-01-01", f"{year}-12-31")
                entries: dict = {}
                for r in rows:
                    entries.setdefault(r["date_iso"], {})[r["habit_id"]] = r["value"]
                habits = [h for h in self.habits.values() if h["user_id"] == user_id]
                return {"habits": habits, "entries": entries}
        raise RemoteError("Share link not found")


def habit_row(habit_id, user_id="u1", name=None, type="number", sort_index=0, **extra):
    row = {
        "id": habit_id,
        "user_id": user_id,
        "name": name or habit_id.title(),
        "type": type,
        "unit": "reps" if type == "number" else None,
        "decimals": 0,
        "goals": {},
        "goal_daily": 0,
        "goal_period": "daily",
        "sort_index": sort_index,
    }
    row.update(extra)
    return row


def entry_row(date_iso, habit_id, value, user_id="u1"):
    return {"user_id": user_id, "date_iso": date_iso, "habit_id": habit_id, "value": {"value": value}}


TODAY = date(2026, 3, 10)


@pytest.fixture
def remote():
    return FakeRemote()


@pytest.fixture
def cache(tmp_path):
    return LocalCache(str(tmp_path))


@pytest.fixture
def make_engine(remote, cache):
    def _make(**kwargs):
        kwargs.setdefault("today", lambda: TODAY)
        kwargs.setdefault("public_base_url", "https://habits.example.com")
        return SyncEngine(remote, cache, **kwargs)
    return _make
