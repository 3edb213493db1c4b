"""Remote relational store access.

The remote store is a plain relational database with `habits`, `entries`
and `public_profiles` tables. `SqlRemoteStore` talks to it through
SQLAlchemy; blocking session work runs in a worker thread so callers on
the event loop never wait on the network.
"""
import asyncio
import logging
from abc import ABC, abstractmethod

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from habit_tracker.core.time_utils import iso_range_for_year
from habit_tracker.models.entry import Entry
from habit_tracker.models.habit import Habit
from habit_tracker.models.public_profile import PublicProfile
from habit_tracker.sync.mappers import entries_from_rows

logger = logging.getLogger(__name__)


class RemoteError(Exception):
    """A remote read or write failed. The message is user-facing."""


class RemoteStore(ABC):
    @abstractmethod
    async def fetch_habits(self, user_id: str) -> list[dict]:
        ...

    @abstractmethod
    async def fetch_entries(self, user_id: str, start: str, end: str) -> list[dict]:
        ...

    @abstractmethod
    async def insert_habit(self, row: dict) -> None:
        ...

    @abstractmethod
    async def update_habit(self, user_id: str, habit_id: str, fields: dict) -> None:
        ...

    @abstractmethod
    async def delete_habit(self, user_id: str, habit_id: str) -> None:
        ...

    @abstractmethod
    async def upsert_entry(self, row: dict) -> None:
        ...

    @abstractmethod
    async def delete_entry(self, user_id: str, date_iso: str, habit_id: str) -> None:
        ...

    @abstractmethod
    async def update_habit_order(self, rows: list[dict]) -> None:
        ...

    @abstractmethod
    async def upsert_share_token(self, user_id: str, token: str) -> str:
        ...

    @abstractmethod
    async def get_public_year_data(self, token: str, year: int) -> dict:
        ...


def _habit_row(h: Habit) -> dict:
    return {
        "id": h.id,
        "name": h.name,
        "type": h.type,
        "unit": h.unit,
        "decimals": h.decimals,
        "goals": h.goals,
        "goal_daily": float(h.goal_daily or 0),
        "goal_period": h.goal_period,
        "sort_index": h.sort_index,
        "created_at": h.created_at,
    }


def _entry_row(e: Entry) -> dict:
    return {
        "user_id": e.user_id,
        "date_iso": e.date_iso,
        "habit_id": e.habit_id,
        "value": e.value,
    }


class SqlRemoteStore(RemoteStore):
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    async def _call(self, fn, *args, failure: str):
        try:
            return await asyncio.to_thread(self._in_session, fn, *args)
        except SQLAlchemyError as exc:
            logger.warning("%s: %s", failure, exc)
            raise RemoteError(failure) from exc

    def _in_session(self, fn, *args):
        with self._session_factory() as db:
            return fn(db, *args)

    # --------- Reads --------- #

    async def fetch_habits(self, user_id):
        return await self._call(self._fetch_habits, user_id, failure="Failed to load habits")

    def _fetch_habits(self, db: Session, user_id):
        rows = (
            db.query(Habit)
            .filter(Habit.user_id == user_id)
            .order_by(Habit.sort_index.asc(), Habit.created_at.asc())
            .all()
        )
        return [_habit_row(h) for h in rows]

    async def fetch_entries(self, user_id, start, end):
        return await self._call(
            self._fetch_entries, user_id, start, end, failure="Failed to load entries"
        )

    def _fetch_entries(self, db: Session, user_id, start, end):
        rows = (
            db.query(Entry)
            .filter(Entry.user_id == user_id)
            .filter(Entry.date_iso >= start)
            .filter(Entry.date_iso <= end)
            .all()
        )
        return [_entry_row(e) for e in rows]

    # --------- Habit writes --------- #

    async def insert_habit(self, row):
        await self._call(self._insert_habit, row, failure="Failed to add habit")

    def _insert_habit(self, db: Session, row):
        db.add(Habit(**row))
        db.commit()

    async def update_habit(self, user_id, habit_id, fields):
        await self._call(
            self._update_habit, user_id, habit_id, fields, failure="Failed to update habit"
        )

    def _update_habit(self, db: Session, user_id, habit_id, fields):
        (
            db.query(Habit)
            .filter(Habit.user_id == user_id)
            .filter(Habit.id == habit_id)
            .update(fields, synchronize_session=False)
        )
        db.commit()

    async def delete_habit(self, user_id, habit_id):
        await self._call(self._delete_habit, user_id, habit_id, failure="Failed to delete habit")

    def _delete_habit(self, db: Session, user_id, habit_id):
        # entries go with their habit
        db.query(Entry).filter(Entry.user_id == user_id).filter(Entry.habit_id == habit_id).delete()
        db.query(Habit).filter(Habit.user_id == user_id).filter(Habit.id == habit_id).delete()
        db.commit()

    async def update_habit_order(self, rows):
        await self._call(self._update_habit_order, rows, failure="Failed to save order")

    def _update_habit_order(self, db: Session, rows):
        for r in rows:
            row = (
                db.query(Habit)
                .filter(Habit.id == r["id"])
                .filter(Habit.user_id == r["user_id"])
                .first()
            )
            if row is not None:
                row.sort_index = r["sort_index"]
        db.commit()

    # --------- Entry writes --------- #

    async def upsert_entry(self, row):
        await self._call(self._upsert_entry, row, failure="Failed to save entry")

    def _upsert_entry(self, db: Session, row):
        existing = (
            db.query(Entry)
            .filter(Entry.user_id == row["user_id"])
            .filter(Entry.date_iso == row["date_iso"])
            .filter(Entry.habit_id == row["habit_id"])
            .first()
        )
        if not existing:
            db.add(Entry(**row))
        else:
            existing.value = row["value"]
            existing.updated_at = row["updated_at"]
        db.commit()

    async def delete_entry(self, user_id, date_iso, habit_id):
        await self._call(
            self._delete_entry, user_id, date_iso, habit_id, failure="Failed to remove entry"
        )

    def _delete_entry(self, db: Session, user_id, date_iso, habit_id):
        (
            db.query(Entry)
            .filter(Entry.user_id == user_id)
            .filter(Entry.date_iso == date_iso)
            .filter(Entry.habit_id == habit_id)
            .delete()
        )
        db.commit()

    # --------- Public sharing --------- #

    async def upsert_share_token(self, user_id, token):
        return await self._call(
            self._upsert_share_token, user_id, token, failure="Failed to create share link"
        )

    def _upsert_share_token(self, db: Session, user_id, token):
        row = db.query(PublicProfile).filter(PublicProfile.user_id == user_id).first()
        if not row:
            row = PublicProfile(user_id=user_id, share_token=token, is_enabled=True)
            db.add(row)
        else:
            row.share_token = token
            row.is_enabled = True
        db.commit()
        db.refresh(row)
        return row.share_token

    async def get_public_year_data(self, token, year):
        return await self._call(
            self._get_public_year_data, token, year, failure="Failed to load shared habits"
        )

    def _get_public_year_data(self, db: Session, token, year):
        profile = (
            db.query(PublicProfile)
            .filter(PublicProfile.share_token == token)
            .filter(PublicProfile.is_enabled.is_(True))
            .first()
        )
        if not profile:
            raise RemoteError("Share link not found")

        start, end = iso_range_for_year(year)
        habits = self._fetch_habits(db, profile.user_id)
        entries = self._fetch_entries(db, profile.user_id, start, end)
        return {"habits": habits, "entries": entries_from_rows(entries)}
