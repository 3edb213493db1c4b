"""Optimistic state synchronization.

Every mutating operation goes Pending -> Applied-Locally -> Confirmed or
Remote-Failed:

  1. the new StateTree is built and committed (and written to the local
     cache) before the method returns, so readers never wait on the network
  2. the matching remote write is scheduled as an asyncio task
  3. the task resolves to Confirmed() or Failed(reason); either way only the
     status side channel changes. A failed write is NOT rolled back.

Reloads replace habits/entries wholesale for the active (user, year). Each
reload carries the generation it was started in; if the session or year
changes before it lands, its result is discarded.

Operations are not serialized against each other and nothing is retried:
last write wins on the remote side.
"""
import asyncio
import logging
import secrets
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Callable, Optional, Union
from urllib.parse import quote

from pydantic import ValidationError

from habit_tracker.core.config import settings
from habit_tracker.core.constants import DEFAULT_UNIT, PUBLIC_RECENT_DATES, SHARE_TOKEN_BYTES
from habit_tracker.core.entries import (
    delete_entry,
    entry_to_number,
    get_entry,
    purge_habit,
    set_entry,
)
from habit_tracker.core.summary import history, year_summary
from habit_tracker.core.time_utils import (
    coerce_number,
    count_decimals,
    iso_from_date,
    iso_range_for_year,
    parse_iso_date,
    today_local,
)
from habit_tracker.schemas.habit import Habit, HabitDraft, HabitKind, HabitPatch
from habit_tracker.schemas.state import StateTree
from habit_tracker.schemas.stats import PublicYearView
from habit_tracker.sync.cache import LocalCache
from habit_tracker.sync.mappers import (
    entries_from_rows,
    entry_to_row,
    habit_from_row,
    habit_to_insert_row,
    habit_to_update_row,
    order_rows,
)
from habit_tracker.sync.remote import RemoteError, RemoteStore
from habit_tracker.sync.reorder import (
    ReorderCoordinator,
    apply_order,
    assign_sort_indexes,
    move_habit,
)

logger = logging.getLogger(__name__)


class HabitNotFound(LookupError):
    pass


@dataclass(frozen=True)
class SessionContext:
    user_id: Optional[str]
    year: int


@dataclass(frozen=True)
class Confirmed:
    pass


@dataclass(frozen=True)
class Failed:
    reason: str


@dataclass(frozen=True)
class Discarded:
    """A reload that finished after its session/year stopped being active."""


OpResult = Union[Confirmed, Failed]


@dataclass(frozen=True)
class SyncStatus:
    ready: bool = False
    error: str = ""
    synced_at: Optional[datetime] = None

    @property
    def label(self) -> str:
        if self.error:
            return f"Cloud error: {self.error}"
        return "Synced" if self.ready else "Loading cloud..."


@dataclass(frozen=True)
class ShareLink:
    url: str = ""
    token: str = ""
    copied: bool = False
    error: str = ""


def _to_bool(raw) -> bool:
    if isinstance(raw, str):
        return raw.strip().lower() in ("true", "1", "yes", "on", "done")
    return bool(raw)


class SyncEngine:
    def __init__(
        self,
        remote: RemoteStore,
        cache: LocalCache,
        today: Optional[Callable[[], date]] = None,
        public_base_url: Optional[str] = None,
    ):
        self._remote = remote
        self._cache = cache
        self._today = today
        self._public_base_url = public_base_url or settings.public_base_url
        self._state = cache.load()
        self._context: Optional[SessionContext] = None
        self._generation = 0
        self._tasks: set[asyncio.Task] = set()
        self._reorder = ReorderCoordinator()
        self.status = SyncStatus()

    # --------- State --------- #

    @property
    def state(self) -> StateTree:
        return self._state

    @property
    def context(self) -> Optional[SessionContext]:
        return self._context

    @property
    def dragging_id(self) -> str:
        return self._reorder.dragging_id

    def today(self) -> date:
        return self._today() if self._today else today_local(settings.timezone)

    def _commit(self, state: StateTree) -> StateTree:
        self._state = state
        self._cache.save(state)
        return state

    def _require(self, habit_id: str) -> Habit:
        habit = self._state.habit(habit_id)
        if habit is None:
            raise HabitNotFound(habit_id)
        return habit

    # --------- Task plumbing --------- #

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _schedule(self, coro) -> asyncio.Task:
        return self._spawn(self._settle(coro))

    async def _settle(self, coro) -> OpResult:
        try:
            await coro
        except RemoteError as exc:
            reason = str(exc) or "Remote write failed"
            logger.warning("Remote write failed: %s", reason)
            self.status = replace(self.status, error=reason)
            return Failed(reason)
        self.status = replace(self.status, error="", synced_at=datetime.now(timezone.utc))
        return Confirmed()

    async def drain(self) -> None:
        """Wait for every remote operation currently in flight."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # --------- Session / year --------- #

    def start_session(self, user_id: str) -> asyncio.Task:
        logger.info("Session started for %s", user_id)
        return self._activate(SessionContext(user_id=user_id, year=self._state.ui.selected_year))

    def end_session(self) -> None:
        self._context = None
        self._generation += 1
        self.status = SyncStatus()

    def select_year(self, year: int) -> Optional[asyncio.Task]:
        ui = self._state.ui.model_copy(update={"selected_year": int(year)})
        self._commit(self._state.model_copy(update={"ui": ui}))
        if self._context and self._context.user_id:
            return self._activate(replace(self._context, year=int(year)))
        return None

    def refresh(self) -> Optional[asyncio.Task]:
        if self._context and self._context.user_id:
            return self._activate(self._context)
        return None

    def _activate(self, ctx: SessionContext) -> asyncio.Task:
        self._context = ctx
        self._generation += 1
        return self._spawn(self._reload(ctx, self._generation))

    async def _reload(self, ctx: SessionContext, generation: int):
        self.status = replace(self.status, ready=False, error="")
        start, end = iso_range_for_year(ctx.year)
        try:
            habit_rows = await self._remote.fetch_habits(ctx.user_id)
            entry_rows = await self._remote.fetch_entries(ctx.user_id, start, end)
            habits = tuple(habit_from_row(r) for r in habit_rows)
        except (RemoteError, ValidationError) as exc:
            if generation != self._generation:
                return Discarded()
            reason = str(exc) if isinstance(exc, RemoteError) else "Failed to load habits"
            logger.warning("Reload for %s/%s failed: %s", ctx.user_id, ctx.year, reason)
            # stale data stays on screen
            self.status = replace(self.status, ready=True, error=reason)
            return Failed(reason)

        if generation != self._generation:
            logger.debug("Discarding stale reload for %s/%s", ctx.user_id, ctx.year)
            return Discarded()

        self._commit(
            self._state.model_copy(
                update={"habits": habits, "entries": entries_from_rows(entry_rows)}
            )
        )
        self.status = SyncStatus(ready=True, error="", synced_at=datetime.now(timezone.utc))
        logger.info(
            "Loaded %d habits and %d entries for %s/%s",
            len(habits), len(entry_rows), ctx.user_id, ctx.year,
        )
        return Confirmed()

    # --------- Habits --------- #

    def add_habit(self, ctx: SessionContext, draft: HabitDraft) -> Optional[asyncio.Task]:
        """Append a new habit; it always lands at the end of the list."""
        if not ctx.user_id:
            return None

        sort_index = len(self._state.habits)
        habit = Habit.model_validate(
            {
                "id": str(uuid.uuid4()),
                "name": draft.name,
                "kind": draft.kind,
                "unit": draft.unit,
                "decimals": 0,
                "goals": draft.goals,
                "sort_index": sort_index,
            }
        )
        self._commit(self._state.model_copy(update={"habits": self._state.habits + (habit,)}))

        return self._schedule(
            self._remote.insert_habit(habit_to_insert_row(habit, ctx.user_id, sort_index))
        )

    def update_habit(self, ctx: SessionContext, habit_id: str, patch: HabitPatch) -> Optional[asyncio.Task]:
        if not ctx.user_id:
            return None
        current = self._require(habit_id)

        data = current.model_dump()
        if patch.name is not None and patch.name.strip():
            data["name"] = patch.name.strip()
        if patch.unit is not None and current.kind == HabitKind.number:
            data["unit"] = patch.unit.strip() or current.unit or DEFAULT_UNIT
        if patch.goals is not None:
            data["goals"] = patch.goals
        if patch.decimals is not None:
            data["decimals"] = patch.decimals
        merged = Habit.model_validate(data)

        habits = tuple(merged if h.id == habit_id else h for h in self._state.habits)
        self._commit(self._state.model_copy(update={"habits": habits}))

        return self._schedule(
            self._remote.update_habit(ctx.user_id, habit_id, habit_to_update_row(merged))
        )

    def delete_habit(self, ctx: SessionContext, habit_id: str) -> Optional[asyncio.Task]:
        """Remove a habit and every entry that references it."""
        if not ctx.user_id:
            return None
        self._require(habit_id)

        habits = tuple(h for h in self._state.habits if h.id != habit_id)
        entries = purge_habit(self._state.entries, habit_id)
        self._commit(self._state.model_copy(update={"habits": habits, "entries": entries}))

        return self._schedule(self._remote.delete_habit(ctx.user_id, habit_id))

    # --------- Entries --------- #

    def log_value(self, ctx: SessionContext, date_iso: str, habit_id: str, raw) -> Optional[asyncio.Task]:
        """Log `raw` for a habit on a date.

        Number values are parsed from the literal the user typed; blank input
        is ignored and negatives are floored at 0. If the literal carries more
        decimals than the habit shows, the habit's `decimals` is raised
        (never lowered) locally and on the remote.
        """
        if not ctx.user_id:
            return None
        parse_iso_date(date_iso)
        habit = self._require(habit_id)

        upgraded: Optional[Habit] = None
        if habit.kind == HabitKind.checkbox:
            value = _to_bool(raw)
        else:
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                return None
            value = coerce_number(raw)
            detected = count_decimals(raw)
            if value < 0:
                value, detected = 0, 0
            if detected > habit.decimals:
                upgraded = habit.model_copy(update={"decimals": detected})

        payload = {"value": value}
        update = {"entries": set_entry(self._state.entries, date_iso, habit_id, payload)}
        if upgraded is not None:
            update["habits"] = tuple(upgraded if h.id == habit_id else h for h in self._state.habits)
        self._commit(self._state.model_copy(update=update))

        return self._schedule(self._write_entry(ctx, date_iso, habit_id, payload, upgraded))

    async def _write_entry(self, ctx, date_iso, habit_id, payload, upgraded: Optional[Habit]):
        await self._remote.upsert_entry(entry_to_row(ctx.user_id, date_iso, habit_id, payload))
        if upgraded is not None:
            try:
                await self._remote.update_habit(ctx.user_id, habit_id, {"decimals": upgraded.decimals})
            except RemoteError as exc:
                raise RemoteError(str(exc) or "Failed to update decimals") from exc

    def bump(self, ctx: SessionContext, date_iso: str, habit_id: str, delta) -> Optional[asyncio.Task]:
        """Stepper: add `delta` to the day's value (0 if unlogged), floored at 0."""
        habit = self._require(habit_id)
        if habit.kind != HabitKind.number:
            return None
        current = entry_to_number(habit, get_entry(self._state.entries, date_iso, habit_id), 0)
        nxt = Decimal(str(current)) + Decimal(str(delta))
        if nxt < 0:
            nxt = Decimal(0)
        return self.log_value(ctx, date_iso, habit_id, format(nxt.normalize(), "f"))

    def remove_log(self, ctx: SessionContext, date_iso: str, habit_id: str) -> Optional[asyncio.Task]:
        if not ctx.user_id:
            return None
        self._commit(
            self._state.model_copy(
                update={"entries": delete_entry(self._state.entries, date_iso, habit_id)}
            )
        )
        return self._schedule(self._remote.delete_entry(ctx.user_id, date_iso, habit_id))

    # --------- Ordering --------- #

    def reorder(self, ctx: SessionContext, from_id: str, to_id: str) -> Optional[asyncio.Task]:
        """Single drop: move `from_id` into `to_id`'s slot and persist."""
        if not ctx.user_id:
            return None
        nxt = move_habit(self._state.habits, from_id, to_id)
        if nxt is None:
            return None
        return self._persist_order(ctx, nxt)

    def begin_drag(self, habit_id: str) -> None:
        self._require(habit_id)
        self._reorder.begin(habit_id)

    def drag_over(self, over_id: str) -> StateTree:
        nxt = self._reorder.over(self._state.habits, over_id)
        if nxt is not None:
            self._commit(self._state.model_copy(update={"habits": tuple(nxt)}))
        return self._state

    def end_drag(self, ctx: SessionContext) -> Optional[asyncio.Task]:
        pending = self._reorder.end()
        if pending is None or not ctx.user_id:
            return None
        # only the order comes from the gesture; habits themselves are current
        return self._persist_order(ctx, apply_order(self._state.habits, [h.id for h in pending]))

    def _persist_order(self, ctx: SessionContext, habits) -> asyncio.Task:
        # every habit gets its position, changed or not; no version check
        ordered = assign_sort_indexes(habits)
        self._commit(self._state.model_copy(update={"habits": tuple(ordered)}))
        return self._schedule(self._remote.update_habit_order(order_rows(ordered, ctx.user_id)))

    # --------- Export / sharing --------- #

    def export_state(self) -> tuple[str, str]:
        """(filename, JSON document) of the whole state tree."""
        filename = f"habit_tracker_{iso_from_date(self.today())}.json"
        return filename, self._state.model_dump_json(indent=2)

    async def create_share_link(
        self, ctx: SessionContext, copy: Optional[Callable[[str], bool]] = None
    ) -> Optional[ShareLink]:
        if not ctx.user_id:
            return None

        token = secrets.token_hex(SHARE_TOKEN_BYTES)
        try:
            stored = await self._remote.upsert_share_token(ctx.user_id, token) or token
        except RemoteError as exc:
            reason = str(exc) or "Failed to create share link"
            logger.warning("Share link failed for %s: %s", ctx.user_id, reason)
            return ShareLink(error=reason)

        url = f"{self._public_base_url.rstrip('/')}/view/{quote(stored, safe='')}"
        if copy is None:
            return ShareLink(url=url, token=stored)
        try:
            copied = copy(url)
        except Exception as exc:
            logger.warning("Copying share link failed: %s", exc)
            copied = False
        if not copied:
            return ShareLink(
                url=url,
                token=stored,
                error=f"Could not copy the link. Please copy manually: {url}",
            )
        return ShareLink(url=url, token=stored, copied=True)

    async def load_public_view(self, token: str, year: int) -> PublicYearView:
        """Read-only year view behind a share token. Raises RemoteError."""
        data = await self._remote.get_public_year_data(token, year)
        habits = [Habit.model_validate(h) for h in data.get("habits") or []]
        entries = data.get("entries") or {}
        today = self.today()
        return PublicYearView(
            year=year,
            habits=habits,
            entries=entries,
            summary=year_summary(habits, entries, year, today=today),
            recent=history(habits, entries, year, limit=PUBLIC_RECENT_DATES),
        )
