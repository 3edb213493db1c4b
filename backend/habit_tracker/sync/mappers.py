"""Translate between in-memory habits/entries and remote table rows."""
from datetime import datetime, timezone

from habit_tracker.core.entries import EntryStore
from habit_tracker.core.goals import normalize_goals
from habit_tracker.schemas.habit import Habit, HabitKind


def habit_from_row(r: dict) -> Habit:
    # Habit validation prefers `goals` and falls back to the legacy columns
    return Habit.model_validate(
        {
            "id": r["id"],
            "name": r["name"],
            "type": r.get("type"),
            "unit": r.get("unit"),
            "decimals": r.get("decimals") or 0,
            "goals": r.get("goals"),
            "goal_daily": r.get("goal_daily"),
            "goal_period": r.get("goal_period"),
            "sort_index": r.get("sort_index") or 0,
        }
    )


def _unit_and_decimals(h: Habit) -> tuple[str | None, int]:
    if h.kind == HabitKind.number:
        return h.unit, int(h.decimals or 0)
    return None, 0


def habit_to_insert_row(h: Habit, user_id: str, sort_index: int) -> dict:
    unit, decimals = _unit_and_decimals(h)
    return {
        "id": h.id,
        "user_id": user_id,
        "name": h.name,
        "type": h.kind.value,
        "unit": unit,
        "decimals": decimals,
        "goals": normalize_goals(h.goals),
        "goal_daily": 0,
        "goal_period": "daily",
        "sort_index": sort_index if sort_index >= 0 else 0,
    }


def habit_to_update_row(h: Habit) -> dict:
    unit, decimals = _unit_and_decimals(h)
    return {
        "name": h.name,
        "unit": unit,
        "decimals": decimals,
        "goals": normalize_goals(h.goals),
        "goal_daily": 0,
        "goal_period": "daily",
    }


def entry_to_row(user_id: str, date_iso: str, habit_id: str, payload: dict) -> dict:
    return {
        "user_id": user_id,
        "date_iso": date_iso,
        "habit_id": habit_id,
        "value": payload,
        "updated_at": datetime.now(timezone.utc),
    }


def entries_from_rows(rows) -> EntryStore:
    out: EntryStore = {}
    for r in rows or []:
        d = str(r["date_iso"])
        # `value` is the stored payload object, e.g. {"value": ...}
        out.setdefault(d, {})[r["habit_id"]] = r["value"]
    return out


def order_rows(habits, user_id: str) -> list[dict]:
    return [
        {"id": h.id, "user_id": user_id, "sort_index": idx}
        for idx, h in enumerate(habits)
    ]
