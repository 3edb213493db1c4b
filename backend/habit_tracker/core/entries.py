"""Entry store helpers.

The store is a plain ``{date_iso: {habit_id: {"value": ...}}}`` mapping.
Every function here returns a new mapping and leaves its input untouched,
and a date never maps to an empty dict.

Dates are canonical zero-padded ISO strings, so string comparison is
chronological comparison.
"""
from habit_tracker.core.time_utils import coerce_number, iso_range_for_year

EntryStore = dict[str, dict[str, dict]]


def get_entry(store: EntryStore, date_iso: str, habit_id: str) -> dict | None:
    return (store or {}).get(date_iso, {}).get(habit_id)


def set_entry(store: EntryStore, date_iso: str, habit_id: str, payload: dict) -> EntryStore:
    nxt = dict(store or {})
    day = dict(nxt.get(date_iso) or {})
    day[habit_id] = payload
    nxt[date_iso] = day
    return nxt


def delete_entry(store: EntryStore, date_iso: str, habit_id: str) -> EntryStore:
    nxt = dict(store or {})
    if date_iso not in nxt:
        return nxt
    day = dict(nxt[date_iso])
    day.pop(habit_id, None)
    if day:
        nxt[date_iso] = day
    else:
        del nxt[date_iso]
    return nxt


def purge_habit(store: EntryStore, habit_id: str) -> EntryStore:
    """Remove a habit's entry from every date."""
    nxt = store or {}
    for d in list(nxt):
        if habit_id in nxt[d]:
            nxt = delete_entry(nxt, d, habit_id)
    return dict(nxt)


def within_year(date_iso: str, year: int) -> bool:
    start, end = iso_range_for_year(year)
    return start <= date_iso <= end


def list_dates_in_year(store: EntryStore, year: int) -> list[str]:
    """Dates with at least one entry in `year`, most recent first."""
    return sorted((d for d in (store or {}) if within_year(d, year)), reverse=True)


def entry_to_number(habit, entry: dict | None, fallback: float = 0) -> float:
    if not entry:
        return fallback
    if habit.kind == "checkbox":
        return 1 if entry.get("value") else 0
    return coerce_number(entry.get("value"))
