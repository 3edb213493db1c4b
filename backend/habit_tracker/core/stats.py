from datetime import date, timedelta

from habit_tracker.core.config import settings
from habit_tracker.core.constants import LAST_N_DAYS
from habit_tracker.core.entries import (
    EntryStore,
    entry_to_number,
    get_entry,
    within_year,
)
from habit_tracker.core.time_utils import iso_from_date, today_local
from habit_tracker.schemas.stats import HabitStats


def habit_stats(habit, store: EntryStore, year: int, today: date | None = None) -> HabitStats:
    """Per-year totals for one habit.

    - total / days_logged / best over every logged date in `year`
    - avg_last7 averages the last 7 calendar days ending today that fall in
      `year`; unlogged days count as 0, so near Jan 1 the window is shorter
    - every division by zero resolves to 0
    """
    today = today or today_local(settings.timezone)
    store = store or {}

    total = 0.0
    days_logged = 0
    best = None

    for d in store:
        if not within_year(d, year):
            continue
        e = get_entry(store, d, habit.id)
        if not e:
            continue
        days_logged += 1
        v = entry_to_number(habit, e, 0)
        total += v
        if habit.kind == "number":
            best = v if best is None else max(best, v)

    points = []
    for i in range(LAST_N_DAYS - 1, -1, -1):
        iso = iso_from_date(today - timedelta(days=i))
        if not within_year(iso, year):
            continue
        points.append(entry_to_number(habit, get_entry(store, iso, habit.id), 0))

    return HabitStats(
        total=total,
        days_logged=days_logged,
        best=best,
        avg_per_logged_day=total / days_logged if days_logged > 0 else 0,
        avg_last7=sum(points) / len(points) if points else 0,
    )
