from datetime import date, timedelta

from habit_tracker.core.config import settings
from habit_tracker.core.entries import EntryStore, entry_to_number, get_entry
from habit_tracker.core.goals import yearly_goal
from habit_tracker.core.time_utils import days_in_year, iso_from_date, today_local
from habit_tracker.schemas.stats import SeriesPoint


def series_range(year: int, today: date) -> tuple[date, date]:
    """Jan 1 of `year` through today (current year) or Dec 31 (any other year)."""
    start = date(year, 1, 1)
    end = today if year == today.year else date(year, 12, 31)
    return start, end


def build_habit_series(habit, store: EntryStore, year: int, today: date | None = None) -> list[SeriesPoint]:
    """Daily cumulative actual vs. goal pacing for one habit.

    The range is anchored to the calendar year, not the first log, so a
    habit with no entries still gets a full (flat) line. Pacing spreads the
    yearly goal evenly over the real number of days in each year.
    """
    today = today or today_local(settings.timezone)
    start, end = series_range(year, today)

    goal_yearly = yearly_goal(habit)
    has_goal = goal_yearly > 0

    actual_cum = 0.0
    goal_cum = 0.0
    out: list[SeriesPoint] = []

    d = start
    while d <= end:
        iso = iso_from_date(d)
        daily = entry_to_number(habit, get_entry(store, iso, habit.id), 0)

        actual_cum += daily
        if has_goal:
            goal_cum += goal_yearly / days_in_year(d.year)

        out.append(
            SeriesPoint(
                date=iso,
                daily=daily,
                actual_cum=actual_cum,
                goal_cum=goal_cum if has_goal else None,
            )
        )
        d += timedelta(days=1)

    return out
