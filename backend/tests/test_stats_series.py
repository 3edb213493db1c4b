from datetime import date

import pytest

from habit_tracker.core.series import build_habit_series
from habit_tracker.core.stats import habit_stats
from habit_tracker.schemas.habit import Habit


def number_habit(**kw):
    return Habit(id="p", name="Pushups", kind="number", unit="reps", **kw)


def checkbox_habit(**kw):
    return Habit(id="r", name="Read", kind="checkbox", **kw)


def test_stats_on_empty_store():
    st = habit_stats(number_habit(), {}, 2026, today=date(2026, 3, 10))
    assert st.model_dump() == {
        "total": 0,
        "days_logged": 0,
        "best": None,
        "avg_per_logged_day": 0,
        "avg_last7": 0,
    }


def test_stats_for_number_habit():
    store = {
        "2026-03-08": {"p": {"value": 10}},
        "2026-03-10": {"p": {"value": 20}},
        "2026-01-15": {"r": {"value": True}},
        "2025-12-31": {"p": {"value": 99}},
    }
    st = habit_stats(number_habit(), store, 2026, today=date(2026, 3, 10))
    assert st.total == 30
    assert st.days_logged == 2
    assert st.best == 20
    assert st.avg_per_logged_day == 15
    # unlogged days in the window count as zero
    assert st.avg_last7 == pytest.approx(30 / 7)


def test_last7_window_is_cut_at_year_start():
    store = {
        "2026-01-02": {"p": {"value": 7}},
        "2025-12-31": {"p": {"value": 5}},
    }
    st = habit_stats(number_habit(), store, 2026, today=date(2026, 1, 3))
    assert st.avg_last7 == pytest.approx(7 / 3)


def test_checkbox_stats_have_no_best():
    store = {
        "2026-02-01": {"r": {"value": True}},
        "2026-02-02": {"r": {"value": False}},
        "2026-02-03": {"r": {"value": True}},
    }
    st = habit_stats(checkbox_habit(), store, 2026, today=date(2026, 3, 10))
    assert st.total == 2
    assert st.days_logged == 3
    assert st.best is None


def test_negative_best_is_still_tracked():
    store = {"2026-02-01": {"p": {"value": -4}}}
    st = habit_stats(number_habit(), store, 2026, today=date(2026, 3, 10))
    assert st.best == -4


def test_past_year_series_spans_whole_year_without_goal():
    series = build_habit_series(checkbox_habit(), {}, 2025, today=date(2026, 3, 10))
    assert len(series) == 365
    assert series[0].date == "2025-01-01"
    assert series[-1].date == "2025-12-31"
    assert all(p.goal_cum is None for p in series)
    assert series[-1].actual_cum == 0


def test_current_year_series_stops_today():
    series = build_habit_series(checkbox_habit(), {}, 2026, today=date(2026, 3, 10))
    # Jan (31) + Feb (28) + 10 days of March
    assert len(series) == 69
    assert series[-1].date == "2026-03-10"


def test_yearly_goal_paces_one_unit_per_day():
    habit = number_habit(goals={"yearly": 365})
    series = build_habit_series(habit, {}, 2025, today=date(2026, 3, 10))
    for i in (0, 1, 100, 364):
        assert series[i].goal_cum == pytest.approx(i + 1)


def test_leap_year_pacing_is_exact():
    habit = number_habit(goals={"yearly": 366})
    series = build_habit_series(habit, {}, 2024, today=date(2026, 3, 10))
    assert len(series) == 366
    assert series[0].goal_cum == pytest.approx(1)
    assert series[-1].goal_cum == pytest.approx(366)


def test_daily_goal_is_derived_for_pacing():
    habit = number_habit(goals={"daily": 2})
    series = build_habit_series(habit, {}, 2025, today=date(2026, 3, 10))
    assert series[-1].goal_cum == pytest.approx(730)


def test_actual_cumulates_logged_values():
    store = {
        "2026-01-02": {"p": {"value": 5}},
        "2026-01-04": {"p": {"value": 2.5}},
    }
    series = build_habit_series(number_habit(), store, 2026, today=date(2026, 1, 5))
    assert [p.daily for p in series] == [0, 5, 0, 2.5, 0]
    assert [p.actual_cum for p in series] == [0, 5, 5, 7.5, 7.5]
