"""Goal normalization.

Habits have carried their goal in a few shapes over time:

  - a ``goals`` mapping with one magnitude per period (current shape)
  - a bare magnitude plus a period name (``goal_daily`` / ``goal_period``,
    or ``goalDaily`` / ``goalPeriod`` in old cache blobs)
  - both, or neither

Everything here runs on read, so old and new records can live side by side
without a one-time migration.
"""
import math
from collections.abc import Mapping

from habit_tracker.core.constants import (
    DAYS_PER_YEAR,
    GOAL_PERIODS,
    MONTHS_PER_YEAR,
    WEEKS_PER_YEAR,
)


def _positive(v) -> float:
    if isinstance(v, bool):
        return 0.0
    try:
        x = float(v if v is not None else 0)
    except (TypeError, ValueError):
        return 0.0
    return x if math.isfinite(x) and x > 0 else 0.0


def normalize_goals(raw) -> dict[str, float]:
    """Canonical goals: exactly one non-negative magnitude per period (0 = unset)."""
    g = raw if isinstance(raw, Mapping) else {}
    return {period: _positive(g.get(period)) for period in GOAL_PERIODS}


def has_any_goal(goals) -> bool:
    return any(v > 0 for v in normalize_goals(goals).values())


def derive_yearly_goal(goals) -> float:
    """Single yearly pacing target.

    An explicit yearly goal wins; otherwise the first set period of
    daily, weekly, monthly is scaled up to a year. 0 means no goal.
    """
    g = normalize_goals(goals)
    if g["yearly"] > 0:
        return g["yearly"]
    if g["daily"] > 0:
        return g["daily"] * DAYS_PER_YEAR
    if g["weekly"] > 0:
        return g["weekly"] * WEEKS_PER_YEAR
    if g["monthly"] > 0:
        return g["monthly"] * MONTHS_PER_YEAR
    return 0.0


def yearly_goal(habit) -> float:
    return derive_yearly_goal(getattr(habit, "goals", None))


def migrate_legacy_goal(raw: Mapping) -> dict:
    """Fold a legacy magnitude + period pair into ``goals``.

    Only applies when no period in ``goals`` is set. Returns a new dict
    with normalized ``goals``; the legacy keys are left as they were.
    """
    out = dict(raw)
    goals = normalize_goals(out.get("goals"))

    legacy_goal = _positive(out.get("goal_daily", out.get("goalDaily")))
    legacy_period = out.get("goal_period", out.get("goalPeriod"))
    if legacy_period not in GOAL_PERIODS:
        legacy_period = "daily"

    if not any(goals.values()) and legacy_goal > 0:
        goals[legacy_period] = legacy_goal

    out["goals"] = goals
    return out
