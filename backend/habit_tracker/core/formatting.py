"""Display formatting for logged values and stats."""
import math
import re

from habit_tracker.core.constants import MAX_DECIMALS


def habit_decimals(habit) -> int:
    if habit is None or habit.kind != "number":
        return 0
    d = habit.decimals
    return d if isinstance(d, int) and 0 <= d <= MAX_DECIMALS else 0


def format_number(n, decimals: int) -> str:
    """
    Format a value for display.
    Example: (12.5, 2) -> '12.50', (4.0, 0) -> '4', (1.25, 0) -> '1.25', (1.5, 0) -> '1.5'
    """
    try:
        v = float(n if n is not None else 0)
    except (TypeError, ValueError):
        return "0"
    if not math.isfinite(v):
        return "0"

    if decimals > 0:
        return f"{v:.{decimals}f}"
    if v.is_integer():
        return str(int(v))

    s = f"{v:.2f}"
    s = re.sub(r"\.00$", "", s)
    return re.sub(r"(\.\d)0$", r"\1", s)


def _with_unit(text: str, habit) -> str:
    return f"{text} {habit.unit or ''}".strip()


def entry_to_display(habit, entry: dict | None) -> str:
    if habit.kind == "checkbox":
        return "Done" if entry and entry.get("value") else "Not done"
    value = entry.get("value") if entry else 0
    return _with_unit(format_number(value, habit_decimals(habit)), habit)


def format_stat_total(habit, total: float) -> str:
    if habit.kind == "checkbox":
        return f"{round(total)} days"
    return _with_unit(format_number(total, habit_decimals(habit)), habit)


def format_stat_avg(habit, avg: float) -> str:
    if habit.kind == "checkbox":
        return f"{avg:.2f} / day"
    return _with_unit(format_number(avg, habit_decimals(habit)), habit)


def format_stat_best(habit, best) -> str:
    if habit.kind == "checkbox" or best is None:
        return ""
    return _with_unit(format_number(best, habit_decimals(habit)), habit)
