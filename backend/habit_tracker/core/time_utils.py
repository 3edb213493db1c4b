import calendar
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation

from habit_tracker.core.constants import MAX_DECIMALS


def iso_from_date(d: date) -> str:
    """Format a date as zero-padded 'YYYY-MM-DD'."""
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def parse_iso_date(iso: str) -> date:
    """
    Parse 'YYYY-MM-DD' -> date.
    Raises ValueError for anything that is not a canonical calendar date.
    """
    s = (iso or "").strip()
    if len(s) != 10:
        raise ValueError("Date must be in YYYY-MM-DD format")
    return date.fromisoformat(s)


def to_local_datetime(dt, tz_name: str | None = None):
    """Convert a datetime (assume UTC if naive) to local or given tz.

    - If `tz_name` is 'local' or None: use system local timezone.
    - If `tz_name` is IANA tz name (e.g., 'America/New_York'): use that.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    if tz_name and tz_name != "local":
        from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
        try:
            return dt.astimezone(ZoneInfo(tz_name))
        except ZoneInfoNotFoundError:
            return dt.astimezone()
    return dt.astimezone()


def today_local(tz_name: str | None = None) -> date:
    """Today's calendar date in the configured timezone."""
    return to_local_datetime(datetime.now(timezone.utc), tz_name).date()


def days_in_year(year: int) -> int:
    return 366 if calendar.isleap(year) else 365


def iso_range_for_year(year: int) -> tuple[str, str]:
    return f"{year:04d}-01-01", f"{year:04d}-12-31"


def build_year_options(today: date) -> list[int]:
    y = today.year
    return [y - 1, y, y + 1]


def count_decimals(literal) -> int:
    """
    Number of fractional digits in a user's literal input, capped at MAX_DECIMALS.
    Example: '12.50' -> 2, 12.5 -> 1, '3' -> 0, '1e-7' -> 6
    """
    if literal is None or isinstance(literal, bool):
        return 0
    try:
        exponent = Decimal(str(literal).strip()).as_tuple().exponent
    except InvalidOperation:
        return 0
    if not isinstance(exponent, int) or exponent >= 0:
        return 0
    return min(MAX_DECIMALS, -exponent)


def coerce_number(v) -> float | int:
    """
    Best-effort numeric coercion of a logged value.
    Non-numeric, NaN and infinite inputs become 0. Integral literals stay int.
    """
    if isinstance(v, bool):
        return int(v)
    if isinstance(v, int):
        return v
    try:
        d = Decimal(str(v).strip())
    except (InvalidOperation, ValueError):
        return 0
    if not d.is_finite():
        return 0
    if d == d.to_integral_value() and d.as_tuple().exponent >= 0:
        return int(d)
    return float(d)
