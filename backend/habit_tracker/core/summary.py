from datetime import date
from typing import Optional

from habit_tracker.core.entries import EntryStore, list_dates_in_year
from habit_tracker.core.formatting import entry_to_display, format_stat_total
from habit_tracker.core.stats import habit_stats
from habit_tracker.schemas.stats import HistoryDay, HistoryItem, SummaryItem


def year_summary(habits, store: EntryStore, year: int, today: date | None = None) -> list[SummaryItem]:
    """Stats for every habit in `year`, biggest total first."""
    out = []
    for h in habits:
        st = habit_stats(h, store, year, today=today)
        out.append(SummaryItem(habit=h, stats=st, total_text=format_stat_total(h, st.total)))
    out.sort(key=lambda item: item.stats.total or 0, reverse=True)
    return out


def history(
    habits,
    store: EntryStore,
    year: int,
    month: Optional[str] = None,
    limit: Optional[int] = None,
) -> list[HistoryDay]:
    """Logged dates in `year` (most recent first), optionally one month ('01'..'12')."""
    dates = list_dates_in_year(store, year)
    if month and month != "all":
        dates = [d for d in dates if d[5:7] == month]
    if limit is not None:
        dates = dates[:limit]

    days = []
    for d in dates:
        day = store.get(d, {})
        items = [
            HistoryItem(habit_id=h.id, label=h.name, value=entry_to_display(h, day[h.id]))
            for h in habits
            if day.get(h.id)
        ]
        days.append(HistoryDay(date=d, items=items))
    return days
