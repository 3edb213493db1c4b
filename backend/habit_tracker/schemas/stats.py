from typing import Optional

from pydantic import BaseModel

from habit_tracker.schemas.habit import Habit


class HabitStats(BaseModel):
    total: float = 0
    days_logged: int = 0
    best: Optional[float] = None  # number habits only
    avg_per_logged_day: float = 0
    avg_last7: float = 0


class SeriesPoint(BaseModel):
    date: str
    daily: float
    actual_cum: float
    goal_cum: Optional[float] = None  # None = no goal line


class SummaryItem(BaseModel):
    habit: Habit
    stats: HabitStats
    total_text: str


class HistoryItem(BaseModel):
    habit_id: str
    label: str
    value: str


class HistoryDay(BaseModel):
    date: str
    items: list[HistoryItem]


class PublicYearView(BaseModel):
    year: int
    habits: list[Habit]
    entries: dict[str, dict[str, dict]]
    summary: list[SummaryItem]
    recent: list[HistoryDay]
