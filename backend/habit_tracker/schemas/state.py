from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from habit_tracker.core.config import settings
from habit_tracker.core.time_utils import today_local
from habit_tracker.schemas.habit import Habit


def _current_year() -> int:
    return today_local(settings.timezone).year


class UiState(BaseModel):
    model_config = ConfigDict(frozen=True)

    selected_year: int = Field(default_factory=_current_year)

    @model_validator(mode="before")
    @classmethod
    def _accept_camel_case(cls, data):
        if isinstance(data, Mapping) and "selected_year" not in data and "selectedYear" in data:
            return {**data, "selected_year": data["selectedYear"]}
        return data

    @field_validator("selected_year", mode="before")
    @classmethod
    def _valid_year(cls, v):
        # Any past or future year is browsable; only nonsense falls back.
        try:
            y = int(v)
        except (TypeError, ValueError):
            return _current_year()
        return y if 1 <= y <= 9999 else _current_year()


class StateTree(BaseModel):
    """Everything the client holds: habits, entries and UI preference.

    Never mutated in place; every change builds a new tree via model_copy.
    """

    model_config = ConfigDict(frozen=True)

    habits: tuple[Habit, ...] = ()
    entries: dict[str, dict[str, dict]] = Field(default_factory=dict)
    ui: UiState = Field(default_factory=UiState)

    @field_validator("entries", mode="before")
    @classmethod
    def _drop_empty_days(cls, v):
        if not isinstance(v, Mapping):
            return {}
        return {
            str(d): dict(day)
            for d, day in v.items()
            if isinstance(day, Mapping) and day
        }

    @field_validator("ui", mode="before")
    @classmethod
    def _default_ui(cls, v):
        return v if v is not None else UiState()

    def habit(self, habit_id: str) -> Habit | None:
        return next((h for h in self.habits if h.id == habit_id), None)
