from collections.abc import Mapping
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from habit_tracker.core.constants import DEFAULT_UNIT, MAX_DECIMALS
from habit_tracker.core.goals import migrate_legacy_goal, normalize_goals


class HabitKind(str, Enum):
    number = "number"
    checkbox = "checkbox"


def _clamp_decimals(v) -> int:
    try:
        d = int(v)
    except (TypeError, ValueError):
        return 0
    return min(MAX_DECIMALS, max(0, d))


class Habit(BaseModel):
    """A trackable quantity (number) or yes/no check (checkbox).

    Accepts every shape a habit has been stored in (cache blobs and remote
    rows): ``type`` for ``kind``, ``sortIndex`` for ``sort_index`` and the
    legacy single goal columns, which are folded into ``goals``.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str
    name: str = Field(min_length=1)
    kind: HabitKind = HabitKind.number
    unit: Optional[str] = None
    decimals: int = 0
    goals: dict[str, float] = Field(default_factory=lambda: normalize_goals({}))
    sort_index: int = Field(default=0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _upgrade_stored_shape(cls, data):
        if not isinstance(data, Mapping):
            return data
        d = migrate_legacy_goal(data)
        if "kind" not in d and "type" in d:
            d["kind"] = d["type"]
        if "sort_index" not in d and "sortIndex" in d:
            d["sort_index"] = d["sortIndex"]
        if d.get("sort_index") is None:
            d["sort_index"] = 0
        if d.get("id") is not None:
            d["id"] = str(d["id"])

        if d.get("kind", HabitKind.number.value) == HabitKind.checkbox.value:
            d["unit"] = None
            d["decimals"] = 0
        else:
            d["unit"] = (d.get("unit") or "").strip() or DEFAULT_UNIT
            d["decimals"] = _clamp_decimals(d.get("decimals"))
        return d

    @field_validator("goals", mode="before")
    @classmethod
    def _normalize_goals(cls, v):
        return normalize_goals(v)


class HabitDraft(BaseModel):
    """Payload for creating a habit."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1)
    kind: HabitKind = HabitKind.number
    unit: Optional[str] = None
    goals: dict[str, float] = Field(default_factory=dict)


class HabitPatch(BaseModel):
    """Partial update for a habit (all fields optional)."""

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    unit: Optional[str] = None
    goals: Optional[dict[str, float]] = None
    decimals: Optional[int] = Field(default=None, ge=0, le=MAX_DECIMALS)
