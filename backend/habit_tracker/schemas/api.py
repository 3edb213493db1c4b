from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from habit_tracker.schemas.state import StateTree


class SessionStart(BaseModel):
    user_id: str = Field(min_length=1)


class YearSelect(BaseModel):
    year: int = Field(ge=1, le=9999)


class EntryLog(BaseModel):
    """What the user typed. Strings keep their literal form (e.g. '12.50')."""

    value: Union[bool, int, float, str, None] = None


class EntryBump(BaseModel):
    delta: float


class ReorderRequest(BaseModel):
    from_id: str
    to_id: str


class DragEvent(BaseModel):
    habit_id: str


class StatusRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    ready: bool
    error: str
    label: str
    synced_at: Optional[datetime] = None


class MutationRead(BaseModel):
    state: StateTree
    status: StatusRead
    # confirmed / failed / discarded, only when the caller waited
    outcome: Optional[str] = None
    reason: Optional[str] = None


class ShareRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    url: str
    token: str
    copied: bool
    error: str
