from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from habit_tracker.api.deps import get_tracker, mutation_response, require_session
from habit_tracker.core.summary import history
from habit_tracker.schemas.api import EntryBump, EntryLog, MutationRead
from habit_tracker.schemas.stats import HistoryDay
from habit_tracker.sync.engine import HabitNotFound, SessionContext, SyncEngine


router = APIRouter(prefix="/entries", tags=["entries"])


@router.get("/history", response_model=list[HistoryDay])
def get_history(
    month: Optional[str] = Query(None, pattern=r"^(all|0[1-9]|1[0-2])$"),
    tracker: SyncEngine = Depends(get_tracker),
):
    """
    Logged days of the selected year, most recent first.

      GET /entries/history?month=03
    """
    state = tracker.state
    return history(state.habits, state.entries, state.ui.selected_year, month=month)


@router.put("/{date_iso}/{habit_id}", response_model=MutationRead)
async def log_value(
    date_iso: str,
    habit_id: str,
    payload: EntryLog,
    wait: bool = Query(False),
    ctx: SessionContext = Depends(require_session),
    tracker: SyncEngine = Depends(get_tracker),
):
    try:
        task = tracker.log_value(ctx, date_iso, habit_id, payload.value)
    except HabitNotFound:
        raise HTTPException(status_code=404, detail="Habit not found")
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return await mutation_response(tracker, task, wait)


@router.post("/{date_iso}/{habit_id}/bump", response_model=MutationRead)
async def bump_value(
    date_iso: str,
    habit_id: str,
    payload: EntryBump,
    wait: bool = Query(False),
    ctx: SessionContext = Depends(require_session),
    tracker: SyncEngine = Depends(get_tracker),
):
    try:
        task = tracker.bump(ctx, date_iso, habit_id, payload.delta)
    except HabitNotFound:
        raise HTTPException(status_code=404, detail="Habit not found")
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return await mutation_response(tracker, task, wait)


@router.delete("/{date_iso}/{habit_id}", response_model=MutationRead)
async def remove_log(
    date_iso: str,
    habit_id: str,
    wait: bool = Query(False),
    ctx: SessionContext = Depends(require_session),
    tracker: SyncEngine = Depends(get_tracker),
):
    task = tracker.remove_log(ctx, date_iso, habit_id)
    return await mutation_response(tracker, task, wait)
