from fastapi import APIRouter, Depends, Query

from habit_tracker.api.deps import get_tracker, mutation_response, status_read
from habit_tracker.schemas.api import MutationRead, SessionStart, StatusRead, YearSelect
from habit_tracker.sync.engine import SyncEngine


router = APIRouter(prefix="/session", tags=["session"])


@router.post("/", response_model=MutationRead)
async def start_session(
    payload: SessionStart,
    wait: bool = Query(True),
    tracker: SyncEngine = Depends(get_tracker),
):
    """Make `user_id` the active session and reload its selected year."""
    task = tracker.start_session(payload.user_id)
    return await mutation_response(tracker, task, wait)


@router.delete("/", response_model=StatusRead)
async def end_session(tracker: SyncEngine = Depends(get_tracker)):
    tracker.end_session()
    return status_read(tracker)


@router.put("/year", response_model=MutationRead)
async def select_year(
    payload: YearSelect,
    wait: bool = Query(True),
    tracker: SyncEngine = Depends(get_tracker),
):
    task = tracker.select_year(payload.year)
    return await mutation_response(tracker, task, wait)


@router.post("/refresh", response_model=MutationRead)
async def refresh(
    wait: bool = Query(True),
    tracker: SyncEngine = Depends(get_tracker),
):
    task = tracker.refresh()
    return await mutation_response(tracker, task, wait)


@router.get("/status", response_model=StatusRead)
def get_status(tracker: SyncEngine = Depends(get_tracker)):
    return status_read(tracker)
