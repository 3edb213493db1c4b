from fastapi import APIRouter, Depends, HTTPException, Query

from habit_tracker.api.deps import get_tracker, mutation_response, require_session
from habit_tracker.core.series import build_habit_series
from habit_tracker.core.stats import habit_stats
from habit_tracker.schemas.api import DragEvent, MutationRead, ReorderRequest
from habit_tracker.schemas.habit import Habit, HabitDraft, HabitPatch
from habit_tracker.schemas.stats import HabitStats, SeriesPoint
from habit_tracker.sync.engine import HabitNotFound, SessionContext, SyncEngine


router = APIRouter(prefix="/habits", tags=["habits"])


def _habit_or_404(tracker: SyncEngine, habit_id: str) -> Habit:
    habit = tracker.state.habit(habit_id)
    if habit is None:
        raise HTTPException(status_code=404, detail="Habit not found")
    return habit


@router.get("/", response_model=list[Habit])
def list_habits(tracker: SyncEngine = Depends(get_tracker)):
    """Habits in display / log order."""
    return list(tracker.state.habits)


@router.post("/", response_model=MutationRead)
async def create_habit(
    payload: HabitDraft,
    wait: bool = Query(False),
    ctx: SessionContext = Depends(require_session),
    tracker: SyncEngine = Depends(get_tracker),
):
    task = tracker.add_habit(ctx, payload)
    return await mutation_response(tracker, task, wait)


@router.patch("/{habit_id}", response_model=MutationRead)
async def update_habit(
    habit_id: str,
    payload: HabitPatch,
    wait: bool = Query(False),
    ctx: SessionContext = Depends(require_session),
    tracker: SyncEngine = Depends(get_tracker),
):
    try:
        task = tracker.update_habit(ctx, habit_id, payload)
    except HabitNotFound:
        raise HTTPException(status_code=404, detail="Habit not found")
    return await mutation_response(tracker, task, wait)


@router.delete("/{habit_id}", response_model=MutationRead)
async def delete_habit(
    habit_id: str,
    wait: bool = Query(False),
    ctx: SessionContext = Depends(require_session),
    tracker: SyncEngine = Depends(get_tracker),
):
    try:
        task = tracker.delete_habit(ctx, habit_id)
    except HabitNotFound:
        raise HTTPException(status_code=404, detail="Habit not found")
    return await mutation_response(tracker, task, wait)


@router.get("/{habit_id}/stats", response_model=HabitStats)
def get_habit_stats(habit_id: str, tracker: SyncEngine = Depends(get_tracker)):
    habit = _habit_or_404(tracker, habit_id)
    state = tracker.state
    return habit_stats(habit, state.entries, state.ui.selected_year, today=tracker.today())


@router.get("/{habit_id}/series", response_model=list[SeriesPoint])
def get_habit_series(habit_id: str, tracker: SyncEngine = Depends(get_tracker)):
    """Cumulative actual vs. goal for the selected year."""
    habit = _habit_or_404(tracker, habit_id)
    state = tracker.state
    return build_habit_series(habit, state.entries, state.ui.selected_year, today=tracker.today())


# --------- Reordering --------- #

@router.post("/reorder", response_model=MutationRead)
async def reorder_habits(
    payload: ReorderRequest,
    wait: bool = Query(False),
    ctx: SessionContext = Depends(require_session),
    tracker: SyncEngine = Depends(get_tracker),
):
    task = tracker.reorder(ctx, payload.from_id, payload.to_id)
    return await mutation_response(tracker, task, wait)


@router.post("/drag/start", response_model=list[Habit])
def drag_start(payload: DragEvent, tracker: SyncEngine = Depends(get_tracker)):
    try:
        tracker.begin_drag(payload.habit_id)
    except HabitNotFound:
        raise HTTPException(status_code=404, detail="Habit not found")
    return list(tracker.state.habits)


@router.post("/drag/over", response_model=list[Habit])
def drag_over(payload: DragEvent, tracker: SyncEngine = Depends(get_tracker)):
    """Live preview: the dragged habit takes the hovered habit's slot."""
    return list(tracker.drag_over(payload.habit_id).habits)


@router.post("/drag/end", response_model=MutationRead)
async def drag_end(
    wait: bool = Query(False),
    ctx: SessionContext = Depends(require_session),
    tracker: SyncEngine = Depends(get_tracker),
):
    task = tracker.end_drag(ctx)
    return await mutation_response(tracker, task, wait)
