from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from habit_tracker.api.deps import get_tracker, require_session
from habit_tracker.core.summary import year_summary
from habit_tracker.core.time_utils import build_year_options
from habit_tracker.schemas.api import ShareRead
from habit_tracker.schemas.state import StateTree
from habit_tracker.schemas.stats import PublicYearView, SummaryItem
from habit_tracker.sync.engine import SessionContext, SyncEngine
from habit_tracker.sync.remote import RemoteError


router = APIRouter(tags=["state"])


@router.get("/state", response_model=StateTree)
def get_state(tracker: SyncEngine = Depends(get_tracker)):
    return tracker.state


@router.get("/state/years", response_model=list[int])
def get_year_options(tracker: SyncEngine = Depends(get_tracker)):
    return build_year_options(tracker.today())


@router.get("/state/summary", response_model=list[SummaryItem])
def get_year_summary(tracker: SyncEngine = Depends(get_tracker)):
    """Totals per habit for the selected year, biggest first."""
    state = tracker.state
    return year_summary(state.habits, state.entries, state.ui.selected_year, today=tracker.today())


@router.get("/state/export")
def export_state(tracker: SyncEngine = Depends(get_tracker)):
    filename, body = tracker.export_state()
    return Response(
        content=body,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/share", response_model=ShareRead)
async def create_share_link(
    ctx: SessionContext = Depends(require_session),
    tracker: SyncEngine = Depends(get_tracker),
):
    # No clipboard on the server; the client copies `url` itself.
    link = await tracker.create_share_link(ctx)
    if link.error:
        raise HTTPException(status_code=502, detail=link.error)
    return link


@router.get("/view/{token}", response_model=PublicYearView)
async def public_view(
    token: str,
    year: int | None = Query(None),
    tracker: SyncEngine = Depends(get_tracker),
):
    """View-only year data behind a share token (no session needed)."""
    try:
        return await tracker.load_public_view(token, year or tracker.today().year)
    except RemoteError as e:
        raise HTTPException(status_code=404, detail=str(e))
