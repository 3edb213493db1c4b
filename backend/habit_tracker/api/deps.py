from fastapi import Depends, HTTPException, Request

from habit_tracker.schemas.api import MutationRead, StatusRead
from habit_tracker.sync.engine import Discarded, Failed, SessionContext, SyncEngine


def get_tracker(request: Request) -> SyncEngine:
    return request.app.state.tracker


def require_session(tracker: SyncEngine = Depends(get_tracker)) -> SessionContext:
    ctx = tracker.context
    if ctx is None or not ctx.user_id:
        raise HTTPException(status_code=409, detail="No active session")
    return ctx


def status_read(tracker: SyncEngine) -> StatusRead:
    st = tracker.status
    return StatusRead(ready=st.ready, error=st.error, label=st.label, synced_at=st.synced_at)


async def mutation_response(tracker: SyncEngine, task, wait: bool) -> MutationRead:
    """Respond right after the local apply, or after the remote outcome if `wait`."""
    outcome = reason = None
    if task is not None and wait:
        result = await task
        if isinstance(result, Failed):
            outcome, reason = "failed", result.reason
        elif isinstance(result, Discarded):
            outcome = "discarded"
        else:
            outcome = "confirmed"
    return MutationRead(
        state=tracker.state,
        status=status_read(tracker),
        outcome=outcome,
        reason=reason,
    )
