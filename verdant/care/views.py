"""Care session API routes."""

from fastapi import APIRouter, Depends, status

from verdant.core.clock import Clock, get_clock
from verdant.care.models import CareSessionState, CompleteTaskRequest
from verdant.care.service import CareSessionService


router = APIRouter(prefix="/care", tags=["Care"])


@router.post("/session", response_model=CareSessionState, status_code=status.HTTP_201_CREATED)
async def start_session(clock: Clock = Depends(get_clock)):
    """
    Start a guided care session over every plant that needs care today.
    
    Plants are visited soonest-due first. Returns 400 when nothing needs care
    and 409 while another session is still in progress.
    """
    return await CareSessionService.start_session(clock)


@router.get("/session", response_model=CareSessionState)
async def get_session(clock: Clock = Depends(get_clock)):
    """Current plant, its tasks and overall progress."""
    return await CareSessionService.get_state(clock)


@router.post("/session/tasks", response_model=CareSessionState)
async def complete_task(request: CompleteTaskRequest, clock: Clock = Depends(get_clock)):
    """
    Mark a task done on the current plant.
    
    Once all of the plant's tasks are done the session moves on to the next
    plant after a short pause. Completing a task twice has no further effect.
    """
    return await CareSessionService.complete_task(request.kind, clock)


@router.delete("/session", status_code=status.HTTP_204_NO_CONTENT)
async def end_session():
    """Cancel the session, or dismiss it once complete."""
    await CareSessionService.end_session()
