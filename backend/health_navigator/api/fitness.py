"""
Fitness API endpoints - Google Fit connection, step fetch and step assessment.
"""

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import RedirectResponse

from ..core.container import ServiceContainer
from ..models import ChatReply, FitnessStatus, Notice, RedirectFragment, StepAssessment, StepsResult
from ..services import SessionState
from .deps import get_container, get_session_state

router = APIRouter(prefix="/fitness", tags=["fitness"])


@router.get("/connect")
async def connect(
    redirect: bool = Query(True, description="Redirect to Google instead of returning the URL"),
    container: ServiceContainer = Depends(get_container),
):
    """
    Start the implicit-grant flow. Google returns the browser to the
    configured redirect URI with the token in the URL fragment, which the
    client then posts to ``/fitness/token``.
    """
    url = container.fitness.connect_url()
    if redirect:
        return RedirectResponse(url, status_code=status.HTTP_302_FOUND)
    return {"authorization_url": url}


@router.post("/token", response_model=Notice)
async def accept_token(
    body: RedirectFragment,
    session: SessionState = Depends(get_session_state),
    container: ServiceContainer = Depends(get_container),
):
    """Store the access token from the OAuth redirect fragment."""
    return container.fitness.accept_redirect(session, body.fragment)


@router.delete("/token", status_code=status.HTTP_204_NO_CONTENT)
async def disconnect(
    session: SessionState = Depends(get_session_state),
    container: ServiceContainer = Depends(get_container),
):
    """Forget the Google Fit token and the last step count."""
    container.fitness.disconnect(session)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/status", response_model=FitnessStatus)
async def get_status(session: SessionState = Depends(get_session_state)):
    return FitnessStatus(
        connected=session.fitness_token is not None,
        step_count=session.step_count,
        is_loading=session.is_fit_loading,
    )


@router.post("/steps", response_model=StepsResult)
async def fetch_steps(
    session: SessionState = Depends(get_session_state),
    container: ServiceContainer = Depends(get_container),
):
    """Fetch yesterday's (UTC) step count."""
    step_count = await container.fitness.fetch_steps(session)
    return StepsResult(step_count=step_count, notice=container.fitness.fetched_notice(step_count))


@router.post("/assess", response_model=StepAssessment)
async def assess_steps(
    session: SessionState = Depends(get_session_state),
    container: ServiceContainer = Depends(get_container),
):
    """
    Fetch yesterday's steps, then ask the activity coach about them.
    The assistant is not called when the fetch fails, and nothing is
    fetched while the assistant is still answering.
    """
    container.assistant.ensure_idle(session.transcript)
    step_count = await container.fitness.fetch_steps(session)
    reply = await container.assistant.assess_steps(session.transcript, step_count)
    return StepAssessment(
        step_count=step_count,
        chat=ChatReply(reply=reply, history=list(session.transcript.messages)),
    )
