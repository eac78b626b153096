"""
Authentication API endpoints.
"""

from fastapi import APIRouter, Depends

from ..core.container import ServiceContainer
from ..models import SessionInfo, SessionToken, SignInRequest, TokenData
from .deps import get_container, get_current_session

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/session", response_model=SessionToken)
async def sign_in(
    request: SignInRequest,
    container: ServiceContainer = Depends(get_container),
):
    """
    Start a session.

    With ``id_token`` (Firebase) or ``custom_token`` (local) the caller is
    signed in as the user it names; without either a new anonymous identity
    is issued.

    Returns:
        SessionToken: Bearer token for the other endpoints
    """
    return container.identity.sign_in(custom_token=request.custom_token, id_token=request.id_token)


@router.get("/me", response_model=SessionInfo)
async def get_me(
    session: TokenData = Depends(get_current_session),
    container: ServiceContainer = Depends(get_container),
):
    """Identity of the current session."""
    return SessionInfo(
        user_id=session.user_id,
        anonymous=session.anonymous,
        app_id=container.settings.app_id,
    )
