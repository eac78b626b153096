"""
API dependencies - container lookup and bearer-token authentication.
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..core.container import ServiceContainer
from ..core.exceptions import AuthenticationError
from ..models import TokenData
from ..services import SessionState

# Bearer token security
security = HTTPBearer()


def get_container(request: Request) -> ServiceContainer:
    """The container built by the application lifespan."""
    return request.app.state.container


async def get_current_session(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    container: ServiceContainer = Depends(get_container),
) -> TokenData:
    """
    Dependency to get the verified session from the bearer token.

    Raises:
        HTTPException: If token is invalid
    """
    try:
        return container.identity.verify_session(credentials.credentials)
    except AuthenticationError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_current_user_id(token_data: TokenData = Depends(get_current_session)) -> str:
    return token_data.user_id


async def get_session_state(
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(get_container),
) -> SessionState:
    """In-memory state of the signed-in user."""
    return container.sessions.get(user_id)
