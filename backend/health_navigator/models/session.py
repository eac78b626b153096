"""
Session Models - Identity and user-facing notices.
"""

from typing import Literal, Optional
from pydantic import BaseModel


class Notice(BaseModel):
    """Message shown to the user after an action."""
    type: Literal["success", "error"]
    text: str

    @classmethod
    def success(cls, text: str) -> "Notice":
        return cls(type="success", text=text)

    @classmethod
    def error(cls, text: str) -> "Notice":
        return cls(type="error", text=text)


class SignInRequest(BaseModel):
    """
    Sign-in request; omit both tokens for an anonymous session.

    With Firebase, send the ID token obtained from signInWithCustomToken.
    Without Firebase, send the HS256 custom token itself.
    """
    id_token: Optional[str] = None
    custom_token: Optional[str] = None


class SessionToken(BaseModel):
    """Session token response model."""
    access_token: str
    token_type: str = "bearer"
    user_id: str
    anonymous: bool


class SessionInfo(BaseModel):
    """Identity of the current session."""
    user_id: str
    anonymous: bool
    app_id: str


class TokenData(BaseModel):
    """Token payload data."""
    user_id: Optional[str] = None
    anonymous: bool = True
