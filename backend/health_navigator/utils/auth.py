"""
Authentication utilities - session JWT handling and sign-in.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from firebase_admin import auth as firebase_auth
from firebase_admin import exceptions as firebase_exceptions
from jose import JWTError, jwt

from ..config import Settings
from ..core.exceptions import AuthenticationError
from ..models import SessionToken, TokenData

logger = logging.getLogger(__name__)


def create_access_token(
    data: dict,
    secret_key: str,
    algorithm: str = "HS256",
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT access token.

    Args:
        data: Data to encode in the token
        secret_key: Signing key
        algorithm: Signing algorithm
        expires_delta: Optional expiration time delta (default 15 minutes)

    Returns:
        str: Encoded JWT token
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=15))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


def decode_access_token(token: str, secret_key: str, algorithm: str = "HS256") -> Optional[TokenData]:
    """
    Decode and verify a JWT access token.

    Returns:
        Optional[TokenData]: Token data if valid, None otherwise
    """
    try:
        payload = jwt.decode(token, secret_key, algorithms=[algorithm])
    except JWTError:
        return None

    user_id = payload.get("sub")
    if user_id is None:
        return None
    return TokenData(user_id=user_id, anonymous=bool(payload.get("anonymous", True)))


class IdentityProvider:
    """
    Establishes who the caller is.

    Without a token the caller gets a fresh anonymous identity. When a
    Firebase app is available the caller sends a Firebase ID token, obtained
    on the client by exchanging its custom token with
    ``signInWithCustomToken``; Firebase Auth verifies it. Without Firebase a
    custom token is verified as an HS256 JWT signed with ``custom_token_secret``.
    """

    def __init__(self, settings: Settings, firebase_app: Optional[Any] = None):
        self.settings = settings
        self._firebase_app = firebase_app

    @property
    def uses_firebase(self) -> bool:
        return self._firebase_app is not None

    def _custom_token_secret(self) -> str:
        return self.settings.custom_token_secret or self.settings.secret_key

    def _verify_id_token(self, id_token: str) -> str:
        if not self.uses_firebase:
            raise AuthenticationError("ID tokens require Firebase; sign in with a custom token instead.")
        try:
            decoded = firebase_auth.verify_id_token(id_token, app=self._firebase_app)
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            logger.warning(f"Firebase ID token rejected: {e}")
            raise AuthenticationError("Invalid ID token.") from e
        return decoded["uid"]

    def _verify_custom_token(self, custom_token: str) -> str:
        if self.uses_firebase:
            raise AuthenticationError(
                "Exchange the Firebase custom token for an ID token (signInWithCustomToken) "
                "and send it as id_token."
            )
        try:
            payload = jwt.decode(custom_token, self._custom_token_secret(), algorithms=[self.settings.algorithm])
        except JWTError as e:
            logger.warning(f"Custom token rejected: {e}")
            raise AuthenticationError("Invalid custom token.") from e

        user_id = payload.get("uid") or payload.get("sub")
        if not user_id:
            raise AuthenticationError("Custom token carries no user id.")
        return str(user_id)

    def sign_in(self, custom_token: Optional[str] = None, id_token: Optional[str] = None) -> SessionToken:
        """
        Sign in with an ID token or a custom token, or anonymously when neither is given.

        Raises:
            AuthenticationError: If the token is rejected
        """
        if id_token:
            user_id, anonymous = self._verify_id_token(id_token), False
        elif custom_token:
            user_id, anonymous = self._verify_custom_token(custom_token), False
        else:
            user_id, anonymous = uuid.uuid4().hex, True

        access_token = create_access_token(
            data={"sub": user_id, "anonymous": anonymous},
            secret_key=self.settings.secret_key,
            algorithm=self.settings.algorithm,
            expires_delta=timedelta(minutes=self.settings.access_token_expire_minutes),
        )
        logger.info(f"User signed in: {user_id} (anonymous={anonymous})")
        return SessionToken(access_token=access_token, user_id=user_id, anonymous=anonymous)

    def verify_session(self, access_token: str) -> TokenData:
        """
        Raises:
            AuthenticationError: If the session token is invalid or expired
        """
        token_data = decode_access_token(access_token, self.settings.secret_key, self.settings.algorithm)
        if token_data is None or token_data.user_id is None:
            raise AuthenticationError("Could not validate credentials")
        return token_data
