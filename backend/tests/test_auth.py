"""
Tests for sign-in and session tokens.
"""

import pytest
from unittest.mock import MagicMock, patch
from jose import jwt

from health_navigator.core.exceptions import AuthenticationError
from health_navigator.utils.auth import IdentityProvider


@pytest.fixture
def firebase_app():
    return MagicMock()


class TestLocalSignIn:

    def test_anonymous(self, settings):
        identity = IdentityProvider(settings)
        token = identity.sign_in()
        assert token.anonymous is True
        assert identity.verify_session(token.access_token).user_id == token.user_id

    def test_custom_token(self, settings):
        custom_token = jwt.encode({"sub": "patient-7"}, settings.secret_key, algorithm="HS256")
        token = IdentityProvider(settings).sign_in(custom_token=custom_token)
        assert token.user_id == "patient-7"
        assert token.anonymous is False

    def test_custom_token_without_user(self, settings):
        custom_token = jwt.encode({"role": "x"}, settings.secret_key, algorithm="HS256")
        with pytest.raises(AuthenticationError):
            IdentityProvider(settings).sign_in(custom_token=custom_token)

    def test_id_token_rejected(self, settings):
        with pytest.raises(AuthenticationError):
            IdentityProvider(settings).sign_in(id_token="firebase-id-token")


class TestFirebaseSignIn:

    @patch("health_navigator.utils.auth.firebase_auth.verify_id_token")
    def test_id_token_verified(self, mock_verify, settings, firebase_app):
        mock_verify.return_value = {"uid": "fb-user"}
        identity = IdentityProvider(settings, firebase_app=firebase_app)

        token = identity.sign_in(id_token="firebase-id-token")

        assert token.user_id == "fb-user"
        assert token.anonymous is False
        mock_verify.assert_called_once_with("firebase-id-token", app=firebase_app)

    @patch("health_navigator.utils.auth.firebase_auth.verify_id_token")
    def test_invalid_id_token(self, mock_verify, settings, firebase_app):
        mock_verify.side_effect = ValueError("bad token")
        identity = IdentityProvider(settings, firebase_app=firebase_app)

        with pytest.raises(AuthenticationError):
            identity.sign_in(id_token="garbage")

    @patch("health_navigator.utils.auth.firebase_auth.verify_id_token")
    def test_custom_token_must_be_exchanged(self, mock_verify, settings, firebase_app):
        identity = IdentityProvider(settings, firebase_app=firebase_app)

        with pytest.raises(AuthenticationError) as exc_info:
            identity.sign_in(custom_token="firebase-custom-token")

        assert "id_token" in str(exc_info.value)
        mock_verify.assert_not_called()

    def test_anonymous_still_allowed(self, settings, firebase_app):
        token = IdentityProvider(settings, firebase_app=firebase_app).sign_in()
        assert token.anonymous is True
