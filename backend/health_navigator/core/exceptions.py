"""
Custom exceptions for Health Navigator.

Every error carries the HTTP status it maps to and the notice text shown to
the user. The exception handler in ``main`` renders them uniformly.
"""

from typing import Optional


class HealthNavigatorError(Exception):
    """Base exception for all Health Navigator errors."""

    status_code: int = 500
    default_message: str = "Unexpected error."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(HealthNavigatorError):
    """Raised when user input is missing or malformed."""

    status_code = 400
    default_message = "Invalid input."


class AuthenticationError(HealthNavigatorError):
    """Raised when an identity token cannot be verified."""

    status_code = 401
    default_message = "Could not validate credentials."


class NotFoundError(HealthNavigatorError):
    """Raised when a referenced record does not exist."""

    status_code = 404
    default_message = "Record not found."


class BusyError(HealthNavigatorError):
    """Raised when the same action is already in flight for a session."""

    status_code = 409
    default_message = "A request is already in progress."


class ConfigurationError(HealthNavigatorError):
    """Raised when a required setting is missing."""

    status_code = 503
    default_message = "Service is not configured."


class DocumentStoreError(HealthNavigatorError):
    """Raised when a document store operation fails."""

    status_code = 502
    default_message = "Document store request failed."


class DocumentNotFoundError(DocumentStoreError):
    """Raised when a document store update targets a missing document."""

    status_code = 404
    default_message = "Document not found."


class InvalidRedirectError(HealthNavigatorError):
    """Raised when an OAuth redirect fragment is malformed or forged."""

    status_code = 400
    default_message = "Invalid OAuth redirect."


class FitnessNotConnectedError(HealthNavigatorError):
    """Raised when a fitness call is made without a held access token."""

    status_code = 400
    default_message = "Google Fit access token is missing. Please connect again."


class FitnessTokenExpiredError(HealthNavigatorError):
    """Raised when the fitness provider rejects the access token (HTTP 401)."""

    status_code = 401
    default_message = "Google Fit token expired. Please reconnect to Google Fit."


class FitnessAPIError(HealthNavigatorError):
    """Raised on any other fitness API failure."""

    status_code = 502
    default_message = "Failed to fetch activity."


class LLMResponseError(HealthNavigatorError):
    """Raised when the model returns an error status or no usable content."""

    status_code = 502
    default_message = "Model response error: Could not generate content."
