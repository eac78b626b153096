"""Core module - error types, logging setup and the service container."""

from .exceptions import (
    HealthNavigatorError,
    ValidationError,
    AuthenticationError,
    NotFoundError,
    BusyError,
    ConfigurationError,
    DocumentStoreError,
    DocumentNotFoundError,
    InvalidRedirectError,
    FitnessNotConnectedError,
    FitnessTokenExpiredError,
    FitnessAPIError,
    LLMResponseError,
)

__all__ = [
    'HealthNavigatorError', 'ValidationError', 'AuthenticationError', 'NotFoundError',
    'BusyError', 'ConfigurationError', 'DocumentStoreError', 'DocumentNotFoundError',
    'InvalidRedirectError', 'FitnessNotConnectedError', 'FitnessTokenExpiredError',
    'FitnessAPIError', 'LLMResponseError',
]
