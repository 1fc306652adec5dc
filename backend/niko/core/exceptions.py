"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class NikoError(Exception):
    """Base exception for niko."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(NikoError):
    """Resource not found."""

    pass


class ValidationError(NikoError):
    """Validation error."""

    pass


class ConfigurationError(NikoError):
    """An external service has not been set up."""

    pass


class LLMError(NikoError):
    """LLM-related error."""

    pass


class AuthenticationError(NikoError):
    """Authentication failed."""

    pass


class InfrastructureError(NikoError):
    """Infrastructure-related error (DB, external services, etc.)."""

    pass


class NoteSinkError(InfrastructureError):
    """The note sink (Notion) rejected or failed a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, details={"status_code": status_code})
        self.status_code = status_code


class NoteSinkPreconditionError(ValidationError):
    """Note sink called without a token or target database id."""

    pass


class BusinessLogicError(NikoError):
    """Business logic constraint violation."""

    pass
