"""Custom exception classes for the photo editing service."""

from typing import Optional

from ..models.enums import FailureReason


class PhotoProError(Exception):
    """Base exception for all service errors."""
    pass


class ConfigurationError(PhotoProError):
    """Configuration or initialization errors."""

    reason = FailureReason.CONFIGURATION


class ImageReadError(PhotoProError, OSError):
    """Uploaded image could not be read or encoded."""

    reason = FailureReason.IO


class APIError(PhotoProError):
    """Base class for API-related errors."""
    pass


class ProviderError(APIError):
    """Generic provider API error with status code."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        self.provider = provider
        self.status_code = status_code
        super().__init__(f"{provider} error: {message}")


class AuthenticationError(ProviderError):
    """API authentication failed."""

    def __init__(self, provider: str, message: str = "Authentication failed", status_code: int = 401):
        super().__init__(provider, message, status_code)


class RateLimitError(ProviderError):
    """API rate limit exceeded."""

    def __init__(self, provider: str, retry_after: Optional[int] = None):
        self.retry_after = retry_after
        message = "Rate limit exceeded"
        if retry_after:
            message += f", retry after {retry_after}s"
        super().__init__(provider, message, 429)


class MalformedResponseError(APIError):
    """Provider answered but the payload could not be understood."""
    pass


class EditError(PhotoProError):
    """
    Classified failure of an edit request.

    The message is the stable, user-facing text for the failure reason.
    The low-level cause is chained via ``__cause__`` and only ever logged.
    """

    reason: FailureReason = FailureReason.TRANSPORT

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class EditValidationError(EditError):
    """Request rejected before any network call."""

    reason = FailureReason.VALIDATION


class AuthorizationError(EditError):
    """Remote service rejected the credential or the operation."""

    reason = FailureReason.AUTHORIZATION


class ProtocolError(EditError):
    """Remote call succeeded but returned no usable image or text."""

    reason = FailureReason.PROTOCOL


class TransportError(EditError):
    """Network, timeout or unclassified upstream failure."""

    reason = FailureReason.TRANSPORT
