"""
Custom exceptions for genmedia.

The hierarchy mirrors how failures are reported to callers: configuration and
validation problems are detected locally before any vendor is contacted;
everything a vendor does wrong is a ProviderError subclass.
"""


class GenmediaError(Exception):
    """Base exception for all genmedia errors."""

    pass


class ConfigurationError(GenmediaError):
    """Raised when there is a configuration problem (e.g. a missing vendor credential)."""

    pass


class ValidationError(GenmediaError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: str = "") -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Name of the field that failed validation (optional)
        """
        self.field = field
        super().__init__(message)


class CancellationError(GenmediaError):
    """Raised when an operation is cancelled (SIGINT or client disconnect)."""

    pass


class ProviderError(GenmediaError):
    """Raised when a vendor call fails or returns an unexpected shape."""

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        response: str = "",
        provider: str = "",
    ) -> None:
        """
        Initialize provider error.

        Args:
            message: Error message
            status_code: Vendor HTTP status code (if applicable)
            response: Raw vendor response or error payload (if available)
            provider: Provider id that raised the error
        """
        self.status_code = status_code
        self.response = response
        self.provider = provider
        super().__init__(message)


class AuthenticationError(ProviderError):
    """Raised when the vendor rejects the configured credential."""

    pass


class AuthorizationError(ProviderError):
    """Raised when the vendor refuses access (plan, billing, or model restriction)."""

    pass


class ThrottlingError(ProviderError):
    """Raised when the vendor rate-limits the request."""

    pass


class UpstreamError(ProviderError):
    """Raised for any other vendor failure, malformed payload, or empty result."""

    pass


class NetworkError(UpstreamError):
    """Raised when a network operation against a vendor fails."""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        provider: str = "",
    ) -> None:
        """
        Initialize network error.

        Args:
            message: Error message
            original_error: The underlying exception that caused this error
            provider: Provider id that raised the error
        """
        self.original_error = original_error
        super().__init__(message, provider=provider)


class RequestTimeoutError(UpstreamError):
    """Raised when a vendor request or a vendor job exceeds its time budget."""

    pass
