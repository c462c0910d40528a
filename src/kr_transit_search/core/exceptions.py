"""Custom exceptions for Korean transit search."""


class TransitSearchError(Exception):
    """Base exception for transit search errors."""

    pass


class ProviderFailure(TransitSearchError):
    """Raised when a provider request fails at the transport or HTTP level."""

    def __init__(self, provider: str, cause: str):
        self.provider = provider
        self.cause = cause
        super().__init__(f"{provider} provider request failed: {cause}")
