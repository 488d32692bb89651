"""
Provider-specific exceptions
"""

from settings_sync.core.exceptions import SettingsSyncError


class ProviderError(SettingsSyncError):
    """Base exception for provider-related errors"""

    subsystem = "provider"

    def __init__(self, message: str, url: str | None = None, **kwargs):
        self.url = url
        super().__init__(message, **kwargs)


class ProviderUnreachableError(ProviderError):
    """Raised on network errors, timeouts or non-success status codes"""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        **kwargs,
    ):
        self.status_code = status_code
        super().__init__(message, url, **kwargs)


class ProviderMalformedResponseError(ProviderError):
    """Raised when a response lacks the expected model-list shape"""
