class ServiceError(Exception):
    """Base exception for service errors."""


class ProviderError(ServiceError):
    """Raised when a downstream provider fails."""


class MediaUploadError(ProviderError):
    """Raised when the media service answers an upload with a non-2xx status."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"Upload failed ({status_code}): {body}")
        self.status_code = status_code
        self.body = body


class MalformedMediaResponse(ProviderError):
    """Raised when a successful media service response cannot be parsed."""


class MediaCleanupError(ProviderError):
    """Raised when the temporary greeting asset could not be destroyed."""
