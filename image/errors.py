"""
Error taxonomy for image acquisition.

Adapters raise these; ImageProvider.attempt catches them and turns them
into failed outcomes, so none of them reach the API layer.
"""
from typing import Optional


class ImageGenerationError(Exception):
    """Base class for every provider failure."""

    def __init__(self, message: str = "", provider: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.provider = provider


class ConfigurationAbsent(ImageGenerationError):
    """A provider was built without its access key."""


class TransportFailure(ImageGenerationError):
    """Network error, timeout, or non-2xx response."""

    def __init__(
        self,
        message: str = "",
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, provider=provider)
        self.status_code = status_code


class PollTimeout(TransportFailure):
    """A remote job never reached a terminal status within the poll bound."""


class ProtocolFailure(ImageGenerationError):
    """Response was malformed or missing an expected field."""


class RemoteGenerationFailure(ImageGenerationError):
    """Provider explicitly reported that generation failed."""
