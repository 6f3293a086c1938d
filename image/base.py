import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import httpx

from image.errors import ImageGenerationError, ProtocolFailure

logger = logging.getLogger(__name__)


class ImageModel(str, Enum):
    """Hosted text-to-image models a caller may ask for."""
    FLUX_1_1_PRO = "black-forest-labs/FLUX1.1-pro"
    FLUX_1_SCHNELL = "black-forest-labs/FLUX.1-schnell"
    FLUX_1_SCHNELL_FREE = "black-forest-labs/FLUX.1-schnell-Free"
    FLUX_1_PRO = "black-forest-labs/FLUX.1-pro"
    FLUX_1_DEV = "black-forest-labs/FLUX.1-dev"


DEFAULT_IMAGE_MODEL = ImageModel.FLUX_1_SCHNELL_FREE
DEFAULT_WIDTH = 1024
DEFAULT_HEIGHT = 768


class ImageSource(str, Enum):
    TOGETHER = "together"
    BFL = "bfl"
    POLLINATIONS = "pollinations"
    UNSPLASH = "unsplash"


class OrchestratorState(str, Enum):
    NOT_STARTED = "not_started"
    TRYING_HOSTED = "trying_hosted"
    TRYING_DIRECT_API = "trying_direct_api"
    TRYING_FALLBACK = "trying_fallback"
    DONE = "done"


@dataclass(frozen=True)
class GenerationRequest:
    """
    One image request. Validated on construction, immutable afterwards.
    """
    prompt: str
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    preferred_model: ImageModel = DEFAULT_IMAGE_MODEL

    def __post_init__(self):
        if not isinstance(self.prompt, str) or not self.prompt.strip():
            raise ValueError("Prompt cannot be empty")
        for dimension in (self.width, self.height):
            # bool is an int subclass
            if not isinstance(dimension, int) or isinstance(dimension, bool) or dimension <= 0:
                raise ValueError("Width and height must be positive integers")
        # accept raw model id strings from callers
        object.__setattr__(self, "preferred_model", ImageModel(self.preferred_model))


@dataclass(frozen=True)
class ProviderOutcome:
    """Result of a single adapter attempt, before normalization."""
    provider: ImageSource
    image_url: Optional[str] = None
    error: Optional[ImageGenerationError] = None

    @property
    def ok(self) -> bool:
        return bool(self.image_url) and self.error is None


@dataclass(frozen=True)
class GenerationResult:
    """
    Caller-facing result. Same shape whichever provider answered.
    """
    success: bool
    image_url: Optional[str] = None
    error_message: Optional[str] = None
    source_provider: Optional[ImageSource] = None
    prompt: Optional[str] = None
    # orchestrator states visited, NOT_STARTED through DONE
    states: Tuple[OrchestratorState, ...] = ()

    def to_dict(self) -> dict:
        """Convert GenerationResult to dictionary for API responses."""
        if self.success:
            return {
                "success": True,
                "image_url": self.image_url,
                "provider": self.source_provider.value if self.source_provider else None,
                "prompt": self.prompt,
            }
        return {
            "success": False,
            "error": self.error_message,
        }


class ImageProvider(ABC):
    """
    Abstract interface for image sources in the fallback chain.

    Subclasses implement generate(); the orchestrator only ever calls
    attempt(), which never raises.
    """
    source: ImageSource
    state: OrchestratorState

    @abstractmethod
    async def generate(self, request: GenerationRequest, client: httpx.AsyncClient) -> str:
        """
        Produce an image URL for the request.

        Args:
            request: The validated generation request
            client: Shared HTTP client for this request

        Returns:
            image_url: Direct URL to the generated image

        Raises:
            ImageGenerationError: On any provider failure
        """
        pass

    async def attempt(self, request: GenerationRequest, client: httpx.AsyncClient) -> ProviderOutcome:
        """
        Run generate() and convert every failure into a ProviderOutcome.

        Args:
            request: The validated generation request
            client: Shared HTTP client for this request

        Returns:
            ProviderOutcome: Either an image URL or the error that stopped it
        """
        name = self.source.value
        try:
            image_url = await self.generate(request, client)
            if not image_url:
                raise ProtocolFailure(f"{name} returned an empty image URL", provider=name)
        except ImageGenerationError as e:
            if e.provider is None:
                e.provider = name
            logger.warning(f"[{name}] attempt failed: {e.message or type(e).__name__}")
            return ProviderOutcome(provider=self.source, error=e)
        except Exception as e:
            logger.error(f"[{name}] unexpected error: {str(e)}", exc_info=True)
            return ProviderOutcome(
                provider=self.source,
                error=ImageGenerationError(str(e), provider=name),
            )
        return ProviderOutcome(provider=self.source, image_url=image_url)
