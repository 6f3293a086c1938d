"""
Pollinations image provider.

Free and key-free, so it always sits last in the fallback chain. The
image URL is built locally; one GET follows the redirect chain and the
final resolved URL is what callers get back.
"""
import logging
import random
from typing import Optional
from urllib.parse import quote, urlencode

import httpx

from image.base import GenerationRequest, ImageProvider, ImageSource, OrchestratorState
from image.http import send

logger = logging.getLogger(__name__)

POLLINATIONS_BASE_URL = "https://image.pollinations.ai/prompt/"
POLLINATIONS_TIMEOUT = 30.0
MAX_SEED = 999_999

# same set encodeURIComponent leaves alone
_PROMPT_SAFE_CHARS = "-_.!~*'()"


def build_pollinations_url(prompt: str, width: int, height: int, seed: int) -> str:
    query = urlencode({"width": width, "height": height, "seed": seed, "nologo": "true"})
    return f"{POLLINATIONS_BASE_URL}{quote(prompt, safe=_PROMPT_SAFE_CHARS)}?{query}"


class PollinationsImageProvider(ImageProvider):
    """
    Last-resort generator. Needs no configuration.
    """
    source = ImageSource.POLLINATIONS
    state = OrchestratorState.TRYING_FALLBACK

    def __init__(self, rng: Optional[random.Random] = None, timeout: float = POLLINATIONS_TIMEOUT):
        self.rng = rng or random.Random()
        self.timeout = timeout

    def next_seed(self) -> int:
        return self.rng.randint(0, MAX_SEED)

    async def generate(self, request: GenerationRequest, client: httpx.AsyncClient) -> str:
        seed = self.next_seed()
        url = build_pollinations_url(request.prompt, request.width, request.height, seed)
        logger.info(f"[Pollinations] Requesting image with seed {seed}")

        response = await send(
            client,
            "GET",
            url,
            provider=self.source.value,
            timeout=self.timeout,
            follow_redirects=True,
        )
        return str(response.url) or url
