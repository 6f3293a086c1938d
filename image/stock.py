"""
Stock photo lookup for slide layouts.

Searches Unsplash when an access key is configured. Without one, asks
Pollinations for a photographic-style image at the size the layout needs.
"""
import logging
import random
from enum import Enum
from typing import Optional, Tuple

import httpx

from core.config import ProviderCredentials, load_credentials
from image.base import GenerationRequest, GenerationResult, ImageSource
from image.errors import ImageGenerationError, TransportFailure
from image.http import new_client, read_json, send
from image.normalizer import failure, normalize
from image.pollinations import PollinationsImageProvider

logger = logging.getLogger(__name__)

UNSPLASH_SEARCH_URL = "https://api.unsplash.com/search/photos"
UNSPLASH_TIMEOUT = 15.0
NO_RESULTS_MESSAGE = "No images found for this query"


class LayoutType(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    VERTICAL = "vertical"
    BACKGROUND = "background"


def layout_geometry(layout: Optional[LayoutType]) -> Tuple[str, int, int]:
    """Return (orientation, width, height) for a slide layout."""
    if layout in (LayoutType.LEFT, LayoutType.RIGHT):
        return "portrait", 768, 1024
    return "landscape", 1024, 768


def stock_prompt(query: str) -> str:
    return (
        f"professional high quality stock photograph of {query}, "
        "photorealistic, editorial photography"
    )


async def _search_unsplash(
    query: str, orientation: str, access_key: str, client: httpx.AsyncClient
) -> GenerationResult:
    try:
        response = await send(
            client,
            "GET",
            UNSPLASH_SEARCH_URL,
            provider=ImageSource.UNSPLASH.value,
            timeout=UNSPLASH_TIMEOUT,
            headers={"Authorization": f"Client-ID {access_key}"},
            params={"query": query, "page": 1, "per_page": 1, "orientation": orientation},
        )
    except TransportFailure as e:
        if e.status_code is not None:
            return failure(f"Unsplash API error: {e.status_code}", source=ImageSource.UNSPLASH)
        raise

    data = read_json(response, ImageSource.UNSPLASH.value)
    results = data.get("results")
    if not isinstance(results, list) or not results:
        return failure(NO_RESULTS_MESSAGE, source=ImageSource.UNSPLASH)

    first = results[0] if isinstance(results[0], dict) else {}
    urls = first.get("urls")
    image_url = urls.get("regular") if isinstance(urls, dict) else None
    if not image_url:
        return failure(NO_RESULTS_MESSAGE, source=ImageSource.UNSPLASH)

    logger.info(f"[Unsplash] Found image for query: {query[:50]}")
    return GenerationResult(success=True, image_url=image_url, source_provider=ImageSource.UNSPLASH)


async def _lookup(
    query: str,
    layout: Optional[LayoutType],
    credentials: ProviderCredentials,
    client: httpx.AsyncClient,
    rng: Optional[random.Random],
) -> GenerationResult:
    orientation, width, height = layout_geometry(layout)

    try:
        if credentials.stock_search_enabled:
            return await _search_unsplash(query, orientation, credentials.unsplash_access_key, client)

        logger.info("Using Pollinations as stock image fallback (no Unsplash key)")
        request = GenerationRequest(prompt=stock_prompt(query), width=width, height=height)
        outcome = await PollinationsImageProvider(rng=rng).attempt(request, client)
        return normalize(outcome, request)
    except ImageGenerationError as e:
        logger.error(f"Error getting stock image: {e.message}")
        return failure(e.message or "Failed to get image")


async def get_stock_image(
    query: str,
    layout: Optional[LayoutType] = None,
    *,
    credentials: Optional[ProviderCredentials] = None,
    client: Optional[httpx.AsyncClient] = None,
    rng: Optional[random.Random] = None,
) -> GenerationResult:
    """
    Find a stock-style image for a slide.

    Args:
        query: What the image should show
        layout: Slide layout, decides orientation and size
        credentials: Provider keys, defaults to the current environment
        client: Optional shared HTTP client
        rng: Seed source for the Pollinations fallback

    Returns:
        GenerationResult: The image URL, or a failure with a message
    """
    if not query or not query.strip():
        return failure("Query cannot be empty")

    if credentials is None:
        credentials = load_credentials()

    if client is not None:
        return await _lookup(query, layout, credentials, client, rng)
    async with new_client() as owned:
        return await _lookup(query, layout, credentials, owned, rng)
