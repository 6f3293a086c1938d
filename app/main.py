"""
FastAPI application for the deck image service.

Serves generated and stock images for presentation slides. Every request
reads provider credentials fresh and gets its own HTTP client.
"""
import logging
from typing import AsyncIterator, Optional

import httpx
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from core.config import ProviderCredentials, cors_origins, load_credentials, log_level
from image.base import DEFAULT_HEIGHT, DEFAULT_IMAGE_MODEL, DEFAULT_WIDTH, ImageModel
from image.http import new_client
from image.orchestrator import generate_image
from image.stock import LayoutType, get_stock_image

# Configure logging
logging.basicConfig(level=log_level())
logger = logging.getLogger(__name__)

app = FastAPI(title="Deck Image Service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with new_client() as client:
        yield client


class ImageGenerateRequest(BaseModel):
    """Request model for slide image generation."""
    prompt: str
    model: ImageModel = DEFAULT_IMAGE_MODEL
    width: int = Field(DEFAULT_WIDTH, gt=0)
    height: int = Field(DEFAULT_HEIGHT, gt=0)


@app.post("/image/generate")
async def generate_image_endpoint(
    req: ImageGenerateRequest,
    credentials: ProviderCredentials = Depends(load_credentials),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Generate an image through the provider fallback chain.

    Response format:
    {
        "success": true,
        "image_url": string,
        "provider": "together" | "bfl" | "pollinations",
        "prompt": string
    }

    Or:
    {
        "success": false,
        "error": string
    }
    """
    if not req.prompt.strip():
        return {"success": False, "error": "Prompt cannot be empty"}

    result = await generate_image(
        req.prompt,
        req.model,
        credentials=credentials,
        client=client,
        width=req.width,
        height=req.height,
    )
    if not result.success:
        logger.error(f"IMAGE GENERATION ERROR: {result.error_message}")
    return result.to_dict()


@app.get("/image/stock")
async def stock_image_endpoint(
    query: str,
    layout: Optional[LayoutType] = None,
    credentials: ProviderCredentials = Depends(load_credentials),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Find a stock photo sized for the slide layout.

    Returns the same shape as POST /image/generate, with provider
    "unsplash" or "pollinations".
    """
    if not query.strip():
        return {"success": False, "error": "Query cannot be empty"}

    result = await get_stock_image(query, layout, credentials=credentials, client=client)
    return result.to_dict()
