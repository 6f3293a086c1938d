"""
Fallback orchestration for image generation.

Providers are tried strictly in order; the first one to return a URL
wins and nothing after it runs. If every provider fails, the caller gets
a failed GenerationResult carrying the last error.
"""
import logging
import random
from dataclasses import replace
from typing import List, Optional, Union

import httpx

from core.config import ProviderCredentials, load_credentials
from image.base import (
    DEFAULT_HEIGHT,
    DEFAULT_IMAGE_MODEL,
    DEFAULT_WIDTH,
    GenerationRequest,
    GenerationResult,
    ImageModel,
    ImageProvider,
    OrchestratorState,
    ProviderOutcome,
)
from image.factory import build_provider_chain
from image.http import new_client
from image.normalizer import failure, normalize
from image.polling import PollPolicy

logger = logging.getLogger(__name__)


class ImageOrchestrator:
    """
    Runs the provider chain for one request at a time.

    Holds no per-request state, so a single instance can serve
    concurrent requests.
    """

    def __init__(
        self,
        credentials: ProviderCredentials,
        client: Optional[httpx.AsyncClient] = None,
        poll_policy: Optional[PollPolicy] = None,
        rng: Optional[random.Random] = None,
    ):
        self.credentials = credentials
        self.client = client
        self.providers: List[ImageProvider] = build_provider_chain(
            credentials, poll_policy=poll_policy, rng=rng
        )

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """
        Try each provider in priority order.

        Args:
            request: The validated generation request

        Returns:
            GenerationResult: From the first provider that succeeds, or a
            failure carrying the last provider's error
        """
        if self.client is not None:
            return await self._run_chain(request, self.client)
        async with new_client() as client:
            return await self._run_chain(request, client)

    async def _run_chain(self, request: GenerationRequest, client: httpx.AsyncClient) -> GenerationResult:
        states: List[OrchestratorState] = [OrchestratorState.NOT_STARTED]
        last_outcome: Optional[ProviderOutcome] = None

        for provider in self.providers:
            self._transition(states, provider.state)
            last_outcome = await provider.attempt(request, client)
            if last_outcome.ok:
                self._transition(states, OrchestratorState.DONE)
                return replace(normalize(last_outcome, request), states=tuple(states))

        self._transition(states, OrchestratorState.DONE)
        logger.error(f"All {len(self.providers)} image provider(s) failed for prompt: {request.prompt[:50]}...")
        if last_outcome is None:
            result = failure(None, request)
        else:
            result = normalize(last_outcome, request)
        return replace(result, states=tuple(states))

    @staticmethod
    def _transition(states: List[OrchestratorState], new: OrchestratorState) -> None:
        logger.debug(f"Image orchestrator: {states[-1].value} -> {new.value}")
        states.append(new)


async def generate_image(
    prompt: str,
    preferred_model: Union[ImageModel, str] = DEFAULT_IMAGE_MODEL,
    *,
    credentials: Optional[ProviderCredentials] = None,
    client: Optional[httpx.AsyncClient] = None,
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
    poll_policy: Optional[PollPolicy] = None,
    rng: Optional[random.Random] = None,
) -> GenerationResult:
    """
    Generate an image for a slide.

    Credentials are read from the environment for this call when not
    passed in. Invalid input yields a failed result rather than raising.

    Args:
        prompt: Image description, must not be blank
        preferred_model: Model id used by the hosted provider
        credentials: Provider keys, defaults to the current environment
        client: Optional shared HTTP client
        width: Image width in pixels
        height: Image height in pixels
        poll_policy: Poll bounds for the direct-API provider
        rng: Seed source for the fallback provider

    Returns:
        GenerationResult: Success with an image URL, or failure with a message
    """
    try:
        request = GenerationRequest(
            prompt=prompt,
            width=width,
            height=height,
            preferred_model=preferred_model,
        )
    except ValueError as e:
        logger.warning(f"Rejected image request: {str(e)}")
        return failure(str(e))

    if credentials is None:
        credentials = load_credentials()

    orchestrator = ImageOrchestrator(credentials, client=client, poll_policy=poll_policy, rng=rng)
    return await orchestrator.generate(request)
