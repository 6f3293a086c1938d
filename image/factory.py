"""
Image provider factory.

Builds the ordered fallback chain from the credentials available for the
current request. Adding a provider means adding it here, not in the
orchestrator.
"""
import logging
import random
from typing import List, Optional

from core.config import ProviderCredentials
from image.base import ImageProvider
from image.bfl import BFLImageProvider
from image.polling import PollPolicy
from image.pollinations import PollinationsImageProvider
from image.together import TogetherImageProvider

logger = logging.getLogger(__name__)


def build_provider_chain(
    credentials: ProviderCredentials,
    poll_policy: Optional[PollPolicy] = None,
    rng: Optional[random.Random] = None,
) -> List[ImageProvider]:
    """
    Get image providers in priority order.

    Together AI first if configured, then BFL if configured, then
    Pollinations unconditionally.

    Args:
        credentials: Provider keys for this request
        poll_policy: Poll bounds handed to the BFL provider
        rng: Seed source for the Pollinations provider

    Returns:
        List[ImageProvider]: The chain, always ending with Pollinations
    """
    chain: List[ImageProvider] = []

    if credentials.hosted_enabled:
        chain.append(TogetherImageProvider(credentials.together_api_key))
    else:
        logger.debug("TOGETHER_AI_API_KEY not set - skipping Together AI")

    if credentials.direct_api_enabled:
        chain.append(BFLImageProvider(credentials.flux_api_key, poll_policy=poll_policy))
    else:
        logger.debug("FLUX_API_KEY not set - skipping BFL")

    chain.append(PollinationsImageProvider(rng=rng))
    return chain
