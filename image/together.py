"""
Together AI image provider.

Together exposes an OpenAI-compatible images endpoint, so requests go
through the openai SDK pointed at Together's base URL. One synchronous
call, no retries.
"""
import logging
from typing import Optional

import httpx
import openai
from openai import AsyncOpenAI

from image.base import GenerationRequest, ImageModel, ImageProvider, ImageSource, OrchestratorState
from image.errors import ConfigurationAbsent, ProtocolFailure, TransportFailure

logger = logging.getLogger(__name__)

TOGETHER_BASE_URL = "https://api.together.xyz/v1"
TOGETHER_TIMEOUT = 60.0


def steps_for_model(model: ImageModel) -> int:
    """Schnell variants are distilled for few-step sampling."""
    return 4 if "schnell" in model.value else 28


class TogetherImageProvider(ImageProvider):
    """
    Hosted-model provider backed by Together AI.
    """
    source = ImageSource.TOGETHER
    state = OrchestratorState.TRYING_HOSTED

    def __init__(self, api_key: Optional[str], timeout: float = TOGETHER_TIMEOUT):
        if not api_key:
            raise ConfigurationAbsent("TOGETHER_AI_API_KEY is not set", provider=self.source.value)
        self.api_key = api_key
        self.timeout = timeout

    def _client(self, http_client: httpx.AsyncClient) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=self.api_key,
            base_url=TOGETHER_BASE_URL,
            http_client=http_client,
            max_retries=0,
        )

    async def generate(self, request: GenerationRequest, client: httpx.AsyncClient) -> str:
        model = request.preferred_model
        logger.info(f"[Together] Generating image with model {model.value}")

        try:
            response = await self._client(client).images.generate(
                model=model.value,
                prompt=request.prompt,
                n=1,
                extra_body={
                    "width": request.width,
                    "height": request.height,
                    "steps": steps_for_model(model),
                },
                timeout=self.timeout,
            )
        except openai.APITimeoutError as e:
            raise TransportFailure(
                f"together request timed out after {self.timeout:g}s", provider=self.source.value
            ) from e
        except openai.APIConnectionError as e:
            raise TransportFailure(f"together request failed: {e}", provider=self.source.value) from e
        except openai.APIStatusError as e:
            raise TransportFailure(
                f"together returned status {e.status_code}",
                provider=self.source.value,
                status_code=e.status_code,
            ) from e
        except openai.APIError as e:
            raise ProtocolFailure(f"together returned an invalid response: {e}", provider=self.source.value) from e

        if not response.data:
            raise ProtocolFailure("Together response missing 'data' array or empty", provider=self.source.value)
        image_url = response.data[0].url
        if not image_url:
            raise ProtocolFailure("Together response missing 'url' field in data[0]", provider=self.source.value)
        return image_url
