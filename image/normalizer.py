"""
Maps adapter outcomes onto the single caller-facing GenerationResult.
"""
from typing import Optional

from image.base import GenerationRequest, GenerationResult, ImageSource, ProviderOutcome

GENERIC_ERROR_MESSAGE = "Failed to generate image"


def failure(
    message: Optional[str],
    request: Optional[GenerationRequest] = None,
    source: Optional[ImageSource] = None,
) -> GenerationResult:
    """Build a failed result, falling back to a generic message."""
    if not message or not message.strip():
        message = GENERIC_ERROR_MESSAGE
    return GenerationResult(
        success=False,
        error_message=message,
        source_provider=source,
        prompt=request.prompt if request else None,
    )


def normalize(outcome: ProviderOutcome, request: GenerationRequest) -> GenerationResult:
    if outcome.ok:
        return GenerationResult(
            success=True,
            image_url=outcome.image_url,
            source_provider=outcome.provider,
            prompt=request.prompt,
        )
    message = outcome.error.message if outcome.error else None
    return failure(message, request, outcome.provider)
