"""
Thin wrapper over httpx for provider calls.

Every request carries its own timeout. Transport problems and non-2xx
statuses come back as TransportFailure so adapters only deal with one
error family.
"""
import logging
from typing import Any, Dict

import httpx

from image.errors import ProtocolFailure, TransportFailure

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def new_client(timeout: float = DEFAULT_TIMEOUT) -> httpx.AsyncClient:
    """Create the client shared by all adapters for one request."""
    return httpx.AsyncClient(timeout=timeout)


async def send(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    provider: str,
    timeout: float = DEFAULT_TIMEOUT,
    **kwargs: Any,
) -> httpx.Response:
    """
    Issue a request and raise on transport failure or non-2xx status.

    Args:
        client: Shared async client
        method: HTTP method
        url: Target URL
        provider: Provider name, used in error messages
        timeout: Deadline for this call only
        **kwargs: Passed through to httpx (json, params, headers, ...)

    Returns:
        httpx.Response: A response with a 2xx status

    Raises:
        TransportFailure: On timeout, connection error, or non-2xx status
    """
    try:
        response = await client.request(method, url, timeout=timeout, **kwargs)
    except httpx.TimeoutException as e:
        raise TransportFailure(
            f"{provider} request timed out after {timeout:g}s", provider=provider
        ) from e
    except httpx.HTTPError as e:
        raise TransportFailure(f"{provider} request failed: {e}", provider=provider) from e

    if not response.is_success:
        raise TransportFailure(
            f"{provider} returned status {response.status_code}",
            provider=provider,
            status_code=response.status_code,
        )
    return response


def read_json(response: httpx.Response, provider: str) -> Dict[str, Any]:
    """Decode a JSON object body or raise ProtocolFailure."""
    try:
        data = response.json()
    except ValueError as e:
        raise ProtocolFailure(f"{provider} returned invalid JSON", provider=provider) from e
    if not isinstance(data, dict):
        raise ProtocolFailure(f"{provider} returned unexpected payload", provider=provider)
    return data
