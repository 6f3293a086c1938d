from typing import Callable, Dict, List

import httpx
import pytest

from core.config import ProviderCredentials

TOGETHER_HOST = "api.together.xyz"
BFL_HOST = "api.bfl.ml"
POLLINATIONS_HOST = "image.pollinations.ai"
UNSPLASH_HOST = "api.unsplash.com"

Handler = Callable[[httpx.Request], httpx.Response]


class FakeProviders:
    """
    Routes outbound requests to a handler per host and records every call.
    Hosts without a handler answer 500.
    """

    def __init__(self):
        self.handlers: Dict[str, Handler] = {}
        self.requests: List[httpx.Request] = []

    def on(self, host: str, handler: Handler) -> "FakeProviders":
        self.handlers[host] = handler
        return self

    def calls(self, host: str, path: str = "") -> List[httpx.Request]:
        return [r for r in self.requests if r.url.host == host and r.url.path.startswith(path)]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.handlers.get(request.url.host)
        if handler is None:
            return httpx.Response(500, json={"error": "unexpected host"})
        return handler(request)


def together_ok(url: str = "https://cdn.together.test/fox.png") -> Handler:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"id": "img-1", "created": 0, "object": "list", "data": [{"url": url}]},
        )
    return handler


def pollinations_ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, content=b"\x89PNG")


def submitted() -> httpx.Response:
    return httpx.Response(200, json={"id": "task-1"})


def bfl_handler(
    poll_responses: List[Callable[[], httpx.Response]],
    submit: Callable[[], httpx.Response] = submitted,
) -> Handler:
    """Answer submit, then build poll responses in order, repeating the last."""
    polls = list(poll_responses)

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            return submit()
        if len(polls) > 1:
            return polls.pop(0)()
        return polls[0]()
    return handler


def pending() -> httpx.Response:
    return httpx.Response(200, json={"id": "task-1", "status": "Pending"})


BFL_SAMPLE_URL = "https://delivery.bfl.test/fox.jpeg"


def ready() -> httpx.Response:
    return httpx.Response(200, json={"id": "task-1", "status": "Ready", "result": {"sample": BFL_SAMPLE_URL}})


def unavailable() -> httpx.Response:
    return httpx.Response(503, text="busy")


def errored() -> httpx.Response:
    return httpx.Response(200, json={"id": "task-1", "status": "Error"})


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("TOGETHER_AI_API_KEY", "FLUX_API_KEY", "UNSPLASH_ACCESS_KEY"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake() -> FakeProviders:
    return FakeProviders()


@pytest.fixture
async def client(fake):
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake)) as http_client:
        yield http_client


@pytest.fixture
def no_keys() -> ProviderCredentials:
    return ProviderCredentials()


@pytest.fixture
def all_keys() -> ProviderCredentials:
    return ProviderCredentials(
        together_api_key="together-key",
        flux_api_key="flux-key",
        unsplash_access_key="unsplash-key",
    )
