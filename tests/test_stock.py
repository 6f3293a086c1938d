import httpx
import pytest

from conftest import POLLINATIONS_HOST, UNSPLASH_HOST, pollinations_ok
from image.base import ImageSource
from image.stock import LayoutType, get_stock_image, layout_geometry


def unsplash_results(*urls):
    def handler(request):
        return httpx.Response(
            200,
            json={
                "total": len(urls),
                "total_pages": 1,
                "results": [{"id": str(i), "urls": {"regular": url}} for i, url in enumerate(urls)],
            },
        )
    return handler


@pytest.mark.parametrize(
    "layout,expected",
    [
        (None, ("landscape", 1024, 768)),
        (LayoutType.VERTICAL, ("landscape", 1024, 768)),
        (LayoutType.LEFT, ("portrait", 768, 1024)),
        (LayoutType.RIGHT, ("portrait", 768, 1024)),
    ],
)
def test_layout_geometry(layout, expected):
    assert layout_geometry(layout) == expected


async def test_unsplash_search_returns_regular_url(fake, client, all_keys):
    fake.on(UNSPLASH_HOST, unsplash_results("https://images.unsplash.test/fox-regular.jpg"))

    result = await get_stock_image("red fox", LayoutType.LEFT, credentials=all_keys, client=client)

    assert result.success
    assert result.image_url == "https://images.unsplash.test/fox-regular.jpg"
    assert result.source_provider == ImageSource.UNSPLASH
    request = fake.calls(UNSPLASH_HOST)[0]
    assert request.headers["Authorization"] == "Client-ID unsplash-key"
    assert request.url.params["query"] == "red fox"
    assert request.url.params["per_page"] == "1"
    assert request.url.params["orientation"] == "portrait"


async def test_unsplash_without_results_fails(fake, client, all_keys):
    fake.on(UNSPLASH_HOST, unsplash_results())

    result = await get_stock_image("nothing at all", credentials=all_keys, client=client)

    assert result.success is False
    assert result.error_message == "No images found for this query"
    assert fake.calls(POLLINATIONS_HOST) == []


async def test_unsplash_error_status_fails(fake, client, all_keys):
    fake.on(UNSPLASH_HOST, lambda r: httpx.Response(403, text="Rate Limit Exceeded"))

    result = await get_stock_image("red fox", credentials=all_keys, client=client)

    assert result.success is False
    assert result.error_message == "Unsplash API error: 403"


async def test_unsplash_timeout_fails(fake, client, all_keys):
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)
    fake.on(UNSPLASH_HOST, handler)

    result = await get_stock_image("red fox", credentials=all_keys, client=client)

    assert result.success is False
    assert "timed out" in result.error_message


async def test_falls_back_to_pollinations_without_key(fake, client, no_keys):
    fake.on(POLLINATIONS_HOST, pollinations_ok)

    result = await get_stock_image("red fox", LayoutType.RIGHT, credentials=no_keys, client=client)

    assert result.success
    assert result.source_provider == ImageSource.POLLINATIONS
    request = fake.calls(POLLINATIONS_HOST)[0]
    assert "stock%20photograph%20of%20red%20fox" in str(request.url)
    assert request.url.params["width"] == "768"
    assert request.url.params["height"] == "1024"


async def test_pollinations_fallback_failure_is_reported(fake, client, no_keys):
    fake.on(POLLINATIONS_HOST, lambda r: httpx.Response(502))

    result = await get_stock_image("red fox", credentials=no_keys, client=client)

    assert result.success is False
    assert result.error_message == "pollinations returned status 502"


async def test_blank_query_is_rejected(fake, client):
    result = await get_stock_image("  ", client=client)

    assert result.success is False
    assert fake.requests == []
