import httpx
import pytest
import respx

from newsreader.config import Settings
from newsreader.exceptions import TransportError
from newsreader.services.remote import NewsApiSource

HEADLINES_URL = "https://newsapi.org/v2/top-headlines"
EVERYTHING_URL = "https://newsapi.org/v2/everything"

NEWSAPI_PAYLOAD = {
    "status": "ok",
    "totalResults": 45,
    "articles": [
        {
            "source": {"id": None, "name": "Example News"},
            "author": "Jane Doe",
            "title": "Bitcoin climbs again",
            "description": "Markets rally.",
            "url": "https://news.example/bitcoin-climbs",
            "urlToImage": "https://img.example/btc.jpg",
            "publishedAt": "2024-05-20T12:34:00Z",
            "content": "Body text [+1200 chars]",
        },
        {
            "source": {"id": "wire", "name": "Wire"},
            "title": None,
            "url": "https://wire.example/removed",
        },
    ],
}


@pytest.mark.asyncio
async def test_fetch_headlines_decodes_page() -> None:
    settings = Settings(news_api_key="secret", news_page_size=20)
    async with httpx.AsyncClient() as client:
        source = NewsApiSource(settings=settings, client=client)
        with respx.mock(assert_all_called=True) as mock:
            route = mock.get(HEADLINES_URL).respond(200, json=NEWSAPI_PAYLOAD)
            page = await source.fetch_headlines("us", 2)

    params = route.calls.last.request.url.params
    assert params["country"] == "us"
    assert params["page"] == "2"
    assert params["pageSize"] == "20"
    assert params["apiKey"] == "secret"

    assert page.total_results == 45
    assert [a.url for a in page.articles] == [
        "https://news.example/bitcoin-climbs",
        "https://wire.example/removed",
    ]
    first = page.articles[0]
    assert first.url_to_image == "https://img.example/btc.jpg"
    assert first.published_at == "2024-05-20T12:34:00Z"
    assert first.source.id == "Example News"
    assert first.source.name == "Example News"
    assert page.articles[1].title == ""


@pytest.mark.asyncio
async def test_fetch_search_sends_query() -> None:
    settings = Settings(news_api_key="secret")
    async with httpx.AsyncClient() as client:
        source = NewsApiSource(settings=settings, client=client)
        with respx.mock(assert_all_called=True) as mock:
            route = mock.get(EVERYTHING_URL).respond(
                200, json={"status": "ok", "totalResults": 0, "articles": []}
            )
            page = await source.fetch_search("bitcoin", 1)

    assert route.calls.last.request.url.params["q"] == "bitcoin"
    assert page.articles == []
    assert page.total_results == 0


@pytest.mark.asyncio
async def test_error_status_raises_transport_error() -> None:
    settings = Settings(news_api_key="bad")
    async with httpx.AsyncClient() as client:
        source = NewsApiSource(settings=settings, client=client)
        with respx.mock() as mock:
            mock.get(HEADLINES_URL).respond(
                401,
                json={
                    "status": "error",
                    "code": "apiKeyInvalid",
                    "message": "Your API key is invalid.",
                },
            )
            with pytest.raises(TransportError) as excinfo:
                await source.fetch_headlines("us", 1)

    assert "401" in str(excinfo.value)
    assert "Your API key is invalid." in str(excinfo.value)


@pytest.mark.asyncio
async def test_error_payload_with_ok_status_raises() -> None:
    async with httpx.AsyncClient() as client:
        source = NewsApiSource(settings=Settings(), client=client)
        with respx.mock() as mock:
            mock.get(EVERYTHING_URL).respond(
                200,
                json={"status": "error", "code": "rateLimited", "message": "Slow down"},
            )
            with pytest.raises(TransportError, match="rateLimited"):
                await source.fetch_search("news", 1)


@pytest.mark.asyncio
async def test_network_failure_raises_transport_error() -> None:
    async with httpx.AsyncClient() as client:
        source = NewsApiSource(settings=Settings(), client=client)
        with respx.mock() as mock:
            mock.get(HEADLINES_URL).mock(side_effect=httpx.ConnectError("refused"))
            with pytest.raises(TransportError, match="Unable to connect"):
                await source.fetch_headlines("us", 1)


@pytest.mark.asyncio
async def test_malformed_body_raises_transport_error() -> None:
    async with httpx.AsyncClient() as client:
        source = NewsApiSource(settings=Settings(), client=client)
        with respx.mock() as mock:
            mock.get(HEADLINES_URL).respond(200, text="<html>oops</html>")
            with pytest.raises(TransportError, match="Malformed response"):
                await source.fetch_headlines("us", 1)


@pytest.mark.asyncio
async def test_custom_base_url_is_used() -> None:
    settings = Settings(news_api_base_url="https://proxy.example/")
    async with httpx.AsyncClient() as client:
        source = NewsApiSource(settings=settings, client=client)
        with respx.mock(assert_all_called=True) as mock:
            mock.get("https://proxy.example/v2/top-headlines").respond(
                200, json={"status": "ok", "totalResults": 0, "articles": []}
            )
            page = await source.fetch_headlines("gb", 1)

    assert page.total_results == 0
