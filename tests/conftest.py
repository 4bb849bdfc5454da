from __future__ import annotations

import asyncio

import pytest
import pytest_asyncio

from newsreader.config import Settings
from newsreader.exceptions import TransportError
from newsreader.models import Article, ArticleSource, NewsPage
from newsreader.storage import FavouritesStore


def make_article(n: int, **overrides) -> Article:
    fields = {
        "url": f"https://news.example/articles/{n}",
        "title": f"Story number {n}",
        "description": f"Teaser for story {n}",
        "url_to_image": f"https://img.example/{n}.jpg",
        "published_at": "2024-05-20T12:34:00Z",
        "source": ArticleSource(id="example", name="Example News"),
    }
    fields.update(overrides)
    return Article(**fields)


def make_page(start: int, count: int, total: int) -> NewsPage:
    return NewsPage(
        articles=[make_article(n) for n in range(start, start + count)],
        total_results=total,
    )


class FakeSource:
    """Scripted stand-in for the remote news source.

    ``responses`` maps a query string to a list of pages or exceptions handed
    out one per call. Setting ``gate`` holds every fetch until it is set;
    ``gates`` holds only the fetches for one query string.
    """

    def __init__(self, responses: dict[str, list[NewsPage | Exception]] | None = None):
        self.responses = responses or {}
        self.calls: list[tuple[str, str, int]] = []
        self.gate: asyncio.Event | None = None
        self.gates: dict[str, asyncio.Event] = {}

    async def fetch_headlines(self, country: str, page: int) -> NewsPage:
        return await self._next("headlines", country, page)

    async def fetch_search(self, query: str, page: int) -> NewsPage:
        return await self._next("search", query, page)

    async def _next(self, kind: str, params: str, page: int) -> NewsPage:
        self.calls.append((kind, params, page))
        gate = self.gates.get(params, self.gate)
        if gate is not None:
            await gate.wait()
        queue = self.responses.get(params)
        if not queue:
            raise TransportError(f"No scripted response for {params!r}")
        result = queue.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def settings() -> Settings:
    return Settings(
        news_api_key="test-key",
        news_page_size=20,
        search_delay_ms=500,
        news_country="us",
    )


@pytest_asyncio.fixture
async def store(tmp_path):
    favourites = FavouritesStore(f"sqlite+aiosqlite:///{tmp_path / 'favourites.db'}")
    await favourites.connect()
    yield favourites
    await favourites.disconnect()
