from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

from ..config import Settings, get_settings
from ..exceptions import TransportError
from ..models.news import Article, NewsPage
from ..models.result import Error, Loading, ResultState, Success
from ..observable import Observable
from ..storage.favourites import FavouritesStore
from .debounce import SearchDebouncer
from .pagination import PageFetch, PaginationController, QueryKind, ScrollWindow
from .remote import RemoteNewsSource

logger = logging.getLogger(__name__)


class NewsCoordinator:
    """
    Owns one result stream per query kind plus the favourites stream.

    Every fetch that is not blocked emits ``Loading`` before touching the
    network and then exactly one ``Success`` or ``Error``. Successful pages
    extend the accumulated list, except the first page after a reset, which
    replaces it.

    Usage:
        coordinator = NewsCoordinator(NewsApiSource(client=client), store)
        coordinator.headlines.subscribe(render)
        await coordinator.load_headlines()
        ...
        await coordinator.close()
    """

    def __init__(
        self,
        source: RemoteNewsSource,
        favourites: FavouritesStore,
        settings: Settings | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.pagination = PaginationController(
            source=source, page_size=self.settings.news_page_size
        )
        self.favourites = favourites
        self.headlines: Observable[ResultState[NewsPage]] = Observable(
            Success(NewsPage())
        )
        self.search_news: Observable[ResultState[NewsPage]] = Observable(
            Success(NewsPage())
        )
        if loop is not None:
            self.headlines.bind(loop)
            self.search_news.bind(loop)
        self.search_term: str | None = None
        self._accumulated: dict[QueryKind, NewsPage | None] = {
            QueryKind.HEADLINES: None,
            QueryKind.SEARCH: None,
        }
        self._debouncer = SearchDebouncer(
            self._commit_search, delay_ms=self.settings.search_delay_ms
        )
        self._tasks: set[asyncio.Task[Any]] = set()
        self._closed = False

    def stream(self, kind: QueryKind) -> Observable[ResultState[NewsPage]]:
        if kind is QueryKind.HEADLINES:
            return self.headlines
        return self.search_news

    # Remote lists

    async def load_headlines(self) -> None:
        await self._request(QueryKind.HEADLINES, self.settings.news_country)

    async def search(self, term: str) -> None:
        """Fetch the next page for ``term``, starting over when the term changed."""
        if term != self.search_term:
            self.search_term = term
            self.pagination.reset(QueryKind.SEARCH)
            self._accumulated[QueryKind.SEARCH] = None
        await self._request(QueryKind.SEARCH, term)

    async def load_more(self, kind: QueryKind) -> None:
        if kind is QueryKind.HEADLINES:
            await self.load_headlines()
        elif self.search_term:
            await self.search(self.search_term)

    async def retry(self, kind: QueryKind) -> None:
        """Re-issue the request that last failed; the cursor is still on that page."""
        await self.load_more(kind)

    async def _request(self, kind: QueryKind, params: str) -> None:
        if self._closed or not self.pagination.can_request(kind):
            return

        stream = self.stream(kind)
        stream.emit(Loading())
        try:
            fetch = await self.pagination.request_page(kind, params)
        except TransportError as exc:
            logger.warning(f"{kind.value} fetch failed: {exc}")
            stream.emit(Error(str(exc), self._accumulated[kind]))
            return

        if fetch is None:
            # Superseded by a reset while in flight; the newer request reports.
            return
        stream.emit(Success(self._merge(kind, fetch)))

    def _merge(self, kind: QueryKind, fetch: PageFetch) -> NewsPage:
        previous = self._accumulated[kind]
        if fetch.replaces or previous is None:
            articles = list(fetch.page.articles)
        else:
            articles = [*previous.articles, *fetch.page.articles]
        merged = NewsPage(articles=articles, total_results=fetch.page.total_results)
        self._accumulated[kind] = merged
        return merged

    # Presentation events

    def on_search_text_changed(self, text: str) -> None:
        self._debouncer.on_text_changed(text)

    def _commit_search(self, text: str) -> None:
        self._spawn(self.search(text))

    def on_scroll_started(self, kind: QueryKind) -> None:
        self.pagination.scroll_started(kind)

    def on_scrolled(self, kind: QueryKind, window: ScrollWindow) -> bool:
        """Trigger the next page when the reader scrolled to the end of the list."""
        if not self.pagination.should_paginate(kind, window):
            return False
        self.pagination.consume_scroll(kind)
        self._spawn(self.load_more(kind))
        return True

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait_idle(self) -> None:
        """Wait for fetches started from presentation events."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # Favourites

    async def add_favourite(self, article: Article) -> None:
        await self.favourites.upsert(article)

    async def remove_favourite(self, article: Article) -> None:
        await self.favourites.delete(article)

    def observe_favourites(self) -> Observable[list[Article]]:
        return self.favourites.observe()

    async def close(self) -> None:
        self._closed = True
        self._debouncer.close()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("News coordinator closed")
