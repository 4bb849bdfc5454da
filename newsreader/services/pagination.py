from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

from ..exceptions import TransportError
from ..models.news import NewsPage
from .remote import RemoteNewsSource

logger = logging.getLogger(__name__)


class QueryKind(enum.Enum):
    HEADLINES = "headlines"
    SEARCH = "search"


@dataclass(slots=True)
class PaginationState:
    current_page: int = 1
    last_known_total_results: int = -1
    is_last_page: bool = False
    in_flight: bool = False
    error_active: bool = False
    is_scrolling: bool = False


@dataclass(slots=True, frozen=True)
class PageFetch:
    page: NewsPage
    # First page after a reset: replaces the accumulated list instead of extending it.
    replaces: bool


@dataclass(slots=True, frozen=True)
class ScrollWindow:
    first_visible: int
    visible_count: int
    total_count: int


@dataclass(slots=True)
class PaginationController:
    """
    Cursor state machine for each query kind.

    ``params`` for ``request_page`` is the country code for headlines and the
    search term for search.
    """

    source: RemoteNewsSource
    page_size: int = 20
    _states: dict[QueryKind, PaginationState] = field(default_factory=dict)

    def state(self, kind: QueryKind) -> PaginationState:
        if kind not in self._states:
            self._states[kind] = PaginationState()
        return self._states[kind]

    def reset(self, kind: QueryKind) -> None:
        self._states[kind] = PaginationState()
        logger.debug(f"Pagination reset for {kind.value}")

    def can_request(self, kind: QueryKind) -> bool:
        state = self.state(kind)
        return not state.is_last_page and not state.in_flight

    async def request_page(self, kind: QueryKind, params: str) -> PageFetch | None:
        state = self.state(kind)
        if state.is_last_page:
            logger.debug(f"{kind.value}: last page reached, not fetching")
            return None
        if state.in_flight:
            logger.debug(f"{kind.value}: fetch already in flight, ignoring request")
            return None

        page_number = state.current_page
        state.in_flight = True
        try:
            page = await self._fetch(kind, params, page_number)
        except TransportError as exc:
            if self.state(kind) is not state:
                logger.debug(
                    f"{kind.value}: dropping failed page {page_number} after reset: {exc}"
                )
                return None
            state.error_active = True
            raise
        finally:
            state.in_flight = False

        if self.state(kind) is not state:
            # reset() ran while this fetch was outstanding; the result belongs
            # to a discarded cursor.
            logger.debug(f"{kind.value}: dropping page {page_number} after reset")
            return None

        state.error_active = False
        state.last_known_total_results = page.total_results
        state.current_page += 1
        state.is_last_page = (
            state.current_page == page.total_results // self.page_size + 2
        )
        logger.info(
            f"{kind.value}: fetched page {page_number} "
            f"({len(page.articles)} articles, total {page.total_results}, "
            f"last page: {state.is_last_page})"
        )
        return PageFetch(page=page, replaces=page_number == 1)

    async def _fetch(self, kind: QueryKind, params: str, page: int) -> NewsPage:
        if kind is QueryKind.HEADLINES:
            return await self.source.fetch_headlines(params, page)
        return await self.source.fetch_search(params, page)

    def scroll_started(self, kind: QueryKind) -> None:
        self.state(kind).is_scrolling = True

    def should_paginate(self, kind: QueryKind, window: ScrollWindow) -> bool:
        state = self.state(kind)
        is_at_last_item = window.first_visible + window.visible_count >= window.total_count
        return (
            not state.error_active
            and not state.in_flight
            and not state.is_last_page
            and is_at_last_item
            and window.first_visible >= 0
            and window.total_count >= self.page_size
            and state.is_scrolling
        )

    def consume_scroll(self, kind: QueryKind) -> None:
        self.state(kind).is_scrolling = False
