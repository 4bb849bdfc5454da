from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from ..config import Settings, get_settings
from ..exceptions import TransportError
from ..http_client import get_http_client
from ..models.news import NewsPage

logger = logging.getLogger(__name__)


class RemoteNewsSource(Protocol):
    async def fetch_headlines(self, country: str, page: int) -> NewsPage: ...

    async def fetch_search(self, query: str, page: int) -> NewsPage: ...


@dataclass(slots=True)
class NewsApiSource:
    """Paged queries against the NewsAPI article index.

    Every failure is raised as ``TransportError``; nothing is retried here.
    """

    settings: Settings | None = None
    client: httpx.AsyncClient | None = None

    def __post_init__(self) -> None:
        if self.settings is None:
            self.settings = get_settings()

    @property
    def base_url(self) -> str:
        return str(self.settings.news_api_base_url).rstrip("/")

    async def fetch_headlines(self, country: str, page: int) -> NewsPage:
        return await self._fetch("/v2/top-headlines", {"country": country}, page)

    async def fetch_search(self, query: str, page: int) -> NewsPage:
        return await self._fetch("/v2/everything", {"q": query}, page)

    async def _fetch(self, path: str, params: dict[str, Any], page: int) -> NewsPage:
        client = self.client or await get_http_client()
        query = {
            **params,
            "page": page,
            "pageSize": self.settings.news_page_size,
            "apiKey": self.settings.news_api_key,
        }
        try:
            response = await client.get(f"{self.base_url}{path}", params=query)
        except httpx.TimeoutException as exc:
            raise TransportError(f"Request timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Unable to connect: {exc}") from exc

        payload = _decode(response)
        if response.is_error or payload.get("status") == "error":
            raise TransportError(_error_message(response, payload))

        try:
            result = NewsPage.model_validate(payload)
        except ValidationError as exc:
            raise TransportError(f"Malformed response: {exc}") from exc
        logger.debug(
            f"Fetched {path} page {page}: {len(result.articles)} articles "
            f"of {result.total_results}"
        )
        return result


def _decode(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError as exc:
        if response.is_error:
            return {}
        raise TransportError(f"Malformed response: {exc}") from exc
    if not isinstance(payload, dict):
        raise TransportError("Malformed response: expected a JSON object")
    return payload


def _error_message(response: httpx.Response, payload: dict[str, Any]) -> str:
    code = payload.get("code") or response.reason_phrase
    message = payload.get("message")
    if message:
        return f"News API error {response.status_code} ({code}): {message}"
    return f"News API error {response.status_code}: {code}"
