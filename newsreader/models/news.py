from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from dateutil import parser as date_parser
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ArticleSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Publisher identifier, defaults to the name")
    name: str = Field(description="Publisher display name")

    @model_validator(mode="before")
    @classmethod
    def _synthesize_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("id"):
            data = {**data, "id": data.get("name") or ""}
        return data


class Article(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(description="Canonical article URL, the article identity")
    title: str = Field(default="", description="Article headline")
    description: str | None = Field(default=None, description="Short teaser or dek")
    url_to_image: str | None = Field(
        default=None, alias="urlToImage", description="Remote lead image reference"
    )
    published_at: str | None = Field(
        default=None,
        alias="publishedAt",
        description="Publication timestamp exactly as reported upstream",
    )
    source: ArticleSource = Field(
        default_factory=lambda: ArticleSource(id="", name=""),
        description="Publisher of the article",
    )
    author: str | None = Field(default=None)
    content: str | None = Field(default=None, description="Truncated article body")

    @field_validator("title", mode="before")
    @classmethod
    def _null_title(cls, value: Any) -> Any:
        return "" if value is None else value

    def same_entity(self, other: Article) -> bool:
        return same_entity(self, other)

    @property
    def published_datetime(self) -> datetime | None:
        return _parse_datetime(self.published_at)


class NewsPage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    articles: list[Article] = Field(default_factory=list)
    total_results: int = Field(
        default=0,
        alias="totalResults",
        description="Remote-reported number of matching articles",
    )


def same_entity(first: Article, second: Article) -> bool:
    """Two articles are the same entity when their URLs match."""
    return first.url == second.url


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = date_parser.parse(value)
    except (ValueError, TypeError, OverflowError):
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
