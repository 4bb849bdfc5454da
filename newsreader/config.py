from functools import lru_cache
from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="", extra="ignore", populate_by_name=True
    )

    http_timeout: float = Field(10.0, gt=0, alias="HTTP_TIMEOUT")
    http_max_connections: int = Field(20, ge=1, alias="HTTP_MAX_CONNECTIONS")
    http_max_keepalive: int = Field(10, ge=1, alias="HTTP_MAX_KEEPALIVE")
    http_user_agent: str = Field(
        "NewsReader/0.1 (+https://example.com; contact=admin@example.com)",
        alias="HTTP_USER_AGENT",
    )

    news_api_base_url: HttpUrl = Field(
        "https://newsapi.org", alias="NEWS_API_BASE_URL"
    )
    news_api_key: str = Field("", alias="NEWS_API_KEY")
    news_country: str = Field("us", min_length=2, alias="NEWS_COUNTRY")
    news_page_size: int = Field(20, ge=1, le=100, alias="NEWS_PAGE_SIZE")
    search_delay_ms: int = Field(500, ge=0, alias="SEARCH_DELAY_MS")

    favourites_database_url: str = Field(
        "sqlite+aiosqlite:///favourites.db", alias="FAVOURITES_DATABASE_URL"
    )
    log_level: str = Field("INFO", alias="LOG_LEVEL")


@lru_cache
def get_settings() -> Settings:
    return Settings()
