from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import ORJSONResponse
from mangum import Mangum

from newsreader.config import get_settings
from newsreader.exceptions import StoreError
from newsreader.http_client import get_http_client, shutdown_http_client
from newsreader.models import Article, Error, Loading, NewsPage, ResultState, Success
from newsreader.services import NewsApiSource, NewsCoordinator, QueryKind
from newsreader.storage import FavouritesStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    store = FavouritesStore(settings.favourites_database_url)
    await store.connect()
    source = NewsApiSource(settings=settings, client=await get_http_client())
    app.state.coordinator = NewsCoordinator(
        source, store, settings=settings, loop=asyncio.get_running_loop()
    )
    logger.info("News reader API started")
    try:
        yield
    finally:
        await app.state.coordinator.close()
        await store.disconnect()
        await shutdown_http_client()


app = FastAPI(
    title="News Reader API",
    version="0.1.0",
    description=(
        "Paginated headlines and search over NewsAPI with a persistent favourites list."
    ),
    default_response_class=ORJSONResponse,
    lifespan=lifespan,
)


def get_coordinator(request: Request) -> NewsCoordinator:
    return request.app.state.coordinator


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError) -> ORJSONResponse:
    return ORJSONResponse(status_code=503, content={"detail": str(exc)})


def serialize_state(state: ResultState[NewsPage]) -> dict[str, Any]:
    match state:
        case Loading():
            return {"status": "loading"}
        case Success(payload=page):
            return {"status": "success", "data": page.model_dump(by_alias=True)}
        case Error(message=message, payload=page):
            data = page.model_dump(by_alias=True) if page is not None else None
            return {"status": "error", "message": message, "data": data}


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/headlines", tags=["news"])
async def headlines(coordinator: NewsCoordinator = Depends(get_coordinator)):
    return serialize_state(coordinator.headlines.value)


@app.post("/headlines/load", tags=["news"])
async def load_headlines(coordinator: NewsCoordinator = Depends(get_coordinator)):
    await coordinator.load_headlines()
    return serialize_state(coordinator.headlines.value)


@app.post("/headlines/more", tags=["news"])
async def more_headlines(coordinator: NewsCoordinator = Depends(get_coordinator)):
    await coordinator.load_more(QueryKind.HEADLINES)
    return serialize_state(coordinator.headlines.value)


@app.get("/search", tags=["news"])
async def search_state(coordinator: NewsCoordinator = Depends(get_coordinator)):
    return serialize_state(coordinator.search_news.value)


@app.post("/search", tags=["news"])
async def search(
    q: str = Query(..., min_length=1, description="Search term"),
    coordinator: NewsCoordinator = Depends(get_coordinator),
):
    await coordinator.search(q)
    return serialize_state(coordinator.search_news.value)


@app.post("/search/more", tags=["news"])
async def more_search(coordinator: NewsCoordinator = Depends(get_coordinator)):
    await coordinator.load_more(QueryKind.SEARCH)
    return serialize_state(coordinator.search_news.value)


@app.get("/favourites", tags=["favourites"])
async def favourites(coordinator: NewsCoordinator = Depends(get_coordinator)):
    return [
        article.model_dump(by_alias=True)
        for article in coordinator.observe_favourites().value
    ]


@app.post("/favourites", tags=["favourites"], status_code=201)
async def add_favourite(
    article: Article, coordinator: NewsCoordinator = Depends(get_coordinator)
):
    await coordinator.add_favourite(article)
    return article.model_dump(by_alias=True)


@app.delete("/favourites", tags=["favourites"], status_code=204)
async def remove_favourite(
    url: str = Query(..., min_length=1, description="URL of the saved article"),
    coordinator: NewsCoordinator = Depends(get_coordinator),
) -> None:
    await coordinator.remove_favourite(Article(url=url))


handler = Mangum(app)
