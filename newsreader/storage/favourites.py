"""
Persistent favourites store.

Uses SQLAlchemy async over SQLite. Every successful write re-reads the table
and publishes the full list, so ``observe()`` subscribers stay current
without polling.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..exceptions import StoreError
from ..models.news import Article
from ..observable import Observable
from .models import Base, FavouriteArticle

logger = logging.getLogger(__name__)


class FavouritesStore:
    """
    Saved articles keyed by URL.

    Usage:
        store = FavouritesStore("sqlite+aiosqlite:///favourites.db")
        await store.connect()

        await store.upsert(article)
        store.observe().subscribe(render)

        await store.disconnect()
    """

    def __init__(self, database_url: str, echo: bool = False) -> None:
        self.database_url = database_url
        self.echo = echo
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._favourites: Observable[list[Article]] = Observable([])

    async def connect(self) -> None:
        """Open the engine, create the table and publish the stored rows."""
        if self._engine is not None:
            return

        try:
            self._engine = create_async_engine(self.database_url, echo=self.echo)
            self._session_factory = async_sessionmaker(
                self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            self._engine = None
            self._session_factory = None
            raise StoreError(f"Failed to open favourites store: {e}") from e

        logger.info(f"Favourites store connected at {self.database_url}")
        await self._publish()

    async def disconnect(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Favourites store disconnected")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Transactional session scope; failures surface as ``StoreError``."""
        if self._session_factory is None:
            raise StoreError("Favourites store not connected. Call connect() first.")

        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise StoreError(f"Favourites store failure: {e}") from e

    async def upsert(self, article: Article) -> None:
        """Insert the article, replacing any stored row with the same URL."""
        values = FavouriteArticle.values_from(article)
        stmt = insert(FavouriteArticle).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["url"],
            set_={key: stmt.excluded[key] for key in values if key != "url"},
        )
        async with self.session() as session:
            await session.execute(stmt)

        logger.info(f"Favourite saved: {article.url}")
        await self._publish()

    async def delete(self, article: Article) -> bool:
        """Remove the stored row with the article's URL. Returns True if one existed."""
        stmt = delete(FavouriteArticle).where(FavouriteArticle.url == article.url)
        async with self.session() as session:
            result = await session.execute(stmt)
            removed = result.rowcount > 0

        logger.info(f"Favourite removed: {article.url} (existed: {removed})")
        await self._publish()
        return removed

    async def get(self, url: str) -> Article | None:
        async with self.session() as session:
            result = await session.execute(
                select(FavouriteArticle).where(FavouriteArticle.url == url)
            )
            row = result.scalar_one_or_none()
        return row.to_article() if row is not None else None

    async def all(self) -> list[Article]:
        """All saved articles in insertion order."""
        async with self.session() as session:
            result = await session.execute(
                select(FavouriteArticle).order_by(FavouriteArticle.id)
            )
            rows = result.scalars().all()
        return [row.to_article() for row in rows]

    def observe(self) -> Observable[list[Article]]:
        return self._favourites

    async def _publish(self) -> None:
        self._favourites.emit(await self.all())
