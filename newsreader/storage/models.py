"""SQLAlchemy models for the favourites table."""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..models.news import Article, ArticleSource


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class FavouriteArticle(Base):
    """
    Snapshot of an article the reader saved.

    Keyed by ``url``; ``id`` only records insertion order.
    """

    __tablename__ = "favourite_articles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    url: Mapped[str] = mapped_column(String(2048), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    description: Mapped[str | None] = mapped_column(Text)
    url_to_image: Mapped[str | None] = mapped_column(String(2048))
    published_at: Mapped[str | None] = mapped_column(String(64))
    source_id: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    source_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    author: Mapped[str | None] = mapped_column(String(255))
    content: Mapped[str | None] = mapped_column(Text)

    @staticmethod
    def values_from(article: Article) -> dict[str, str | None]:
        return {
            "url": article.url,
            "title": article.title,
            "description": article.description,
            "url_to_image": article.url_to_image,
            "published_at": article.published_at,
            "source_id": article.source.id,
            "source_name": article.source.name,
            "author": article.author,
            "content": article.content,
        }

    def to_article(self) -> Article:
        return Article(
            url=self.url,
            title=self.title,
            description=self.description,
            url_to_image=self.url_to_image,
            published_at=self.published_at,
            source=ArticleSource(id=self.source_id, name=self.source_name),
            author=self.author,
            content=self.content,
        )

    def __repr__(self) -> str:
        return f"<FavouriteArticle(url='{self.url}')>"
