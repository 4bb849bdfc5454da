from .news import Article, ArticleSource, NewsPage, same_entity
from .result import Error, Loading, ResultState, Success

__all__ = [
    "Article",
    "ArticleSource",
    "Error",
    "Loading",
    "NewsPage",
    "ResultState",
    "Success",
    "same_entity",
]
