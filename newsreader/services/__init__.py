from .coordinator import NewsCoordinator
from .debounce import SearchDebouncer
from .pagination import (
    PageFetch,
    PaginationController,
    PaginationState,
    QueryKind,
    ScrollWindow,
)
from .remote import NewsApiSource, RemoteNewsSource

__all__ = [
    "NewsApiSource",
    "NewsCoordinator",
    "PageFetch",
    "PaginationController",
    "PaginationState",
    "QueryKind",
    "RemoteNewsSource",
    "ScrollWindow",
    "SearchDebouncer",
]
