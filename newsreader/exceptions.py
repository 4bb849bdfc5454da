class NewsReaderError(Exception):
    """Base exception for newsreader failures."""


class TransportError(NewsReaderError):
    """Raised when the remote news service cannot deliver a page.

    Covers unreachable network, timeouts, non-success status codes, error
    payloads and malformed response bodies. The message is meant to be shown
    to a reader as-is.
    """


class StoreError(NewsReaderError):
    """Raised when the favourites store cannot read or write."""
