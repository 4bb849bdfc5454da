from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class SearchDebouncer:
    """Collapse bursts of search-text edits into one commit.

    Each edit cancels the pending commit. Non-empty text schedules a new one
    ``delay_ms`` later; empty text schedules nothing. After ``close()`` no
    commit is ever delivered.
    """

    def __init__(self, on_commit: Callable[[str], None], delay_ms: int = 500) -> None:
        self._on_commit = on_commit
        self._delay = delay_ms / 1000
        self._pending: asyncio.TimerHandle | None = None
        self._closed = False

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def on_text_changed(self, text: str) -> None:
        self.cancel()
        if self._closed or not text:
            return
        loop = asyncio.get_running_loop()
        self._pending = loop.call_later(self._delay, self._fire, text)

    def _fire(self, text: str) -> None:
        self._pending = None
        if self._closed:
            return
        logger.debug(f"Committing search for {text!r}")
        self._on_commit(text)

    def cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def close(self) -> None:
        self._closed = True
        self.cancel()
