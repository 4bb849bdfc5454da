"""Subscription-based value streams.

An ``Observable`` holds a current value and pushes every new value to its
subscribers. A new subscriber receives the current value straight away, so
consumers never need an explicit refresh call.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import AsyncIterator, Callable
from typing import Generic, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)

Subscriber = Callable[[T], None]


class Subscription:
    def __init__(self, cancel: Callable[[], None]) -> None:
        self._cancel = cancel
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self._cancel()


class Observable(Generic[T]):
    """
    Current value plus a registry of subscribers.

    When bound to an event loop, ``emit`` calls made from another thread are
    handed over to that loop, so subscribers always run on the loop thread.
    """

    def __init__(self, initial: T, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._value = initial
        self._loop = loop
        self._subscribers: dict[int, Subscriber[T]] = {}
        self._next_id = 0
        self._lock = threading.Lock()

    @property
    def value(self) -> T:
        return self._value

    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    def subscribe(self, callback: Subscriber[T]) -> Subscription:
        with self._lock:
            key = self._next_id
            self._next_id += 1
            self._subscribers[key] = callback
            current = self._value
        callback(current)
        return Subscription(lambda: self._unsubscribe(key))

    def _unsubscribe(self, key: int) -> None:
        with self._lock:
            self._subscribers.pop(key, None)

    def emit(self, value: T) -> None:
        if self._loop is not None and not self._on_loop_thread():
            self._loop.call_soon_threadsafe(self._deliver, value)
            return
        self._deliver(value)

    def _on_loop_thread(self) -> bool:
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False

    def _deliver(self, value: T) -> None:
        with self._lock:
            self._value = value
            subscribers = list(self._subscribers.values())
        for callback in subscribers:
            try:
                callback(value)
            except Exception:
                logger.exception("Subscriber failed while handling a new value")

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    async def values(self) -> AsyncIterator[T]:
        """Iterate over the current value and every later one."""
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[T] = asyncio.Queue()
        subscription = self.subscribe(
            lambda value: loop.call_soon_threadsafe(queue.put_nowait, value)
        )
        try:
            while True:
                yield await queue.get()
        finally:
            subscription.cancel()
