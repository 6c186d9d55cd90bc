"""
Deferred publish/subscribe for rooms, lobbies and members.

Entities never call their subscribers inline. emit() queues the delivery on a
shared NotificationQueue, and the queue drains on the next asyncio loop
iteration (or when flush() is called outside a loop). By the time a listener
runs, every synchronous state change of the call that emitted has committed,
and deliveries happen in the order they were emitted.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Any, Callable

logger = logging.getLogger("lobbyist.domain.events")

Listener = Callable[..., Any]


class NotificationQueue:
    """
    FIFO queue of deferred callbacks shared by every entity of a context.

    When a loop is running, a single drain is scheduled with call_soon. The
    drain keeps going until the queue is empty, so callbacks queued by a
    listener are delivered in the same pass, after everything already queued.
    """

    def __init__(self) -> None:
        self._pending: deque[tuple[Callable[..., Any], tuple]] = deque()
        self._drain_loop: asyncio.AbstractEventLoop | None = None

    def __len__(self) -> int:
        return len(self._pending)

    def defer(self, callback: Callable[..., Any], *args: Any) -> None:
        self._pending.append((callback, args))
        self._schedule_drain()

    def _schedule_drain(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop: the owner drains explicitly with flush()
            return
        if self._drain_loop is loop and not loop.is_closed():
            return
        self._drain_loop = loop
        loop.call_soon(self._drain)

    def _drain(self) -> None:
        self._drain_loop = None
        self.flush()

    def flush(self) -> int:
        """Deliver everything pending, including work queued along the way."""
        delivered = 0
        while self._pending:
            callback, args = self._pending.popleft()
            try:
                callback(*args)
            except Exception:
                logger.exception(f"Deferred callback {callback!r} failed")
            delivered += 1
        return delivered

    def clear(self) -> None:
        """Drop pending callbacks without delivering them."""
        self._pending.clear()
        self._drain_loop = None


class EventChannel:
    """
    Named-event subscription list owned by a single entity.

    Listeners are resolved when the delivery runs, not when emit() is called,
    so a subscriber attached right after the triggering call still hears it.
    """

    def __init__(self, queue: NotificationQueue, owner: Any = None):
        self._queue = queue
        self._owner = owner
        self._listeners: dict[str, list[tuple[Listener, bool]]] = {}

    def on(self, event: str, listener: Listener) -> Listener:
        self._listeners.setdefault(event, []).append((listener, False))
        return listener

    def once(self, event: str, listener: Listener) -> Listener:
        """Subscribe for the next delivery of event only."""
        self._listeners.setdefault(event, []).append((listener, True))
        return listener

    def off(self, event: str, listener: Listener) -> bool:
        """Remove the first registration of listener. Returns whether one was found."""
        entries = self._listeners.get(event, [])
        for index, (registered, _) in enumerate(entries):
            if registered == listener:
                del entries[index]
                return True
        return False

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def emit(self, event: str, *args: Any) -> None:
        self._queue.defer(self._deliver, event, args)

    def _deliver(self, event: str, args: tuple) -> None:
        entries = self._listeners.get(event)
        if not entries:
            if event == "error":
                logger.warning(f"Unhandled error event from {self._owner!r}: {args[0] if args else None}")
            return

        # Snapshot so listeners may subscribe/unsubscribe while we iterate
        snapshot = list(entries)
        self._listeners[event] = [entry for entry in entries if not entry[1]]

        for listener, _ in snapshot:
            try:
                listener(*args)
            except Exception:
                logger.exception(f"Listener for '{event}' on {self._owner!r} failed")
