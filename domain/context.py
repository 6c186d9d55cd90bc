"""
Entity context: the notification queue and default-name counters shared by a
group of members, rooms and lobbies.

Entities built without an explicit context share the process default, the
same way the rest of the code shares one RateLimiter instance. Tests reset it
between cases so queued deliveries never leak across event loops.
"""

from __future__ import annotations

import itertools
import uuid

from domain.events import EventChannel, NotificationQueue


class EntityContext:
    """Owns the FIFO notification queue and per-kind monotonic name counters."""

    def __init__(self, queue: NotificationQueue | None = None):
        self.queue = queue or NotificationQueue()
        self._counters: dict[str, itertools.count] = {}

    def next_name(self, kind: str) -> str:
        """Generate a human-readable default name, e.g. 'Room 3'."""
        counter = self._counters.setdefault(kind, itertools.count(1))
        return f"{kind} {next(counter)}"

    @staticmethod
    def new_id() -> str:
        return uuid.uuid4().hex

    def channel(self, owner) -> EventChannel:
        return EventChannel(self.queue, owner=owner)

    def flush(self) -> int:
        return self.queue.flush()


_default_context = EntityContext()


def get_default_context() -> EntityContext:
    return _default_context


def reset_default_context() -> EntityContext:
    """Replace the process default with a fresh context (used by tests)."""
    global _default_context
    _default_context.queue.clear()
    _default_context = EntityContext()
    return _default_context
