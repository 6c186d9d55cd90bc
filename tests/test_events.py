"""
Tests for the deferred notification queue and event channels.
"""

import asyncio
import logging

import pytest

from domain.context import EntityContext, get_default_context, reset_default_context
from domain.events import EventChannel, NotificationQueue
from tests.conftest import drain


class TestNotificationQueue:
    def test_flush_without_loop_is_fifo(self):
        queue = NotificationQueue()
        seen = []
        for i in range(5):
            queue.defer(seen.append, i)

        assert seen == []
        assert len(queue) == 5
        assert queue.flush() == 5
        assert seen == [0, 1, 2, 3, 4]

    def test_work_queued_during_flush_runs_after_existing_work(self):
        queue = NotificationQueue()
        seen = []

        def first():
            seen.append("first")
            queue.defer(seen.append, "nested")

        queue.defer(first)
        queue.defer(seen.append, "second")
        queue.flush()

        assert seen == ["first", "second", "nested"]

    @pytest.mark.asyncio
    async def test_drains_on_next_loop_iteration(self):
        queue = NotificationQueue()
        seen = []
        queue.defer(seen.append, 1)
        queue.defer(seen.append, 2)
        assert seen == []

        await drain()

        assert seen == [1, 2]
        assert len(queue) == 0

    @pytest.mark.asyncio
    async def test_failing_callback_does_not_block_the_rest(self, caplog):
        queue = NotificationQueue()
        seen = []

        def boom():
            raise RuntimeError("listener bug")

        queue.defer(boom)
        queue.defer(seen.append, "after")
        with caplog.at_level(logging.ERROR, logger="lobbyist.domain.events"):
            await drain()

        assert seen == ["after"]
        assert "failed" in caplog.text

    def test_reschedules_after_loop_closes(self):
        queue = NotificationQueue()
        seen = []

        # A drain left pending on a loop that has since closed
        stale_loop = asyncio.new_event_loop()
        queue._drain_loop = stale_loop
        stale_loop.close()

        async def emit_and_wait():
            queue.defer(seen.append, "fresh")
            await asyncio.sleep(0)

        asyncio.run(emit_and_wait())

        assert seen == ["fresh"]


class TestEventChannel:
    def test_listeners_resolved_at_delivery(self):
        queue = NotificationQueue()
        channel = EventChannel(queue)
        seen = []

        channel.emit("ping", 1)
        channel.on("ping", seen.append)
        queue.flush()

        assert seen == [1]

    def test_once_fires_a_single_time(self):
        queue = NotificationQueue()
        channel = EventChannel(queue)
        seen = []
        channel.once("ping", seen.append)

        channel.emit("ping", 1)
        channel.emit("ping", 2)
        queue.flush()

        assert seen == [1]
        assert channel.listener_count("ping") == 0

    def test_off_unsubscribes(self):
        queue = NotificationQueue()
        channel = EventChannel(queue)
        seen = []
        channel.on("ping", seen.append)

        assert channel.off("ping", seen.append) is True
        assert channel.off("ping", seen.append) is False
        channel.emit("ping", 1)
        queue.flush()

        assert seen == []

    def test_delivery_order_across_channels(self):
        queue = NotificationQueue()
        first, second = EventChannel(queue), EventChannel(queue)
        seen = []
        first.on("a", lambda: seen.append("first.a"))
        second.on("b", lambda: seen.append("second.b"))

        first.emit("a")
        second.emit("b")
        first.emit("a")
        queue.flush()

        assert seen == ["first.a", "second.b", "first.a"]

    def test_unhandled_error_event_is_logged(self, caplog):
        queue = NotificationQueue()
        channel = EventChannel(queue, owner="lobby-x")
        channel.emit("error", ValueError("bad name"))

        with caplog.at_level(logging.WARNING, logger="lobbyist.domain.events"):
            queue.flush()

        assert "bad name" in caplog.text


class TestEntityContext:
    def test_name_counters_are_per_kind(self):
        context = EntityContext()
        assert context.next_name("Room") == "Room 1"
        assert context.next_name("Room") == "Room 2"
        assert context.next_name("Member") == "Member 1"

    def test_ids_are_unique(self):
        assert len({EntityContext.new_id() for _ in range(100)}) == 100

    def test_reset_default_context(self):
        old = get_default_context()
        old.queue.defer(lambda: None)

        new = reset_default_context()

        assert new is get_default_context()
        assert new is not old
        assert len(old.queue) == 0
