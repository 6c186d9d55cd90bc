"""
Pytest fixtures for tests.

Every test gets a fresh default EntityContext so deliveries queued by one test
(and the loop they were scheduled on) never leak into the next.
"""

import asyncio

import pytest

from domain.context import EntityContext, reset_default_context
from domain.models.member import Member
from domain.models.room import Room


@pytest.fixture(autouse=True)
def fresh_context():
    """
    Reset the process-default context before and after each test.

    Entities built without an explicit context share it, including its
    default-name counters.
    """
    context = reset_default_context()
    yield context
    reset_default_context()


@pytest.fixture
def context():
    """An isolated context for tests that want explicit wiring."""
    return EntityContext()


@pytest.fixture
def recorder():
    """Collects (event, payload) tuples from any number of event channels."""
    return EventRecorder()


@pytest.fixture
def members(context):
    return [Member(context=context, name=f"Player{i}") for i in range(4)]


@pytest.fixture
def room(context):
    return Room(context=context)


class EventRecorder:
    def __init__(self):
        self.events = []

    def watch(self, channel, *names):
        for name in names:
            channel.on(name, self._listener(name))
        return self

    def _listener(self, name):
        def listener(*args):
            self.events.append((name, args[0] if args else None))

        return listener

    @property
    def names(self):
        return [name for name, _ in self.events]

    def count(self, name):
        return self.names.count(name)


async def drain():
    """Let the notification queue run its scheduled drain."""
    await asyncio.sleep(0)
