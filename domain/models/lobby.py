"""
Lobby domain model: a pool of rooms kept stocked with open ones.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Mapping

from domain.context import EntityContext, get_default_context
from domain.models.room import Room
from domain.options import LobbyOptions, build_options, revise_options
from services import error_codes
from services.result import Result

logger = logging.getLogger("lobbyist.domain.lobby")


class Lobby:
    """
    Maintains at least min_open_rooms open rooms without ever holding more
    than max_rooms rooms in total (either bound is disabled by 0).

    Provisioning only ever adds rooms. Closing or ending rooms is left to the
    rooms themselves; the lobby reacts to those events by topping the open
    supply back up and dropping ended rooms from its collection.

    Events:
        room_add(room), room_open(room), room_close(room), room_end(room), error(exc)
    """

    def __init__(self, *, context: EntityContext | None = None, **options: Any):
        self._context = context or get_default_context()
        self._options = build_options(LobbyOptions, options, lambda: self._context.next_name("Lobby"))
        self.id = self._context.new_id()
        self.events = self._context.channel(self)
        self._rooms: dict[str, Room] = {}

        # Deferred so subscribers attached right after construction see the
        # initial room_add/room_open events
        self._context.queue.defer(self._ensure_open_rooms)

    @property
    def context(self) -> EntityContext:
        return self._context

    @property
    def name(self) -> str:
        return self._options.name

    @property
    def min_open_rooms(self) -> int:
        return self._options.min_open_rooms

    @property
    def max_rooms(self) -> int:
        return self._options.max_rooms

    @property
    def room_options(self) -> Mapping[str, Any]:
        return MappingProxyType(dict(self._options.room_options))

    @property
    def extras(self) -> Mapping[str, Any]:
        return MappingProxyType(dict(self._options.model_extra or {}))

    @property
    def rooms(self) -> Mapping[str, Room]:
        """Read-only snapshot of every live room, keyed by room id."""
        return MappingProxyType(dict(self._rooms))

    @property
    def all_rooms(self) -> list[Room]:
        return list(self._rooms.values())

    @property
    def open_rooms(self) -> list[Room]:
        return [room for room in self._rooms.values() if room.is_open]

    @property
    def closed_rooms(self) -> list[Room]:
        return [room for room in self._rooms.values() if not room.is_open]

    def get_room(self, room_id: str) -> Room | None:
        return self._rooms.get(room_id)

    def create_room(self, **overrides: Any) -> Room | None:
        """
        Create and register a room from room_options, with overrides winning
        key by key.

        Callers may push the open count past min_open_rooms, but never the
        total past a non-zero max_rooms: at the ceiling nothing is created and
        None is returned.

        Raises:
            ValidationError: if the merged options are invalid
        """
        if self.max_rooms > 0 and len(self._rooms) >= self.max_rooms:
            logger.warning(f"Lobby {self.id} is at its ceiling of {self.max_rooms} rooms, not creating another")
            return None

        room = Room(context=self._context, **{**self._options.room_options, **overrides})
        self._rooms[room.id] = room

        room.events.on("close", self._on_room_close)
        room.events.on("open", self._on_room_open)
        room.events.once("end", self._on_room_end)

        logger.info(f"Lobby {self.id} added room {room.id} ({len(self._rooms)} rooms, open={room.is_open})")
        self.events.emit("room_add", room)
        if room.is_open:
            self.events.emit("room_open", room)
        return room

    def _ensure_open_rooms(self) -> int:
        """
        Create rooms until min_open_rooms are open, clamped so the total
        stays within max_rooms. Returns the number of rooms created.
        """
        if self.min_open_rooms <= 0:
            return 0

        deficit = max(0, self.min_open_rooms - len(self.open_rooms))
        if self.max_rooms > 0:
            deficit = min(deficit, max(0, self.max_rooms - len(self._rooms)))

        if deficit:
            logger.debug(f"Lobby {self.id} provisioning {deficit} room(s)")
        for _ in range(deficit):
            self.create_room()
        return deficit

    def _on_room_close(self, room: Room) -> None:
        self.events.emit("room_close", room)
        self._ensure_open_rooms()

    def _on_room_open(self, room: Room) -> None:
        self.events.emit("room_open", room)

    def _on_room_end(self, room: Room) -> None:
        self.events.emit("room_end", room)
        room.events.off("close", self._on_room_close)
        room.events.off("open", self._on_room_open)
        self._rooms.pop(room.id, None)
        logger.info(f"Lobby {self.id} dropped ended room {room.id} ({len(self._rooms)} rooms left)")
        self._ensure_open_rooms()

    def rename(self, name: str) -> Result[str]:
        result = self.reconfigure(name=name)
        return Result.ok(self.name) if result else result

    def reconfigure(self, **changes: Any) -> Result[LobbyOptions]:
        """
        Update name, supply bounds or the room template. Invalid values emit
        'error' and keep the previous configuration. Changed bounds are acted
        on at the next delivery pass. A non-zero max_rooms below the current
        room count is refused, since existing rooms are never removed.
        """
        result = revise_options(self._options, changes, self.events)
        if not result:
            return result

        revised = result.value
        if 0 < revised.max_rooms < len(self._rooms):
            error = ValueError(f"max_rooms {revised.max_rooms} is below the {len(self._rooms)} rooms in lobby {self.id}")
            self.events.emit("error", error)
            return Result.fail(str(error), code=error_codes.VALIDATION_ERROR)

        previous, self._options = self._options, revised
        if (previous.min_open_rooms, previous.max_rooms) != (self.min_open_rooms, self.max_rooms):
            self._context.queue.defer(self._ensure_open_rooms)
        return result

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "rooms": {room_id: room.to_dict() for room_id, room in self._rooms.items()},
        }

    def __repr__(self) -> str:
        return f"Lobby(id={self.id!r}, name={self.name!r}, rooms={len(self._rooms)}, open={len(self.open_rooms)})"
