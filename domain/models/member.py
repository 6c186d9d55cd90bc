"""
Member domain model.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Protocol, runtime_checkable

from domain.context import EntityContext, get_default_context
from domain.options import MemberOptions, build_options, revise_options
from services.result import Result

if TYPE_CHECKING:
    from domain.models.room import Room


@runtime_checkable
class MemberLike(Protocol):
    """
    What a Room needs from a participant.

    Anything providing these members can be admitted, not only Member and its
    subclasses.
    """

    id: str
    name: str

    def attach_room(self, room: "Room") -> None: ...

    def detach_room(self, room: "Room") -> None: ...


class Member:
    """
    A participant identity that can sit in any number of rooms.

    The rooms index is maintained by Room.add_member/Room.remove_member through
    attach_room/detach_room; a member never joins or leaves on its own.

    Events:
        room_join(room), room_leave(room), error(exc)
    """

    def __init__(self, *, context: EntityContext | None = None, **options: Any):
        self._context = context or get_default_context()
        self._options = build_options(MemberOptions, options, lambda: self._context.next_name("Member"))
        self.id = self._context.new_id()
        self.events = self._context.channel(self)
        self._rooms: dict[str, Room] = {}

    @property
    def name(self) -> str:
        return self._options.name

    @property
    def extras(self) -> Mapping[str, Any]:
        return MappingProxyType(dict(self._options.model_extra or {}))

    @property
    def rooms(self) -> Mapping[str, "Room"]:
        """Read-only snapshot of the rooms this member belongs to, keyed by id."""
        return MappingProxyType(dict(self._rooms))

    @property
    def all_rooms(self) -> list["Room"]:
        return list(self._rooms.values())

    def rename(self, name: str) -> Result[str]:
        result = revise_options(self._options, {"name": name}, self.events)
        if not result:
            return result
        self._options = result.value
        return Result.ok(self.name)

    def attach_room(self, room: "Room") -> None:
        """Record membership of room. Called by Room only."""
        self._rooms[room.id] = room
        self.events.emit("room_join", room)

    def detach_room(self, room: "Room") -> None:
        """Forget membership of room. Called by Room only."""
        if self._rooms.pop(room.id, None) is not None:
            self.events.emit("room_leave", room)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}

    def __repr__(self) -> str:
        return f"Member(id={self.id!r}, name={self.name!r})"
