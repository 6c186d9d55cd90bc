"""
Room domain model: a bounded-capacity session with an open/closed/ended lifecycle.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Mapping

from domain.context import EntityContext, get_default_context
from domain.models.member import MemberLike
from domain.options import RoomOptions, build_options, revise_options
from services import error_codes
from services.result import Result

logger = logging.getLogger("lobbyist.domain.room")


class Room:
    """
    Admits and evicts members under a hard cap, and moves between open,
    closed and ended.

    Transitions:
        open -> closed    close(), or close_on_full when member_cap is reached
        closed -> open    open(), or open_when_not_full after an eviction
        * -> ended        end(), or end_on_close_and_empty once a closed room empties

    Ended is terminal. A cap of 0 means "disabled", never "admit nobody".

    Events (all deferred, delivered in emission order):
        open(room), close(room), end(room),
        member_add(member), member_remove(member),
        soft_full(room), full(room), error(exc)
    """

    def __init__(self, *, context: EntityContext | None = None, **options: Any):
        self._context = context or get_default_context()
        self._options = build_options(RoomOptions, options, lambda: self._context.next_name("Room"))
        self.id = self._context.new_id()
        self.events = self._context.channel(self)
        self._members: dict[str, MemberLike] = {}
        self._is_open = self._options.is_open
        self._has_ended = False

    # -- configuration -----------------------------------------------------

    @property
    def name(self) -> str:
        return self._options.name

    @property
    def soft_member_cap(self) -> int:
        return self._options.soft_member_cap

    @property
    def member_cap(self) -> int:
        return self._options.member_cap

    @property
    def close_on_full(self) -> bool:
        return self._options.close_on_full

    @property
    def end_on_close_and_empty(self) -> bool:
        return self._options.end_on_close_and_empty

    @property
    def open_when_not_full(self) -> bool:
        return self._options.open_when_not_full

    @property
    def extras(self) -> Mapping[str, Any]:
        return MappingProxyType(dict(self._options.model_extra or {}))

    # -- state ------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def has_ended(self) -> bool:
        return self._has_ended

    @property
    def members(self) -> Mapping[str, MemberLike]:
        """Read-only snapshot of current members, keyed by member id."""
        return MappingProxyType(dict(self._members))

    @property
    def all_members(self) -> list[MemberLike]:
        return list(self._members.values())

    @property
    def member_count(self) -> int:
        return len(self._members)

    def has_member(self, member_id: str) -> bool:
        return member_id in self._members

    # -- lifecycle ----------------------------------------------------------

    def open(self) -> bool:
        """Reopen a closed room. Returns whether the room changed state."""
        if self._has_ended or self._is_open:
            return False
        self._is_open = True
        logger.debug(f"Room {self.id} opened")
        self.events.emit("open", self)
        return True

    def close(self) -> bool:
        """Stop admitting members. Returns whether the room changed state."""
        if self._has_ended or not self._is_open:
            return False
        self._is_open = False
        logger.debug(f"Room {self.id} closed")
        self.events.emit("close", self)
        return True

    def end(self) -> bool:
        """
        End the room for good, evicting every member first.

        Evictions go through the normal removal path, so each emits
        member_remove. The ended flag is set beforehand, which turns the
        auto-open/auto-end reactions into no-ops.
        """
        if self._has_ended:
            return False
        self._has_ended = True
        self._is_open = False
        for member in list(self._members.values()):
            self._evict(member)
        logger.debug(f"Room {self.id} ended")
        self.events.emit("end", self)
        return True

    # -- membership ---------------------------------------------------------

    def add_member(self, member: Any) -> Result[MemberLike]:
        """
        Admit member.

        Checks run in a fixed order and the first failure is reported:
        WRONG_TYPE, DUPLICATE_MEMBER, ROOM_CLOSED, ROOM_FULL. Nothing changes
        on failure.

        On success emits member_add, then soft_full and full when the new
        count lands exactly on a non-zero cap; full with close_on_full closes
        the room before this call returns.
        """
        if not isinstance(member, MemberLike):
            return Result.fail(f"Cannot add {type(member).__name__} to a room, not a member", code=error_codes.WRONG_TYPE)
        if member.id in self._members:
            return Result.fail(f"Member {member.id} is already in room {self.id}", code=error_codes.DUPLICATE_MEMBER)
        if not self._is_open:
            reason = "has ended" if self._has_ended else "is closed"
            return Result.fail(f"Room {self.id} {reason}", code=error_codes.ROOM_CLOSED)
        if self.member_cap > 0 and len(self._members) + 1 > self.member_cap:
            return Result.fail(f"Room {self.id} is full ({self.member_cap} members)", code=error_codes.ROOM_FULL)

        self._members[member.id] = member
        member.attach_room(self)
        count = len(self._members)
        logger.debug(f"Member {member.id} joined room {self.id} ({count}/{self.member_cap or '-'})")

        self.events.emit("member_add", member)
        if self.soft_member_cap > 0 and count == self.soft_member_cap:
            self.events.emit("soft_full", self)
        if self.member_cap > 0 and count == self.member_cap:
            self.events.emit("full", self)
            if self.close_on_full:
                self.close()
        return Result.ok(member)

    def remove_member(self, member_or_id: Any) -> Result[MemberLike]:
        """
        Evict a member given either the member or its id.

        After member_remove, a closed room reopens when open_when_not_full is
        set and there is space again, and ends when end_on_close_and_empty is
        set and it is now empty.
        """
        if isinstance(member_or_id, MemberLike):
            member_id = member_or_id.id
        elif isinstance(member_or_id, str):
            member_id = member_or_id
        else:
            return Result.fail(
                f"Expected a member or member id, got {type(member_or_id).__name__}",
                code=error_codes.INVALID_MEMBER_ID,
            )

        member = self._members.get(member_id)
        if member is None:
            return Result.fail(f"Member {member_id} is not in room {self.id}", code=error_codes.NOT_IN_ROOM)

        self._evict(member)
        count = len(self._members)

        if not self._is_open and self.open_when_not_full and count < self.member_cap:
            self.open()
        if self.end_on_close_and_empty and not self._is_open and count == 0:
            self.end()
        return Result.ok(member)

    def _evict(self, member: MemberLike) -> None:
        del self._members[member.id]
        member.detach_room(self)
        logger.debug(f"Member {member.id} left room {self.id}")
        self.events.emit("member_remove", member)

    # -- reconfiguration ----------------------------------------------------

    def rename(self, name: str) -> Result[str]:
        result = self.reconfigure(name=name)
        return Result.ok(self.name) if result else result

    def reconfigure(self, **changes: Any) -> Result[RoomOptions]:
        """
        Update options in place. Invalid values emit 'error' and change nothing.

        is_open is lifecycle state after construction and cannot be set here;
        use open()/close(). New caps apply to future crossings only, and a
        non-zero member_cap below the current member count is refused.
        """
        if self._has_ended:
            return Result.fail(f"Room {self.id} has ended", code=error_codes.ROOM_ENDED)
        changes.pop("is_open", None)
        result = revise_options(self._options, changes, self.events)
        if not result:
            return result

        revised = result.value
        count = len(self._members)
        if 0 < revised.member_cap < count:
            error = ValueError(f"member_cap {revised.member_cap} is below the {count} members in room {self.id}")
            self.events.emit("error", error)
            return Result.fail(str(error), code=error_codes.VALIDATION_ERROR)

        self._options = revised
        return result

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "member_ids": list(self._members),
            "member_count": len(self._members),
            "member_cap": self.member_cap,
            "is_open": self._is_open,
        }

    def __repr__(self) -> str:
        state = "ended" if self._has_ended else ("open" if self._is_open else "closed")
        return f"Room(id={self.id!r}, name={self.name!r}, {state}, {len(self._members)}/{self.member_cap})"
