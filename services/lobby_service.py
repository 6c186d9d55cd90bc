"""
Session-facing lobby orchestration.

Bridges a transport (websocket, Discord, tests...) and the lobby core: maps
session ids to members, relays join/leave requests into rooms, and pushes a
serialized lobby snapshot whenever something visible changes.
"""

import logging
from typing import Callable

from pydantic import ValidationError

from domain.models.lobby import Lobby
from domain.models.member import Member
from services import error_codes
from services.result import Result

logger = logging.getLogger("lobbyist.services.lobby")


class LobbyService:
    """Wraps a Lobby with per-session member bookkeeping and change notifications."""

    def __init__(self, lobby: Lobby, on_change: Callable[[dict], None] | None = None):
        self.lobby = lobby
        self.on_change = on_change
        self._members: dict[str, Member] = {}  # session_id -> Member

        for event in ("room_add", "room_open", "room_close", "room_end"):
            lobby.events.on(event, self._relay(event))

    def _relay(self, event: str) -> Callable:
        def handler(room) -> None:
            logger.info(f"{event} {room.id} in lobby {self.lobby.id}")
            self.notify_change()

        return handler

    def get_member(self, session_id: str) -> Member | None:
        return self._members.get(session_id)

    def register_member(self, session_id: str, name: str) -> Result[Member]:
        """Create the member for a session. Each session registers once."""
        if session_id in self._members:
            return Result.fail("Session already has a member", code=error_codes.ALREADY_REGISTERED)
        try:
            member = Member(context=self.lobby.context, name=name)
        except ValidationError as exc:
            logger.info(f"Rejected member name for session {session_id}: {exc.error_count()} error(s)")
            return Result.fail(str(exc), code=error_codes.VALIDATION_ERROR)

        self._members[session_id] = member
        logger.info(f"Member {member.id} ({member.name}) registered for session {session_id}")
        return Result.ok(member)

    def join_room(self, session_id: str, room_id: str) -> Result:
        """
        Admit the session's member to a room.

        The snapshot pushed on success reflects the new membership right away.
        Lifecycle changes the join sets off (a full room closing, a replacement
        room being provisioned) arrive as further snapshots once the
        notification queue drains, so one join may produce several.
        """
        member = self._members.get(session_id)
        if member is None:
            return Result.fail("You are not a member.", code=error_codes.NOT_REGISTERED)
        room = self.lobby.get_room(room_id)
        if room is None:
            return Result.fail("Invalid room.", code=error_codes.ROOM_NOT_FOUND)

        result = room.add_member(member)
        if result:
            self.notify_change()
        return result

    def leave_room(self, session_id: str, room_id: str) -> Result:
        """Remove the session's member from a room. Snapshots as for join_room."""
        member = self._members.get(session_id)
        if member is None:
            return Result.fail("You are not a member.", code=error_codes.NOT_REGISTERED)
        room = self.lobby.get_room(room_id)
        if room is None:
            return Result.fail("Invalid room.", code=error_codes.ROOM_NOT_FOUND)

        result = room.remove_member(member)
        if result:
            self.notify_change()
        return result

    def disconnect(self, session_id: str) -> Result[int]:
        """
        Drop a session: its member leaves every room it is in.

        Returns the number of rooms left.
        """
        member = self._members.pop(session_id, None)
        if member is None:
            return Result.fail("You are not a member.", code=error_codes.NOT_REGISTERED)

        left = 0
        for room in member.all_rooms:
            if room.remove_member(member):
                left += 1
        logger.info(f"Session {session_id} disconnected, member {member.id} left {left} room(s)")
        self.notify_change()
        return Result.ok(left)

    def snapshot(self) -> dict:
        return self.lobby.to_dict()

    def notify_change(self) -> None:
        if self.on_change is not None:
            self.on_change(self.snapshot())
