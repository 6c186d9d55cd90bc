"""
Standard error codes for room, lobby and session operations.

Room.add_member evaluates its checks in a fixed order (WRONG_TYPE,
DUPLICATE_MEMBER, ROOM_CLOSED, ROOM_FULL) so the first failing rule is the
one reported.

Usage:
    from services import error_codes

    result = room.add_member(member)
    if result.error_code == error_codes.ROOM_CLOSED:
        ...
"""

# General errors
VALIDATION_ERROR = "validation_error"

# Room admission/eviction errors
WRONG_TYPE = "wrong_type"
DUPLICATE_MEMBER = "duplicate_member"
ROOM_CLOSED = "room_closed"
ROOM_FULL = "room_full"
ROOM_ENDED = "room_ended"
INVALID_MEMBER_ID = "invalid_member_id"
NOT_IN_ROOM = "not_in_room"

# Lobby/session errors
ROOM_NOT_FOUND = "room_not_found"
NOT_REGISTERED = "not_registered"
ALREADY_REGISTERED = "already_registered"
