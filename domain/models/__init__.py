"""
Domain models - members, rooms and the lobby that keeps rooms stocked.
"""

from domain.models.lobby import Lobby
from domain.models.member import Member, MemberLike
from domain.models.room import Room

__all__ = ["Member", "MemberLike", "Room", "Lobby"]
