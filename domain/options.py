"""
Option schemas for members, rooms and lobbies.

Each entity validates its options once, at construction, and fails with a
pydantic ValidationError instead of coming up half-configured. Unknown keys
are kept as pass-through extras. Keys that name entity internals are dropped
so options can never clobber them.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, Callable, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, ValidationError, field_validator

import config
from services import error_codes
from services.result import Result

logger = logging.getLogger("lobbyist.domain.options")

RESERVED_KEYS = frozenset(
    {
        "id",
        "events",
        "members",
        "all_members",
        "has_ended",
        "rooms",
        "all_rooms",
        "open_rooms",
        "closed_rooms",
    }
)

DisplayName = Annotated[str, StringConstraints(min_length=1, max_length=255)]
RoomCap = Annotated[int, Field(ge=0, le=50)]
RoomCount = Annotated[int, Field(ge=0, le=255)]

OptionsT = TypeVar("OptionsT", bound="EntityOptions")


class EntityOptions(BaseModel):
    """Common base: a validated display name plus opaque extras."""

    model_config = ConfigDict(extra="allow", strict=True)

    name: DisplayName


class MemberOptions(EntityOptions):
    pass


class RoomOptions(EntityOptions):
    is_open: bool = True
    soft_member_cap: RoomCap = config.ROOM_SOFT_MEMBER_CAP  # 0 disables
    member_cap: RoomCap = config.ROOM_MEMBER_CAP  # 0 disables
    close_on_full: bool = config.ROOM_CLOSE_ON_FULL
    end_on_close_and_empty: bool = config.ROOM_END_ON_CLOSE_AND_EMPTY
    open_when_not_full: bool = config.ROOM_OPEN_WHEN_NOT_FULL


class LobbyOptions(EntityOptions):
    min_open_rooms: RoomCount = config.LOBBY_MIN_OPEN_ROOMS  # 0 disables provisioning
    max_rooms: RoomCount = config.LOBBY_MAX_ROOMS  # 0 disables the ceiling
    room_options: dict[str, Any] = Field(default_factory=dict)

    @field_validator("room_options")
    @classmethod
    def _check_room_template(cls, value: dict[str, Any]) -> dict[str, Any]:
        template = strip_reserved(value)
        try:
            RoomOptions.model_validate({"name": "template", **template})
        except ValidationError as exc:
            raise ValueError(f"invalid room option template: {exc}") from exc
        return template


def strip_reserved(options: dict[str, Any] | None) -> dict[str, Any]:
    data = dict(options or {})
    dropped = RESERVED_KEYS.intersection(data)
    for key in dropped:
        del data[key]
    if dropped:
        logger.debug(f"Ignoring reserved option keys: {sorted(dropped)}")
    return data


def build_options(
    schema: type[OptionsT], options: dict[str, Any] | None, default_name: Callable[[], str]
) -> OptionsT:
    """
    Validate construction options against schema.

    default_name is only called when the caller did not supply a name, so an
    explicit name never consumes a counter value.

    Raises:
        ValidationError: if any recognised option is invalid
    """
    data = strip_reserved(options)
    if "name" not in data:
        data["name"] = default_name()
    return schema.model_validate(data)


def revise_options(current: OptionsT, changes: dict[str, Any], events) -> Result[OptionsT]:
    """
    Validate changes on top of current options without touching current.

    Failures are reported on the entity's event channel as an 'error' event
    and returned, never raised, so the entity keeps running with its prior
    values.
    """
    data = {**current.model_dump(), **strip_reserved(changes)}
    try:
        revised = type(current).model_validate(data)
    except ValidationError as exc:
        events.emit("error", exc)
        return Result.fail(str(exc), code=error_codes.VALIDATION_ERROR)
    return Result.ok(revised)
