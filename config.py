"""
Centralized configuration for the lobby core.

Values come from the environment (optionally via a .env file) and act as the
defaults for room and lobby options that callers leave unset.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

load_dotenv()


def _parse_int(env_var: str, default: int) -> int:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _parse_bool(env_var: str, default: bool) -> bool:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


# Lobby provisioning
LOBBY_MIN_OPEN_ROOMS = _parse_int("LOBBY_MIN_OPEN_ROOMS", 3)  # 0 disables auto-provisioning
LOBBY_MAX_ROOMS = _parse_int("LOBBY_MAX_ROOMS", 10)  # 0 disables the ceiling

# Room defaults
ROOM_MEMBER_CAP = _parse_int("ROOM_MEMBER_CAP", 10)  # 0 disables the hard cap
ROOM_SOFT_MEMBER_CAP = _parse_int("ROOM_SOFT_MEMBER_CAP", 0)  # 0 disables soft_full
ROOM_CLOSE_ON_FULL = _parse_bool("ROOM_CLOSE_ON_FULL", False)
ROOM_END_ON_CLOSE_AND_EMPTY = _parse_bool("ROOM_END_ON_CLOSE_AND_EMPTY", False)
ROOM_OPEN_WHEN_NOT_FULL = _parse_bool("ROOM_OPEN_WHEN_NOT_FULL", False)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def configure_logging(level: str | None = None) -> None:
    """Install the root handler used by processes embedding the lobby."""
    logging.basicConfig(
        level=getattr(logging, level or LOG_LEVEL, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
