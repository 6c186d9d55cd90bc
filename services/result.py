"""
Result type for room and lobby operations.

Admission and eviction are routine outcomes a caller has to branch on, so the
core never raises for them. Every rejected operation returns a failed Result
whose error_code tells the reasons apart without parsing message text.

Usage:
    result = room.add_member(member)
    if result:
        print(f"{result.value.name} joined {room.name}")
    elif result.error_code == error_codes.ROOM_FULL:
        ...
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of an operation.

    Attributes:
        success: Whether the operation succeeded
        value: The payload on success (the member admitted, the room joined...)
        error: Human-readable reason on failure
        error_code: One of the constants in services.error_codes
    """

    success: bool
    value: T | None = None
    error: str | None = None
    error_code: str | None = None

    @classmethod
    def ok(cls, value: T | None = None) -> "Result[T]":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: str, code: str | None = None) -> "Result[T]":
        return cls(success=False, error=error, error_code=code)

    def __bool__(self) -> bool:
        return self.success

    def unwrap(self) -> T:
        """
        Get the value, raising ValueError if the result is a failure.

        For callers that would rather propagate rejections as exceptions.
        """
        if not self.success:
            raise ValueError(f"Cannot unwrap failed result ({self.error_code}): {self.error}")
        return self.value  # type: ignore
