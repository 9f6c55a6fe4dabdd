"""Errors raised by matchmaker operations."""


class MatchmakerError(Exception):
    """Base error for a failed matchmaker operation.

    Attributes:
        code: Machine-readable error code
        message: Human-readable description
    """

    code = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class RoomNotFoundError(MatchmakerError):
    """The room code does not belong to a live room."""

    code = "not_found"

    def __init__(self, room_code: str) -> None:
        super().__init__(f"Room {room_code} not found")
        self.room_code = room_code


class NotHostError(MatchmakerError):
    """A non-host attempted a host-only room operation."""

    code = "not_host"


class InvalidRoomStateError(MatchmakerError):
    """The room cannot perform the operation in its current state."""

    code = "invalid_state"


class AlreadyInRoomError(MatchmakerError):
    """The player already belongs to another room."""

    code = "already_in_room"
