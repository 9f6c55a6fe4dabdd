"""In-process matchmaking for game backends.

This package groups queued players into fixed-size matches on a periodic
sweep and manages private, code-joinable rooms owned by a host player.
"""

from matchmaker.errors import (
    AlreadyInRoomError,
    InvalidRoomStateError,
    MatchmakerError,
    NotHostError,
    RoomNotFoundError,
)
from matchmaker.events import MatchmakerEvent, MatchmakerEvents, MatchmakerEventType
from matchmaker.models import MatchCriteria, Player, QueueEntry, RoomSnapshot
from matchmaker.service import Matchmaker
from matchmaker.settings import MatchmakerSettings, get_settings

__all__ = [
    "AlreadyInRoomError",
    "InvalidRoomStateError",
    "MatchCriteria",
    "Matchmaker",
    "MatchmakerError",
    "MatchmakerEvent",
    "MatchmakerEventType",
    "MatchmakerEvents",
    "MatchmakerSettings",
    "NotHostError",
    "Player",
    "QueueEntry",
    "RoomNotFoundError",
    "RoomSnapshot",
    "get_settings",
]
