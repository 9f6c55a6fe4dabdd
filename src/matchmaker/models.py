"""Data models for the matchmaker.

Player and MatchCriteria are supplied by the host application; any object
with the right attributes satisfies them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class Player(Protocol):
    """A participant that can queue for matches or join rooms."""

    @property
    def player_id(self) -> str:
        """Stable, unique player identifier."""
        ...


@runtime_checkable
class MatchCriteria(Protocol):
    """Grouping criteria for matchmaking.

    Players whose criteria share a ``group_key`` can be matched together.
    ``match_size`` is the number of players one match needs.
    """

    @property
    def group_key(self) -> str: ...

    @property
    def match_size(self) -> int: ...


@dataclass
class QueueEntry:
    """A player waiting in the matchmaking queue.

    Attributes:
        player: The queued player
        criteria: Criteria the player queued with
        enqueued_at: When the player joined the queue
    """

    player: Player
    criteria: MatchCriteria
    enqueued_at: datetime

    @property
    def player_id(self) -> str:
        return self.player.player_id

    def waited(self, now: datetime) -> float:
        """Seconds elapsed since the entry was enqueued."""
        return (now - self.enqueued_at).total_seconds()


@dataclass(frozen=True)
class RoomSnapshot:
    """Immutable point-in-time view of a room.

    Attributes:
        code: Six-digit room code
        host: The player who created the room
        criteria: Current room criteria, if any
        player_ids: Member ids in join order
    """

    code: str
    host: Player
    criteria: MatchCriteria | None
    player_ids: tuple[str, ...] = field(default_factory=tuple)

    @property
    def host_id(self) -> str:
        return self.host.player_id

    @property
    def player_count(self) -> int:
        return len(self.player_ids)
