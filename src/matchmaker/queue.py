"""Waiting queue for matchmaking.

The queue is guarded by a single asyncio lock. The match engine holds the
same lock for a whole sweep, so joins and removals wait for a running sweep
to finish. Methods ending in ``_locked`` expect the caller to hold the lock.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime

from matchmaker.models import MatchCriteria, Player, QueueEntry

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default wall clock."""
    return datetime.now(UTC)


class WaitingQueue:
    """Ordered collection of players waiting for a match.

    A player holds at most one entry; joining again while queued is rejected.
    """

    def __init__(self, clock: Clock = utc_now) -> None:
        """Initialize an empty queue.

        Args:
            clock: Returns the current time; entries are stamped with it
        """
        self._entries: list[QueueEntry] = []
        self._lock = asyncio.Lock()
        self._clock = clock

    @property
    def lock(self) -> asyncio.Lock:
        """The lock shared with the match engine."""
        return self._lock

    def __len__(self) -> int:
        return len(self._entries)

    async def join(self, player: Player, criteria: MatchCriteria) -> QueueEntry | None:
        """Add a player to the back of the queue.

        Args:
            player: Player to enqueue
            criteria: Criteria the player wants to be matched under

        Returns:
            The new entry, or None if the player is already queued
        """
        async with self._lock:
            if self._find_locked(player.player_id) is not None:
                logger.debug(f"Player {player.player_id} already queued, ignoring join")
                return None

            entry = QueueEntry(player=player, criteria=criteria, enqueued_at=self._clock())
            self._entries.append(entry)

        logger.debug(f"Player {player.player_id} queued for {criteria.group_key}")
        return entry

    async def remove(self, player_id: str) -> QueueEntry | None:
        """Remove a player's entry.

        Args:
            player_id: Player identifier

        Returns:
            The removed entry, or None if the player was not queued
        """
        async with self._lock:
            return self.remove_locked(player_id)

    def remove_locked(self, player_id: str) -> QueueEntry | None:
        """Remove a player's entry. Must be called with the lock held."""
        for index, entry in enumerate(self._entries):
            if entry.player_id == player_id:
                del self._entries[index]
                return entry
        return None

    async def snapshot(self) -> list[QueueEntry]:
        """Get a copy of all entries in queue order."""
        async with self._lock:
            return self.snapshot_locked()

    def snapshot_locked(self) -> list[QueueEntry]:
        """Get a copy of all entries. Must be called with the lock held."""
        return list(self._entries)

    async def players(self, criteria: MatchCriteria | None = None) -> list[Player]:
        """Get queued players, optionally only those queued under a group key.

        Args:
            criteria: Filter by this criteria's group key (all players if None)

        Returns:
            Players in queue order
        """
        async with self._lock:
            if criteria is None:
                return [entry.player for entry in self._entries]
            return [
                entry.player
                for entry in self._entries
                if entry.criteria.group_key == criteria.group_key
            ]

    def _find_locked(self, player_id: str) -> QueueEntry | None:
        for entry in self._entries:
            if entry.player_id == player_id:
                return entry
        return None

    def now(self) -> datetime:
        """Current time according to the queue's clock."""
        return self._clock()
