"""Matchmaker service.

The Matchmaker owns the waiting queue, the room registry, the match engine
and the event subscribers. It is an explicit context object: the embedding
application creates one, subscribes to its events and controls its
lifetime with ``start()``/``stop()`` or ``async with``.
"""

import logging
import random
from collections.abc import Callable
from types import TracebackType

from matchmaker.engine import MatchEngine
from matchmaker.events import MatchmakerEvent, MatchmakerEvents, MatchmakerEventType, Subscriber
from matchmaker.models import MatchCriteria, Player, QueueEntry, RoomSnapshot
from matchmaker.queue import Clock, WaitingQueue, utc_now
from matchmaker.rooms import RoomRegistry
from matchmaker.settings import MatchmakerSettings, get_settings

logger = logging.getLogger(__name__)


class Matchmaker:
    """Queue matchmaking and private rooms for a game backend.

    Queue operations:
    - join_queue / leave_queue / remove_from_queue
    - list_queued_players

    Room operations:
    - create_room / join_room / kick_from_room / leave_room
    - start_room / update_room_label
    - get_room / list_rooms / get_room_code / get_room_players
    """

    def __init__(
        self,
        settings: MatchmakerSettings | None = None,
        clock: Clock = utc_now,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the matchmaker.

        Args:
            settings: Matchmaking settings (loaded from the environment if None)
            clock: Wall clock used to stamp and age queue entries
            rng: Random source for shuffling and room codes
        """
        self.settings = settings or get_settings()
        self.events = MatchmakerEvents()
        self.queue = WaitingQueue(clock=clock)
        self.rooms = RoomRegistry(self.events, rng=rng)
        self.engine = MatchEngine(self.queue, self.events, self.settings, rng=rng)

    async def __aenter__(self) -> "Matchmaker":
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.stop()

    def start(self) -> None:
        """Start periodic matchmaking sweeps."""
        logger.info(
            "Starting matchmaker "
            f"(min_wait={self.settings.minimum_wait_time}, "
            f"max_wait={self.settings.maximum_wait_time}, "
            f"shuffle={self.settings.shuffle_players}, "
            f"bot_fill={self.settings.enable_bot_fill})"
        )
        self.engine.start()

    async def stop(self) -> None:
        """Stop periodic sweeps after the current one finishes."""
        await self.engine.stop()
        logger.info("Matchmaker stopped")

    @property
    def running(self) -> bool:
        return self.engine.running

    def subscribe(
        self, callback: Subscriber, *types: MatchmakerEventType
    ) -> Callable[[], None]:
        """Register an event subscriber. See MatchmakerEvents.subscribe."""
        return self.events.subscribe(callback, *types)

    # Queue

    async def join_queue(self, player: Player, criteria: MatchCriteria) -> bool:
        """Add a player to the matchmaking queue.

        Args:
            player: Player to queue
            criteria: Criteria to be matched under

        Returns:
            True if queued, False if the player was already queued
        """
        entry = await self.queue.join(player, criteria)
        if entry is None:
            return False

        await self.events.publish([MatchmakerEvent.joined_queue(player, criteria)])
        return True

    async def leave_queue(self, player_id: str) -> Player | None:
        """Remove a player from the queue and announce it.

        Args:
            player_id: Player identifier

        Returns:
            The removed player, or None if the player was not queued
        """
        entry = await self.queue.remove(player_id)
        if entry is None:
            return None

        logger.debug(f"Player {player_id} left the queue")
        await self.events.publish([MatchmakerEvent.left_queue(entry.player, entry.criteria)])
        return entry.player

    async def remove_from_queue(self, player_id: str) -> Player | None:
        """Remove a player from the queue without emitting an event.

        Used when the application withdraws a player itself, for example on
        disconnect, and notifies the player by other means.
        """
        entry: QueueEntry | None = await self.queue.remove(player_id)
        return entry.player if entry is not None else None

    async def list_queued_players(self, criteria: MatchCriteria | None = None) -> list[Player]:
        """Get queued players, optionally only those sharing a criteria's group key."""
        return await self.queue.players(criteria)

    async def sweep(self) -> list[MatchmakerEvent]:
        """Run one matchmaking sweep immediately."""
        return await self.engine.sweep()

    # Rooms

    async def create_room(self, host: Player, criteria: MatchCriteria | None = None) -> str:
        return await self.rooms.create_room(host, criteria)

    async def join_room(self, player: Player, code: str) -> bool:
        return await self.rooms.join_room(player, code)

    async def kick_from_room(self, host_id: str, target_id: str, code: str) -> None:
        await self.rooms.kick_from_room(host_id, target_id, code)

    async def leave_room(self, player_id: str, code: str) -> None:
        await self.rooms.leave_room(player_id, code)

    async def start_room(self, host_id: str, code: str, force: bool = False) -> list[Player]:
        return await self.rooms.start_room(host_id, code, force=force)

    async def update_room_label(self, host_id: str, code: str, criteria: MatchCriteria) -> None:
        await self.rooms.update_room_label(host_id, code, criteria)

    def get_room(self, code: str) -> RoomSnapshot | None:
        return self.rooms.get_room(code)

    def list_rooms(self) -> list[RoomSnapshot]:
        return self.rooms.list_rooms()

    def get_room_code(self, player_id: str) -> str | None:
        return self.rooms.get_room_code(player_id)

    def get_room_players(self, code: str) -> list[Player]:
        return self.rooms.get_room_players(code)
