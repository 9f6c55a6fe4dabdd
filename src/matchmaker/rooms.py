"""Room registry for the matchmaker.

Rooms are private, code-joinable sessions owned by the player who created
them. The host alone may kick, start, relabel, or (by leaving) destroy the
room. Each room has its own lock; the registry's indexes are plain dicts
updated between awaits, so code lookups never wait on a room.

Room events are collected while a room lock is held and delivered after it
is released.
"""

import asyncio
import logging
import random

from matchmaker.errors import (
    AlreadyInRoomError,
    InvalidRoomStateError,
    NotHostError,
    RoomNotFoundError,
)
from matchmaker.events import MatchmakerEvent, MatchmakerEvents
from matchmaker.models import MatchCriteria, Player, RoomSnapshot

logger = logging.getLogger(__name__)

ROOM_CODE_LENGTH = 6
ROOM_CODE_SPACE = 10**ROOM_CODE_LENGTH


def generate_room_code(rng: random.Random) -> str:
    """Generate a random zero-padded six-digit room code."""
    return f"{rng.randrange(ROOM_CODE_SPACE):0{ROOM_CODE_LENGTH}d}"


class Room:
    """A live room.

    Attributes:
        code: Six-digit room code
        host: The creating player; fixed for the room's lifetime
        criteria: Criteria the room will start a match under, if any
        closed: Set once the room has started or been destroyed
    """

    def __init__(self, code: str, host: Player, criteria: MatchCriteria | None = None) -> None:
        self.code = code
        self.host = host
        self.criteria = criteria
        self.closed = False
        self.lock = asyncio.Lock()
        # player_id -> Player, in join order
        self._players: dict[str, Player] = {host.player_id: host}

    @property
    def host_id(self) -> str:
        return self.host.player_id

    @property
    def players(self) -> list[Player]:
        return list(self._players.values())

    @property
    def player_count(self) -> int:
        return len(self._players)

    def is_host(self, player_id: str) -> bool:
        return self.host_id == player_id

    def has_player(self, player_id: str) -> bool:
        return player_id in self._players

    def add_player(self, player: Player) -> bool:
        """Add a member. Returns False if already present."""
        if player.player_id in self._players:
            return False
        self._players[player.player_id] = player
        return True

    def remove_player(self, player_id: str) -> Player | None:
        """Remove a member. Returns the removed player, or None if absent."""
        return self._players.pop(player_id, None)

    def snapshot(self) -> RoomSnapshot:
        return RoomSnapshot(
            code=self.code,
            host=self.host,
            criteria=self.criteria,
            player_ids=tuple(self._players),
        )


class RoomRegistry:
    """Manages all live rooms in memory.

    This class is responsible for:
    - Issuing unique room codes
    - Creating, starting and destroying rooms
    - Managing player join/leave/kick
    - Enforcing the one-room-per-player rule
    """

    def __init__(self, events: MatchmakerEvents, rng: random.Random | None = None) -> None:
        """Initialize the registry.

        Args:
            events: Subscribers to notify of room outcomes
            rng: Random source for room codes (a fresh one if None)
        """
        self._rooms: dict[str, Room] = {}  # code -> Room
        self._player_rooms: dict[str, str] = {}  # player_id -> code
        self._events = events
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self._rooms)

    async def create_room(self, host: Player, criteria: MatchCriteria | None = None) -> str:
        """Create a room with the host as its first member.

        Args:
            host: Player creating the room
            criteria: Optional criteria for the eventual match

        Returns:
            The new room's code

        Raises:
            AlreadyInRoomError: The host is already in a room
        """
        existing = self._player_rooms.get(host.player_id)
        if existing is not None:
            raise AlreadyInRoomError(f"Player {host.player_id} is already in room {existing}")

        # Codes only need to be unique among live rooms
        code = generate_room_code(self._rng)
        while code in self._rooms:
            code = generate_room_code(self._rng)

        self._rooms[code] = Room(code, host, criteria)
        self._player_rooms[host.player_id] = code

        logger.info(f"Room {code} created by {host.player_id}")

        await self._events.publish([MatchmakerEvent.joined_room(host, code)])
        return code

    async def join_room(self, player: Player, code: str) -> bool:
        """Join a room by code.

        Args:
            player: Joining player
            code: Room code

        Returns:
            True if the player joined; False if the room does not exist, the
            player is already a member, or the player is in another room
        """
        room = self._rooms.get(code)
        if room is None:
            return False

        async with room.lock:
            # The room may have closed while we waited for its lock
            if room.closed:
                return False

            current = self._player_rooms.get(player.player_id)
            if current is not None and current != code:
                logger.debug(f"Player {player.player_id} is in room {current}, cannot join {code}")
                return False

            if not room.add_player(player):
                return False

            self._player_rooms[player.player_id] = code
            logger.info(f"Player {player.player_id} joined room {code}")

        await self._events.publish([MatchmakerEvent.joined_room(player, code)])
        return True

    async def kick_from_room(self, host_id: str, target_id: str, code: str) -> None:
        """Kick a player from a room (host only).

        Kicking a player who is not in the room is a no-op.

        Args:
            host_id: Id of the player issuing the kick
            target_id: Id of the player to remove
            code: Room code

        Raises:
            RoomNotFoundError: Unknown room code
            NotHostError: Caller is not the room's host
            InvalidRoomStateError: The host tried to kick themselves
        """
        room = self._get_live_room(code)
        if not room.is_host(host_id):
            raise NotHostError("Only the host can kick players")
        if target_id == host_id:
            raise InvalidRoomStateError("Host cannot kick themselves; leave the room instead")

        produced: list[MatchmakerEvent] = []
        async with room.lock:
            if room.closed:
                raise RoomNotFoundError(code)

            target = room.remove_player(target_id)
            if target is not None:
                self._player_rooms.pop(target_id, None)
                produced.append(MatchmakerEvent.kicked_from_room(target, code))
                logger.info(f"Player {target_id} kicked from room {code}")

        await self._events.publish(produced)

    async def leave_room(self, player_id: str, code: str) -> None:
        """Leave a room.

        If the host leaves, the room is destroyed along with every member's
        association to it. Leaving a room one is not in is a no-op.

        Args:
            player_id: Id of the leaving player
            code: Room code

        Raises:
            RoomNotFoundError: Unknown room code
        """
        room = self._get_live_room(code)

        produced: list[MatchmakerEvent] = []
        async with room.lock:
            if room.closed:
                raise RoomNotFoundError(code)

            if room.is_host(player_id):
                self._close_room_locked(room)
                produced.append(MatchmakerEvent.room_destroyed(code))
                logger.info(f"Host {player_id} left, room {code} destroyed")
            else:
                player = room.remove_player(player_id)
                if player is not None:
                    self._player_rooms.pop(player_id, None)
                    produced.append(MatchmakerEvent.left_room(player, code))
                    logger.info(f"Player {player_id} left room {code}")

        await self._events.publish(produced)

    async def start_room(self, host_id: str, code: str, force: bool = False) -> list[Player]:
        """Start the room's match (host only) and remove the room.

        Args:
            host_id: Id of the player starting the room
            code: Room code
            force: Start even if the member count does not equal the
                criteria's match size

        Returns:
            The matched players in join order

        Raises:
            RoomNotFoundError: Unknown room code
            NotHostError: Caller is not the room's host
            InvalidRoomStateError: Wrong member count and not forced
        """
        room = self._get_live_room(code)
        if not room.is_host(host_id):
            raise NotHostError("Only the host can start the room")

        async with room.lock:
            if room.closed:
                raise RoomNotFoundError(code)

            players = room.players
            criteria = room.criteria
            if criteria is not None and not force and len(players) != criteria.match_size:
                raise InvalidRoomStateError(
                    f"Room {code} has {len(players)} players, needs {criteria.match_size}"
                )

            self._close_room_locked(room)
            logger.info(f"Room {code} started with {[p.player_id for p in players]}")

        await self._events.publish([MatchmakerEvent.match_found(players, criteria)])
        return players

    async def update_room_label(self, host_id: str, code: str, criteria: MatchCriteria) -> None:
        """Replace the room's criteria (host only).

        The member count is not checked here; start_room validates it.

        Args:
            host_id: Id of the player updating the room
            code: Room code
            criteria: New criteria

        Raises:
            RoomNotFoundError: Unknown room code
            NotHostError: Caller is not the room's host
        """
        room = self._get_live_room(code)
        if not room.is_host(host_id):
            raise NotHostError("Only the host can update the room label")

        async with room.lock:
            if room.closed:
                raise RoomNotFoundError(code)

            room.criteria = criteria
            logger.info(f"Room {code} label updated to {criteria.group_key}")

        await self._events.publish([MatchmakerEvent.label_updated(code, criteria)])

    def get_room(self, code: str) -> RoomSnapshot | None:
        """Get a snapshot of a room by code.

        Args:
            code: Room code

        Returns:
            RoomSnapshot or None if not found
        """
        room = self._rooms.get(code)
        return room.snapshot() if room is not None else None

    def list_rooms(self) -> list[RoomSnapshot]:
        """Get snapshots of all live rooms."""
        return [room.snapshot() for room in self._rooms.values()]

    def get_room_code(self, player_id: str) -> str | None:
        """Find which room a player is in.

        Args:
            player_id: Player identifier

        Returns:
            Room code or None if not in a room
        """
        code = self._player_rooms.get(player_id)
        if code is None or code not in self._rooms:
            return None
        return code

    def get_room_players(self, code: str) -> list[Player]:
        """Get the members of a room in join order.

        Raises:
            RoomNotFoundError: Unknown room code
        """
        return self._get_live_room(code).players

    def _get_live_room(self, code: str) -> Room:
        room = self._rooms.get(code)
        if room is None:
            raise RoomNotFoundError(code)
        return room

    def _close_room_locked(self, room: Room) -> None:
        """Remove a room and all of its members' associations.

        Must be called with the room's lock held.
        """
        room.closed = True
        for player in room.players:
            if self._player_rooms.get(player.player_id) == room.code:
                del self._player_rooms[player.player_id]
        self._rooms.pop(room.code, None)
