"""Matchmaker events and subscriber dispatch.

Subscribers are plain callables or coroutine functions taking a single
MatchmakerEvent. They are invoked in registration order, after the
matchmaker has released its locks. Callbacks must not block; a callback that
raises is logged and skipped.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum

from matchmaker.models import MatchCriteria, Player

logger = logging.getLogger(__name__)


class MatchmakerEventType(Enum):
    """Types of outcomes announced by the matchmaker."""

    JOINED_QUEUE = "joined_queue"
    LEFT_QUEUE = "left_queue"
    MATCH_FOUND = "match_found"
    MATCH_NOT_FOUND = "match_not_found"
    JOINED_ROOM = "joined_room"
    LEFT_ROOM = "left_room"
    KICKED_FROM_ROOM = "kicked_from_room"
    ROOM_DESTROYED = "room_destroyed"
    LABEL_UPDATED = "label_updated"


@dataclass
class MatchmakerEvent:
    """An outcome produced by a queue, room or sweep operation.

    Attributes:
        type: Type of event
        players: Players the event concerns (ordered for match_found)
        criteria: Criteria involved, if any
        room_code: Room involved, if any
    """

    type: MatchmakerEventType
    players: list[Player] = field(default_factory=list)
    criteria: MatchCriteria | None = None
    room_code: str | None = None

    @property
    def player(self) -> Player | None:
        """The single player of a per-player event."""
        return self.players[0] if self.players else None

    @property
    def player_ids(self) -> list[str]:
        return [p.player_id for p in self.players]

    @classmethod
    def joined_queue(cls, player: Player, criteria: MatchCriteria) -> "MatchmakerEvent":
        return cls(MatchmakerEventType.JOINED_QUEUE, [player], criteria)

    @classmethod
    def left_queue(cls, player: Player, criteria: MatchCriteria) -> "MatchmakerEvent":
        return cls(MatchmakerEventType.LEFT_QUEUE, [player], criteria)

    @classmethod
    def match_found(
        cls, players: list[Player], criteria: MatchCriteria | None
    ) -> "MatchmakerEvent":
        return cls(MatchmakerEventType.MATCH_FOUND, list(players), criteria)

    @classmethod
    def match_not_found(cls, player: Player, criteria: MatchCriteria) -> "MatchmakerEvent":
        return cls(MatchmakerEventType.MATCH_NOT_FOUND, [player], criteria)

    @classmethod
    def joined_room(cls, player: Player, room_code: str) -> "MatchmakerEvent":
        return cls(MatchmakerEventType.JOINED_ROOM, [player], room_code=room_code)

    @classmethod
    def left_room(cls, player: Player, room_code: str) -> "MatchmakerEvent":
        return cls(MatchmakerEventType.LEFT_ROOM, [player], room_code=room_code)

    @classmethod
    def kicked_from_room(cls, player: Player, room_code: str) -> "MatchmakerEvent":
        return cls(MatchmakerEventType.KICKED_FROM_ROOM, [player], room_code=room_code)

    @classmethod
    def room_destroyed(cls, room_code: str) -> "MatchmakerEvent":
        return cls(MatchmakerEventType.ROOM_DESTROYED, room_code=room_code)

    @classmethod
    def label_updated(cls, room_code: str, criteria: MatchCriteria) -> "MatchmakerEvent":
        return cls(MatchmakerEventType.LABEL_UPDATED, criteria=criteria, room_code=room_code)


Subscriber = Callable[[MatchmakerEvent], Awaitable[None] | None]


@dataclass(eq=False)
class _Subscription:
    callback: Subscriber
    types: frozenset[MatchmakerEventType]

    def wants(self, event: MatchmakerEvent) -> bool:
        return not self.types or event.type in self.types


class MatchmakerEvents:
    """Ordered list of event subscribers."""

    def __init__(self) -> None:
        self._subscriptions: list[_Subscription] = []

    def subscribe(
        self,
        callback: Subscriber,
        *types: MatchmakerEventType,
    ) -> Callable[[], None]:
        """Register a subscriber.

        Args:
            callback: Function or coroutine function receiving each event
            types: Event types to receive (all types if empty)

        Returns:
            A function that removes this subscription
        """
        subscription = _Subscription(callback, frozenset(types))
        self._subscriptions.append(subscription)

        def unsubscribe() -> None:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    async def publish(self, events: Iterable[MatchmakerEvent]) -> None:
        """Deliver events in order to every interested subscriber.

        Args:
            events: Events in the order they were produced
        """
        for event in events:
            # Copy so callbacks may unsubscribe during delivery
            for subscription in list(self._subscriptions):
                if not subscription.wants(event):
                    continue
                try:
                    result = subscription.callback(event)
                    if inspect.isawaitable(result):
                        await result
                except Exception:
                    logger.exception(
                        f"Subscriber {subscription.callback!r} failed on {event.type.value}"
                    )
