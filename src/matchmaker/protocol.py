"""Wire messages for matchmaker events.

Transports that forward events to clients serialize them with
``serialize_event``. Players are represented by id and criteria by key and
size, so every message is JSON-safe.
"""

from typing import Any

from pydantic import BaseModel

from matchmaker.events import MatchmakerEvent, MatchmakerEventType
from matchmaker.models import MatchCriteria


class CriteriaPayload(BaseModel):
    """Criteria as sent over the wire."""

    group_key: str
    match_size: int

    @classmethod
    def from_criteria(cls, criteria: MatchCriteria | None) -> "CriteriaPayload | None":
        if criteria is None:
            return None
        return cls(group_key=criteria.group_key, match_size=criteria.match_size)


class JoinedQueueMessage(BaseModel):
    """Sent when a player enters the matchmaking queue."""

    type: str = "joined_queue"
    player_id: str
    criteria: CriteriaPayload


class LeftQueueMessage(BaseModel):
    """Sent when a player leaves the matchmaking queue."""

    type: str = "left_queue"
    player_id: str
    criteria: CriteriaPayload


class MatchFoundMessage(BaseModel):
    """Sent when a queue sweep or a room start produces a match.

    ``player_ids`` may hold fewer ids than ``criteria.match_size`` when the
    match was bot-filled; the receiver supplies the missing players.
    """

    type: str = "match_found"
    player_ids: list[str]
    criteria: CriteriaPayload | None = None


class MatchNotFoundMessage(BaseModel):
    """Sent when a player times out of the queue without a match."""

    type: str = "match_not_found"
    player_id: str
    criteria: CriteriaPayload


class JoinedRoomMessage(BaseModel):
    """Sent when a player creates or joins a room."""

    type: str = "joined_room"
    player_id: str
    room_code: str


class LeftRoomMessage(BaseModel):
    """Sent when a non-host player leaves a room."""

    type: str = "left_room"
    player_id: str
    room_code: str


class KickedFromRoomMessage(BaseModel):
    """Sent when the host kicks a player."""

    type: str = "kicked_from_room"
    player_id: str
    room_code: str


class RoomDestroyedMessage(BaseModel):
    """Sent when the host leaves and the room is torn down."""

    type: str = "room_destroyed"
    room_code: str


class LabelUpdatedMessage(BaseModel):
    """Sent when the host changes the room criteria."""

    type: str = "label_updated"
    room_code: str
    criteria: CriteriaPayload


EventMessage = (
    JoinedQueueMessage
    | LeftQueueMessage
    | MatchFoundMessage
    | MatchNotFoundMessage
    | JoinedRoomMessage
    | LeftRoomMessage
    | KickedFromRoomMessage
    | RoomDestroyedMessage
    | LabelUpdatedMessage
)


def event_to_message(event: MatchmakerEvent) -> EventMessage:
    """Convert an event to its wire message."""
    criteria = CriteriaPayload.from_criteria(event.criteria)

    match event.type:
        case MatchmakerEventType.JOINED_QUEUE:
            return JoinedQueueMessage(player_id=event.player_ids[0], criteria=criteria)
        case MatchmakerEventType.LEFT_QUEUE:
            return LeftQueueMessage(player_id=event.player_ids[0], criteria=criteria)
        case MatchmakerEventType.MATCH_FOUND:
            return MatchFoundMessage(player_ids=event.player_ids, criteria=criteria)
        case MatchmakerEventType.MATCH_NOT_FOUND:
            return MatchNotFoundMessage(player_id=event.player_ids[0], criteria=criteria)
        case MatchmakerEventType.JOINED_ROOM:
            return JoinedRoomMessage(player_id=event.player_ids[0], room_code=event.room_code)
        case MatchmakerEventType.LEFT_ROOM:
            return LeftRoomMessage(player_id=event.player_ids[0], room_code=event.room_code)
        case MatchmakerEventType.KICKED_FROM_ROOM:
            return KickedFromRoomMessage(
                player_id=event.player_ids[0], room_code=event.room_code
            )
        case MatchmakerEventType.ROOM_DESTROYED:
            return RoomDestroyedMessage(room_code=event.room_code)
        case MatchmakerEventType.LABEL_UPDATED:
            return LabelUpdatedMessage(room_code=event.room_code, criteria=criteria)

    raise ValueError(f"Unknown event type: {event.type}")


def serialize_event(event: MatchmakerEvent) -> dict[str, Any]:
    """Serialize an event to a JSON-compatible dict."""
    return event_to_message(event).model_dump()
