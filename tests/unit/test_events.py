"""Tests for event subscription and delivery."""

import logging

import pytest
from fakes import EventRecorder, FakeCriteria, FakePlayer

from matchmaker.events import MatchmakerEvent, MatchmakerEvents, MatchmakerEventType


class TestMatchmakerEvent:
    """Tests for MatchmakerEvent constructors."""

    def test_match_found(self) -> None:
        """Test that match_found keeps player order and criteria."""
        players = [FakePlayer("b"), FakePlayer("a")]
        criteria = FakeCriteria("duel", 2)

        event = MatchmakerEvent.match_found(players, criteria)

        assert event.type == MatchmakerEventType.MATCH_FOUND
        assert event.player_ids == ["b", "a"]
        assert event.criteria is criteria
        assert event.room_code is None

    def test_room_destroyed_has_no_players(self) -> None:
        """Test that room_destroyed only carries the code."""
        event = MatchmakerEvent.room_destroyed("012345")

        assert event.players == []
        assert event.player is None
        assert event.room_code == "012345"

    def test_single_player_events(self) -> None:
        """Test the per-player accessor."""
        event = MatchmakerEvent.kicked_from_room(FakePlayer("a"), "000001")

        assert event.player == FakePlayer("a")
        assert event.type == MatchmakerEventType.KICKED_FROM_ROOM


class TestMatchmakerEvents:
    """Tests for MatchmakerEvents dispatch."""

    @pytest.mark.asyncio
    async def test_registration_order(self) -> None:
        """Test that subscribers are called in registration order."""
        events = MatchmakerEvents()
        calls: list[str] = []
        events.subscribe(lambda e: calls.append("first"))
        events.subscribe(lambda e: calls.append("second"))

        await events.publish([MatchmakerEvent.room_destroyed("000001")])

        assert calls == ["first", "second"]

    @pytest.mark.asyncio
    async def test_event_order_preserved(self, recorder: EventRecorder) -> None:
        """Test that events arrive in the order they were produced."""
        events = MatchmakerEvents()
        events.subscribe(recorder)
        produced = [
            MatchmakerEvent.match_not_found(FakePlayer("a"), FakeCriteria("duel")),
            MatchmakerEvent.match_found([FakePlayer("b"), FakePlayer("c")], FakeCriteria("duel")),
        ]

        await events.publish(produced)

        assert recorder.events == produced

    @pytest.mark.asyncio
    async def test_type_filter(self, recorder: EventRecorder) -> None:
        """Test subscribing to specific event types."""
        events = MatchmakerEvents()
        events.subscribe(recorder, MatchmakerEventType.ROOM_DESTROYED)

        await events.publish(
            [
                MatchmakerEvent.joined_room(FakePlayer("a"), "000001"),
                MatchmakerEvent.room_destroyed("000001"),
            ]
        )

        assert recorder.types == [MatchmakerEventType.ROOM_DESTROYED]

    @pytest.mark.asyncio
    async def test_async_subscriber(self) -> None:
        """Test that coroutine subscribers are awaited."""
        events = MatchmakerEvents()
        received: list[str] = []

        async def on_event(event: MatchmakerEvent) -> None:
            received.append(event.room_code)

        events.subscribe(on_event)
        await events.publish([MatchmakerEvent.room_destroyed("000002")])

        assert received == ["000002"]

    @pytest.mark.asyncio
    async def test_unsubscribe(self, recorder: EventRecorder) -> None:
        """Test removing a subscriber."""
        events = MatchmakerEvents()
        unsubscribe = events.subscribe(recorder)

        unsubscribe()
        unsubscribe()
        await events.publish([MatchmakerEvent.room_destroyed("000001")])

        assert recorder.events == []
        assert events.subscriber_count == 0

    @pytest.mark.asyncio
    async def test_same_callback_subscribed_twice(self, recorder: EventRecorder) -> None:
        """Test that unsubscribing removes only its own registration."""
        events = MatchmakerEvents()
        unsubscribe_first = events.subscribe(recorder)
        events.subscribe(recorder)

        unsubscribe_first()
        await events.publish([MatchmakerEvent.room_destroyed("000001")])

        assert len(recorder.events) == 1

    @pytest.mark.asyncio
    async def test_failing_subscriber_isolated(
        self, recorder: EventRecorder, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test that a raising subscriber does not stop delivery."""
        events = MatchmakerEvents()

        def broken(event: MatchmakerEvent) -> None:
            raise ValueError("boom")

        events.subscribe(broken)
        events.subscribe(recorder)

        with caplog.at_level(logging.ERROR, logger="matchmaker.events"):
            await events.publish([MatchmakerEvent.room_destroyed("000001")])

        assert len(recorder.events) == 1
        assert "failed on room_destroyed" in caplog.text
