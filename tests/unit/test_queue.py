"""Tests for the waiting queue."""

import pytest
from fakes import FakeCriteria, FakePlayer, ManualClock

from matchmaker.queue import WaitingQueue


class TestWaitingQueue:
    """Tests for WaitingQueue."""

    @pytest.mark.asyncio
    async def test_join_stamps_entry_with_clock(self, clock: ManualClock) -> None:
        """Test that joining records the current time."""
        queue = WaitingQueue(clock=clock)
        entry = await queue.join(FakePlayer("a"), FakeCriteria("duel"))

        assert entry is not None
        assert entry.player_id == "a"
        assert entry.enqueued_at == clock.now
        assert len(queue) == 1

    @pytest.mark.asyncio
    async def test_join_preserves_order(self, clock: ManualClock) -> None:
        """Test that entries keep arrival order."""
        queue = WaitingQueue(clock=clock)
        for pid in ["a", "b", "c"]:
            await queue.join(FakePlayer(pid), FakeCriteria("duel"))
            clock.advance(1)

        snapshot = await queue.snapshot()
        assert [e.player_id for e in snapshot] == ["a", "b", "c"]
        assert snapshot[0].enqueued_at < snapshot[1].enqueued_at < snapshot[2].enqueued_at

    @pytest.mark.asyncio
    async def test_duplicate_join_rejected(self, clock: ManualClock) -> None:
        """Test that a queued player cannot hold a second entry."""
        queue = WaitingQueue(clock=clock)
        await queue.join(FakePlayer("a"), FakeCriteria("duel"))

        # Different criteria does not matter
        second = await queue.join(FakePlayer("a"), FakeCriteria("squad", 4))

        assert second is None
        snapshot = await queue.snapshot()
        assert len(snapshot) == 1
        assert snapshot[0].criteria.group_key == "duel"

    @pytest.mark.asyncio
    async def test_remove(self, clock: ManualClock) -> None:
        """Test removing a queued player."""
        queue = WaitingQueue(clock=clock)
        await queue.join(FakePlayer("a"), FakeCriteria("duel"))
        await queue.join(FakePlayer("b"), FakeCriteria("duel"))

        removed = await queue.remove("a")

        assert removed is not None
        assert removed.player == FakePlayer("a")
        assert [e.player_id for e in await queue.snapshot()] == ["b"]

    @pytest.mark.asyncio
    async def test_remove_absent_is_noop(self, clock: ManualClock) -> None:
        """Test removing a player who is not queued."""
        queue = WaitingQueue(clock=clock)
        await queue.join(FakePlayer("a"), FakeCriteria("duel"))

        assert await queue.remove("nobody") is None
        assert len(queue) == 1

    @pytest.mark.asyncio
    async def test_rejoin_after_remove(self, clock: ManualClock) -> None:
        """Test that a removed player can queue again with a fresh timestamp."""
        queue = WaitingQueue(clock=clock)
        await queue.join(FakePlayer("a"), FakeCriteria("duel"))
        await queue.remove("a")
        clock.advance(10)

        entry = await queue.join(FakePlayer("a"), FakeCriteria("duel"))

        assert entry is not None
        assert entry.enqueued_at == clock.now

    @pytest.mark.asyncio
    async def test_snapshot_is_a_copy(self, clock: ManualClock) -> None:
        """Test that mutating the queue does not affect an earlier snapshot."""
        queue = WaitingQueue(clock=clock)
        await queue.join(FakePlayer("a"), FakeCriteria("duel"))

        snapshot = await queue.snapshot()
        await queue.remove("a")

        assert len(snapshot) == 1
        assert len(queue) == 0

    @pytest.mark.asyncio
    async def test_players_filtered_by_group_key(self, clock: ManualClock) -> None:
        """Test listing players filtered by a criteria's group key."""
        queue = WaitingQueue(clock=clock)
        await queue.join(FakePlayer("a"), FakeCriteria("duel", 2))
        await queue.join(FakePlayer("b"), FakeCriteria("squad", 4))
        await queue.join(FakePlayer("c"), FakeCriteria("duel", 2))

        everyone = await queue.players()
        duelists = await queue.players(FakeCriteria("duel", 3))

        assert [p.player_id for p in everyone] == ["a", "b", "c"]
        assert [p.player_id for p in duelists] == ["a", "c"]
