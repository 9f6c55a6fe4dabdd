"""Periodic match engine.

Each sweep scans the waiting queue under the queue lock, groups entries by
criteria group key and turns them into matches or timeouts according to the
wait-time, shuffle and bot-fill settings. Events are delivered only after
the lock has been released.
"""

import asyncio
import logging
import random
from datetime import datetime

from matchmaker.events import MatchmakerEvent, MatchmakerEvents
from matchmaker.models import QueueEntry
from matchmaker.queue import WaitingQueue
from matchmaker.settings import MatchmakerSettings

logger = logging.getLogger(__name__)


def group_entries(entries: list[QueueEntry]) -> dict[str, list[QueueEntry]]:
    """Partition entries by group key.

    Keys appear in first-seen order and entries keep their queue order.
    """
    groups: dict[str, list[QueueEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.criteria.group_key, []).append(entry)
    return groups


class MatchEngine:
    """Runs matchmaking sweeps over a WaitingQueue.

    Sweeps can be run by hand with ``sweep()`` or periodically with
    ``start()``/``stop()``. The periodic loop never overlaps sweeps and only
    observes the stop signal between them.
    """

    def __init__(
        self,
        queue: WaitingQueue,
        events: MatchmakerEvents,
        settings: MatchmakerSettings,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            queue: Queue to sweep
            events: Subscribers to notify of outcomes
            settings: Wait-time, shuffle, bot-fill and interval settings
            rng: Random source for shuffling (a fresh one if None)
        """
        self._queue = queue
        self._events = events
        self._settings = settings
        self._rng = rng or random.Random()
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()
        self.sweep_count = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def sweep(self) -> list[MatchmakerEvent]:
        """Run one sweep and deliver its events.

        Returns:
            The events produced, in delivery order
        """
        produced: list[MatchmakerEvent] = []
        try:
            async with self._queue.lock:
                self._sweep_locked(self._queue.now(), produced)
        finally:
            # Outcomes already applied to the queue are delivered even if the sweep failed
            self.sweep_count += 1
            await self._events.publish(produced)
        return produced

    def _sweep_locked(self, now: datetime, produced: list[MatchmakerEvent]) -> None:
        """Match or time out queued players. Must be called with the queue lock held."""
        entries = self._queue.snapshot_locked()
        if not entries:
            return

        for group_key, group in group_entries(entries).items():
            self._process_group(group_key, group, now, produced)

    def _process_group(
        self,
        group_key: str,
        group: list[QueueEntry],
        now: datetime,
        produced: list[MatchmakerEvent],
    ) -> None:
        settings = self._settings

        if settings.shuffle_players:
            self._rng.shuffle(group)

        minimum_wait = settings.minimum_wait_time.total_seconds()
        maximum_wait = settings.maximum_wait_time.total_seconds()
        ready = [entry for entry in group if entry.waited(now) >= minimum_wait]

        while ready:
            first = ready[0]
            size = first.criteria.match_size

            if len(ready) >= size:
                matched = ready[:size]
                del ready[:size]
                produced.append(self._take_match(matched))
                logger.info(
                    f"Match found for {group_key}: {[e.player_id for e in matched]}"
                )
                continue

            if first.waited(now) < maximum_wait:
                # Leave the rest queued for a later sweep
                break

            if settings.enable_bot_fill:
                matched = list(ready)
                ready.clear()
                produced.append(self._take_match(matched))
                logger.info(
                    f"Bot-fill match for {group_key}: {len(matched)}/{size} players "
                    f"{[e.player_id for e in matched]}"
                )
                break

            self._queue.remove_locked(first.player_id)
            del ready[0]
            produced.append(MatchmakerEvent.match_not_found(first.player, first.criteria))
            logger.info(f"No match found for {first.player_id} in {group_key}, timed out")

    def _take_match(self, matched: list[QueueEntry]) -> MatchmakerEvent:
        for entry in matched:
            self._queue.remove_locked(entry.player_id)
        # The first matched entry's criteria describes the match
        return MatchmakerEvent.match_found(
            [entry.player for entry in matched], matched[0].criteria
        )

    def start(self) -> None:
        """Start the periodic sweep loop."""
        if self.running:
            return
        self._stopping.clear()
        self._task = asyncio.create_task(self._run(), name="matchmaker-sweep")
        logger.info(
            f"Match engine started (interval={self._settings.sweep_interval_seconds}s)"
        )

    async def stop(self) -> None:
        """Stop the loop, letting an in-progress sweep finish."""
        task = self._task
        if task is None:
            return
        self._stopping.set()
        await task
        self._task = None
        logger.info("Match engine stopped")

    async def _run(self) -> None:
        interval = self._settings.sweep_interval_seconds

        while not self._stopping.is_set():
            try:
                await self.sweep()
            except Exception:
                # Contained to this cycle; the next tick starts fresh
                logger.exception("Matchmaking sweep failed")

            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=interval)
            except TimeoutError:
                pass
