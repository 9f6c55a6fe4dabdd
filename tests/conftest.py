"""Pytest configuration and fixtures."""

import random
from datetime import timedelta

import pytest
from fakes import EventRecorder, ManualClock

from matchmaker.service import Matchmaker
from matchmaker.settings import MatchmakerSettings, get_settings


@pytest.fixture(autouse=True)
def clear_settings_cache() -> None:
    """Make every test read settings afresh."""
    get_settings.cache_clear()


@pytest.fixture
def clock() -> ManualClock:
    """A clock frozen until advanced."""
    return ManualClock()


@pytest.fixture
def recorder() -> EventRecorder:
    """An event subscriber that records everything."""
    return EventRecorder()


@pytest.fixture
def settings() -> MatchmakerSettings:
    """Deterministic settings: no settling period, no shuffling, no bot-fill."""
    return MatchmakerSettings(
        minimum_wait_time=timedelta(0),
        maximum_wait_time=timedelta(seconds=30),
        shuffle_players=False,
        enable_bot_fill=False,
        sweep_interval=timedelta(milliseconds=10),
    )


@pytest.fixture
def matchmaker(
    settings: MatchmakerSettings, clock: ManualClock, recorder: EventRecorder
) -> Matchmaker:
    """A matchmaker wired to the manual clock and recorder."""
    mm = Matchmaker(settings=settings, clock=clock, rng=random.Random(1234))
    mm.subscribe(recorder)
    return mm
