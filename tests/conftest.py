from __future__ import annotations

from typing import List, Tuple

import pytest

from mb_audio import AudioInitError
from mb_clock import ManualClock
from mb_config import MorseConfig
from mb_engine import TimingEngine
from mb_scheduler import ManualScheduler


class RecordingSink:
    def __init__(self):
        self.chars: List[str] = []

    def insert_character(self, text: str) -> None:
        self.chars.append(text)


class RecordingBackend:
    """Audio backend stand-in that logs (time, volume) changes."""

    def __init__(self, clock: ManualClock):
        self.clock = clock
        self.prepared = False
        self.stopped = False
        self.volume = 0
        self.changes: List[Tuple[float, float]] = []

    def prepare(self) -> None:
        self.prepared = True

    def set_volume(self, volume: float) -> None:
        self.volume = volume
        self.changes.append((self.clock.now(), volume))

    def stop(self) -> None:
        self.stopped = True


class FailingBackend(RecordingBackend):
    def prepare(self) -> None:
        raise AudioInitError("no device")


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def scheduler(clock) -> ManualScheduler:
    return ManualScheduler(clock)


@pytest.fixture
def config() -> MorseConfig:
    return MorseConfig(wpm=10, auto_space=True, error_glyph="#")


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def backend(clock) -> RecordingBackend:
    return RecordingBackend(clock)


@pytest.fixture
def engine(config, clock, sink) -> TimingEngine:
    return TimingEngine(config, clock, sink)


@pytest.fixture
def failing_backend(clock) -> FailingBackend:
    return FailingBackend(clock)
