"""Side-tone gate.

ToneGate switches the audio backend on when the key goes down and off when
it comes up, but never before MIN_BEEP_SECONDS have passed since the press
started: a very short dot would otherwise be gone before it is heard.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from mb_audio import AudioInitError
from mb_clock import Clock
from mb_config import MorseConfig
from mb_scheduler import Scheduler

logger = logging.getLogger(__name__)

MIN_BEEP_SECONDS = 0.5


class AudioBackend(Protocol):
    """Prepared looping tone whose volume is toggled between 0 and 1."""

    def prepare(self) -> None: ...
    def set_volume(self, volume: float) -> None: ...
    def stop(self) -> None: ...


@dataclass
class ToneState:
    is_playing: bool = False
    begin: Optional[float] = None
    min_stop_at: Optional[float] = None


class ToneGate:
    """Turn beep on/off requests into backend volume changes."""

    def __init__(self, backend: AudioBackend, scheduler: Scheduler, clock: Clock,
                 config: MorseConfig, min_beep: float = MIN_BEEP_SECONDS):
        self.backend = backend
        self.scheduler = scheduler
        self.clock = clock
        self.config = config
        self.min_beep = min_beep
        self.state = ToneState()
        self._deferred_stop: Any = None

        self.available = True
        try:
            backend.prepare()
        except AudioInitError as e:
            logger.warning("Side-tone disabled: %s", e)
            self.available = False

    @property
    def stop_pending(self) -> bool:
        return self._deferred_stop is not None

    def on_press_begin(self) -> None:
        if not self.available or not self.config.sounds_enabled:
            return
        self._cancel_deferred_stop()
        now = self.clock.now()
        self.state.begin = now
        self.state.min_stop_at = now + self.min_beep
        self.backend.set_volume(1)
        self.state.is_playing = True

    def on_press_end(self) -> None:
        # A pending stop already covers this press
        if not self.state.is_playing or self._deferred_stop is not None:
            return
        now = self.clock.now()
        if now >= self.state.min_stop_at:
            self._silence()
            return
        delay = self.state.min_stop_at - now
        logger.debug("Holding side-tone %.3fs longer", delay)
        self._deferred_stop = self.scheduler.call_later(delay, self._on_deferred_stop)

    def close(self) -> None:
        """Silence the tone and release the audio backend."""
        self._cancel_deferred_stop()
        if self.available:
            self.backend.set_volume(0)
            self.backend.stop()
        self.state.is_playing = False

    def _on_deferred_stop(self) -> None:
        self._deferred_stop = None
        self._silence()

    def _silence(self) -> None:
        self.backend.set_volume(0)
        self.state.is_playing = False
        self.state.min_stop_at = None

    def _cancel_deferred_stop(self) -> None:
        if self._deferred_stop is not None:
            self.scheduler.cancel(self._deferred_stop)
            self._deferred_stop = None
