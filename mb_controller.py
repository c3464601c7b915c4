"""Controller wiring the timing engine, side-tone and character sink.

MorseController is the single object a front-end talks to. It forwards key
events to the TimingEngine and the ToneGate and keeps a 10 ms tick running
on the host loop so finished characters are flushed while the key is idle.
"""
import logging
from typing import Any, Optional

from mb_audio import LoopingTone
from mb_clock import Clock, MonotonicClock
from mb_config import MorseConfig
from mb_decoder import Symbol
from mb_engine import CharacterSink, TimingEngine
from mb_scheduler import Scheduler
from mb_tone import AudioBackend, ToneGate

logger = logging.getLogger(__name__)

TICK_INTERVAL = 0.01


class MorseController:
    """Facade over the Morse input engine.

    The tick loop starts on construction; call ``close()`` when done to stop
    it and release the audio output. The sink must outlive the controller.
    """
    def __init__(self, sink: CharacterSink, scheduler: Scheduler,
                 config: Optional[MorseConfig] = None, clock: Optional[Clock] = None,
                 backend: Optional[AudioBackend] = None):
        self.config = config if config is not None else MorseConfig()
        self.scheduler = scheduler
        self.clock = clock if clock is not None else MonotonicClock()
        if backend is None:
            backend = LoopingTone(self.config.tone_frequency)
        self.tone_frequency = self.config.tone_frequency

        self.engine = TimingEngine(self.config, self.clock, sink)
        self.tone_gate = ToneGate(backend, scheduler, self.clock, self.config)
        self._tick_handle: Any = None
        self.start()

    @property
    def running(self) -> bool:
        return self._tick_handle is not None

    def begin_press(self) -> None:
        # The side-tone follows only the presses the engine accepted
        if self.engine.press_begin():
            self.tone_gate.on_press_begin()

    def end_press(self) -> None:
        if self.engine.press_end() is not None:
            self.tone_gate.on_press_end()

    def manual_symbol(self, symbol: Symbol) -> None:
        self.engine.manual_symbol(symbol)

    def start(self) -> None:
        """Start the tick loop (no-op if already running)."""
        if self._tick_handle is None:
            self._tick_handle = self.scheduler.call_later(TICK_INTERVAL, self._tick)
            logger.debug("Tick loop started at %d WPM", self.config.wpm)

    def close(self) -> None:
        """Stop the tick loop and silence the side-tone."""
        if self._tick_handle is not None:
            self.scheduler.cancel(self._tick_handle)
            self._tick_handle = None
        self.tone_gate.close()
        logger.debug("Controller closed")

    def _tick(self) -> None:
        # Re-post first; the loop must survive a sink that raises
        self._tick_handle = self.scheduler.call_later(TICK_INTERVAL, self._tick)
        self.engine.tick()
