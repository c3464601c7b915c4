"""Morse timing state machine.

TimingEngine turns key presses into dots and dashes, and decides from the
idle time after the last release when a character is finished and when a
word space is due. It does no scheduling of its own: the owner calls
``tick()`` every few milliseconds.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

from mb_clock import Clock
from mb_config import MorseConfig
from mb_decoder import Symbol, decode, morse_key

logger = logging.getLogger(__name__)


class CharacterSink(Protocol):
    """Receiver of decoded text, one character (or space) per call."""

    def insert_character(self, text: str) -> None: ...


@dataclass
class TimingState:
    """Key and timing state between events."""
    is_pressed: bool = False
    last_begin: Optional[float] = None
    last_end: Optional[float] = None
    may_insert_space: bool = False


class TimingEngine:
    """Classify presses into symbols and flush characters after idle gaps.

    Public methods:
      - press_begin() / press_end(): key went down / up
      - manual_symbol(symbol): append a dot or dash directly
      - tick(): check the idle time and emit a character or a space
    """
    def __init__(self, config: MorseConfig, clock: Clock, sink: CharacterSink):
        self.config = config
        self.clock = clock
        self.sink = sink
        self.state = TimingState()
        self.pending: List[Symbol] = []

    @property
    def pending_morse(self) -> str:
        """Symbols of the character being entered, as a dot/dash string."""
        return morse_key(self.pending)

    def press_begin(self) -> bool:
        """Key down. Returns False if the key was already down."""
        if self.state.is_pressed:
            logger.debug("Ignoring press_begin while pressed")
            return False
        self.state.is_pressed = True
        self.state.last_begin = self.clock.now()
        return True

    def press_end(self) -> Optional[Symbol]:
        """Key up. Returns the symbol appended, or None if the key was not down."""
        if not self.state.is_pressed or self.state.last_begin is None:
            logger.debug("Ignoring press_end without press_begin")
            return None
        now = self.clock.now()
        self.state.is_pressed = False
        self.state.last_end = now
        duration = now - self.state.last_begin
        symbol = Symbol.DOT if duration < self.config.symbol_threshold else Symbol.DASH
        self.pending.append(symbol)
        logger.debug("Press of %.3fs -> %s", duration, symbol)
        return symbol

    def manual_symbol(self, symbol: Symbol) -> bool:
        """Append ``symbol`` as if it had just been keyed. Ignored while pressed."""
        if self.state.is_pressed:
            logger.debug("Ignoring manual %s while pressed", symbol)
            return False
        now = self.clock.now()
        self.state.last_begin = now
        self.state.last_end = now
        self.pending.append(symbol)
        return True

    def tick(self) -> Optional[str]:
        """Emit a finished character or a word space if enough time went by.

        Returns the text sent to the sink, if any. A tick that flushes a
        character never also emits the space; that needs a later tick.
        """
        state = self.state
        if state.is_pressed or state.last_end is None:
            return None
        idle = self.clock.now() - state.last_end

        if self.pending:
            if idle < self.config.char_gap:
                return None
            char = decode(self.pending, self.config.error_glyph)
            logger.debug("Flushing %s -> %r", self.pending_morse, char)
            self.pending = []
            state.may_insert_space = True
            self.sink.insert_character(char)
            return char

        if self.config.auto_space and state.may_insert_space and idle >= self.config.word_gap:
            state.may_insert_space = False
            self.sink.insert_character(' ')
            return ' '
        return None

    def reset(self) -> None:
        """Forget the character in progress without emitting anything."""
        self.pending = []
        self.state = TimingState()
