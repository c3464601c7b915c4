"""Morse symbol type and dictionary lookups.

The decoder is a pure function of the symbol sequence and the error glyph:
it keeps no state and never fails.
"""
from enum import Enum
from typing import Dict, Iterable, Optional

from mb_utils import MORSE_DICTIONARY


class Symbol(Enum):
    """A single Morse element."""
    DOT = '.'
    DASH = '-'

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_char(cls, char: str) -> 'Symbol':
        """Parse '.' or '-' into a Symbol. Raises ValueError otherwise."""
        return cls(char)


def morse_key(symbols: Iterable[Symbol]) -> str:
    """Join symbols into the dot/dash string used as dictionary key."""
    return ''.join(s.value for s in symbols)


def character_for_morse(key: str, error_glyph: str) -> str:
    """Return the character for a dot/dash key, or ``error_glyph``.

    Empty dictionary values count as missing.
    """
    char = MORSE_DICTIONARY.get(key)
    if not char:
        return error_glyph
    return char


def decode(symbols: Iterable[Symbol], error_glyph: str) -> str:
    """Decode an ordered symbol sequence into a character."""
    return character_for_morse(morse_key(symbols), error_glyph)


_REVERSE: Dict[str, str] = {char.lower(): key for key, char in MORSE_DICTIONARY.items()}


def morse_for_character(char: str) -> Optional[str]:
    """Reverse lookup: dot/dash key for ``char`` (case insensitive), or None."""
    return _REVERSE.get(char.lower())
