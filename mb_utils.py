"""Utility functions and constants for Morseboard.

This module holds shared constants (MORSE_DICTIONARY, defaults) and small
helpers used across the package: timing math and envelope generation.
"""
from typing import Dict
import numpy as np

# Morse mapping from dot/dash keys to the character that gets typed.
# "----" maps to the two-letter "CH" by historical convention.
MORSE_DICTIONARY: Dict[str, str] = {
    '.-': 'a',    '-...': 'b',  '-.-.': 'c',  '-..': 'd',   '.': 'e',
    '..-.': 'f',  '--.': 'g',   '....': 'h',  '..': 'i',    '.---': 'j',
    '-.-': 'k',   '.-..': 'l',  '--': 'm',    '-.': 'n',    '---': 'o',
    '.--.': 'p',  '--.-': 'q',  '.-.': 'r',   '...': 's',   '-': 't',
    '..-': 'u',   '...-': 'v',  '.--': 'w',   '-..-': 'x',  '-.--': 'y',
    '--..': 'z',
    '.-.-': 'ä',  '---.': 'ö',  '..--': 'ü',  '...--..': 'ß', '----': 'CH',
    '.----': '1', '..---': '2', '...--': '3', '....-': '4', '.....': '5',
    '-....': '6', '--...': '7', '---..': '8', '----.': '9', '-----': '0',
    '..--..': '?', '..--.': '!', '.--.-.': '@', '.-.-.-': '.', '--..--': ',',
    '-...-': '=', '.-.-.': '+',
}

# Default audio/speed constants
DEFAULT_SAMPLE_RATE = 48000
DEFAULT_WPM = 10
DEFAULT_ERROR_GLYPH = '\N{CONFUSED FACE}'

# Dot/dash and gap lengths, in dits
DASH_UNITS = 3
CHAR_GAP_UNITS = 3
WORD_GAP_UNITS = 7


def dit_seconds(wpm: float) -> float:
    """Convert words-per-minute (WPM) to the duration of a 'dit' in seconds.

    Uses the PARIS standard (50 dits per word), so one dit lasts 1.2 / WPM.

    Args:
        wpm: Words per minute (must be > 0).

    Returns:
        Duration in seconds for a single dit element.
    """
    return 1.2 / wpm


def env_ramp(samples: int) -> 'np.ndarray':
    """Generate a cosine-shaped envelope ramp of length ``samples``.

    The ramp is useful to apply short fade-in/fade-out on tones to avoid clicks.

    Args:
        samples: Number of ramp samples (int).

    Returns:
        A numpy float32 array containing the ramp from ~0 to 1.
    """
    t = np.arange(samples, dtype=np.float32)
    ramp = 0.5 * (1 - np.cos(np.pi * (t + 1) / (samples + 1)))
    return ramp.astype(np.float32)
