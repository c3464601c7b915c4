"""Side-tone synthesizer module.

Contains the ToneFrequency choices and the helper that builds the looping
sine sample the audio backend plays while the key is down.
"""
from enum import Enum
from math import gcd
import numpy as np
from mb_utils import DEFAULT_SAMPLE_RATE


class ToneFrequency(Enum):
    """Selectable side-tone pitches, in Hz."""
    LOW = 600
    MIDDLE = 720
    HIGH = 900
    EXTRA_HIGH = 1100

    @property
    def hz(self) -> int:
        return self.value

    @property
    def description(self) -> str:
        """Human readable label, e.g. 'Extra High'."""
        return self.name.replace('_', ' ').title()

    @classmethod
    def from_name(cls, name: str) -> 'ToneFrequency':
        """Look a frequency up by enum name or description (case insensitive).

        Raises:
            ValueError: if ``name`` matches no frequency.
        """
        wanted = str(name).strip().upper().replace(' ', '_')
        try:
            return cls[wanted]
        except KeyError:
            raise ValueError(f"Unknown tone frequency: {name!r}") from None


def loop_length(tone_hz: int, sample_rate: int = DEFAULT_SAMPLE_RATE) -> int:
    """Smallest sample count that holds a whole number of sine cycles.

    Looping a buffer of this length has no phase jump at the seam.
    """
    return sample_rate // gcd(sample_rate, int(tone_hz))


def tone_loop(tone_hz: int, sample_rate: int = DEFAULT_SAMPLE_RATE, gain: float = 0.25) -> 'np.ndarray':
    """Synthesize a seamless mono sine loop.

    Args:
        tone_hz: frequency in Hz (integer, so the loop closes exactly)
        sample_rate: output sample rate
        gain: peak amplitude

    Returns:
        A float32 numpy array of shape (n,) scaled by gain.
    """
    n = loop_length(tone_hz, sample_rate)
    t = np.arange(n, dtype=np.float64) / sample_rate
    sig = np.sin(2 * np.pi * tone_hz * t)
    return (sig * gain).astype(np.float32)
