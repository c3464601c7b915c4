"""Audio backend for the side-tone.

LoopingTone keeps a sounddevice output stream running for its whole life and
plays a seamless sine loop through it. Starting and stopping the beep only
moves the volume between 0 and 1, which keeps the key responsive and avoids
the scratch you get from re-opening a stream on every press. Level changes
are ramped over a few milliseconds so very short presses do not click.
"""
import logging

import numpy as np

try:
    import sounddevice as sd
except (ImportError, OSError):
    # OSError: the module imports but PortAudio itself is missing
    sd = None

from mb_synth import ToneFrequency, tone_loop
from mb_utils import DEFAULT_SAMPLE_RATE, env_ramp

logger = logging.getLogger(__name__)

# Audio envelope constants
RAMP_DURATION_SECONDS = 0.005
DEFAULT_GAIN = 0.25


class AudioInitError(RuntimeError):
    """The audio output could not be opened."""


class LoopingTone:
    """Looped sine sample whose volume is switched between 0 and 1.

    Public methods:
      - prepare(): open the output stream (volume starts at 0)
      - set_volume(volume): switch the tone on (1) or off (0)
      - stop(): close the stream
    """
    def __init__(self, frequency: ToneFrequency = ToneFrequency.MIDDLE,
                 sample_rate: int = DEFAULT_SAMPLE_RATE, gain: float = DEFAULT_GAIN,
                 ramp_seconds: float = RAMP_DURATION_SECONDS):
        self.frequency = frequency
        self.sample_rate = sample_rate
        self._sample = tone_loop(frequency.hz, sample_rate, gain)
        self._offset = 0

        ramp_len = max(2, int(ramp_seconds * sample_rate))
        # _curve[0] is silence, _curve[ramp_len] is full level
        self._curve = np.concatenate(([0.0], env_ramp(ramp_len - 1), [1.0])).astype(np.float32)
        self._ramp_len = ramp_len
        self._ramp_pos = 0

        self._target = 0.0
        self._stream = None

    @property
    def volume(self) -> float:
        """Requested volume (the audible level may still be ramping)."""
        return self._target

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    def prepare(self) -> None:
        """Open and start the output stream at volume 0.

        Raises:
            AudioInitError: if sounddevice is missing or the device fails.
        """
        if self._stream is not None:
            return
        if sd is None:
            raise AudioInitError("sounddevice is not available")
        self._target = 0.0
        try:
            stream = sd.OutputStream(samplerate=self.sample_rate, channels=1, dtype='float32',
                                     latency='low', callback=self._callback)
            stream.start()
        except Exception as e:
            raise AudioInitError(f"Cannot open audio output: {e}") from e
        self._stream = stream
        logger.debug("Side-tone stream open at %d Hz", self.frequency.hz)

    def set_volume(self, volume: float) -> None:
        self._target = min(1.0, max(0.0, float(volume)))

    def stop(self) -> None:
        """Silence and close the stream. Safe to call more than once."""
        self._target = 0.0
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.stop()
            stream.close()
        except Exception as e:
            logger.warning("Error closing audio stream: %s", e)

    def render(self, frames: int) -> 'np.ndarray':
        """Produce the next ``frames`` mono samples with the volume ramp applied."""
        goal = self._ramp_len if self._target >= 0.5 else 0
        pos = self._ramp_pos
        steps = np.arange(1, frames + 1)
        if goal > pos:
            positions = np.minimum(pos + steps, goal)
        elif goal < pos:
            positions = np.maximum(pos - steps, goal)
        else:
            positions = np.full(frames, pos)
        if frames:
            self._ramp_pos = int(positions[-1])
        env = self._curve[positions]

        n = len(self._sample)
        idx = (self._offset + np.arange(frames)) % n
        self._offset = (self._offset + frames) % n
        return self._sample[idx] * env

    def _callback(self, outdata, frames, time_info, status):
        if status:
            logger.debug("Audio status: %s", status)
        outdata[:, 0] = self.render(frames)
