from __future__ import annotations

import numpy as np
import pytest

import mb_audio
from mb_audio import AudioInitError, LoopingTone
from mb_synth import ToneFrequency, loop_length, tone_loop


def test_loop_holds_whole_cycles():
    n = loop_length(720, 48000)
    assert n == 200
    loop = tone_loop(720, 48000, gain=0.5)
    assert loop.dtype == np.float32
    assert len(loop) == n
    assert np.max(np.abs(loop)) <= 0.5 + 1e-6
    # the sample after the last one would be sin(0)
    step = 2 * np.pi * 720 / 48000
    assert np.sin(n * step) == pytest.approx(0.0, abs=1e-9)


def test_frequency_names():
    assert ToneFrequency.EXTRA_HIGH.hz == 1100
    assert ToneFrequency.EXTRA_HIGH.description == "Extra High"
    assert ToneFrequency.from_name("Extra High") is ToneFrequency.EXTRA_HIGH
    assert ToneFrequency.from_name("low") is ToneFrequency.LOW
    with pytest.raises(ValueError):
        ToneFrequency.from_name("600")


def test_render_is_silent_until_volume_raised():
    tone = LoopingTone(ToneFrequency.LOW)
    block = tone.render(512)
    assert block.shape == (512,)
    assert not np.any(block)


def test_volume_ramps_up_then_holds():
    tone = LoopingTone(ToneFrequency.LOW, sample_rate=48000, gain=1.0, ramp_seconds=0.005)
    tone.set_volume(1)
    block = tone.render(48000 // 100)
    ramp = 240  # 5 ms at 48 kHz
    loop = tone_loop(600, 48000, gain=1.0)
    expected = np.resize(loop, len(block))
    # after the ramp the output is the plain loop
    np.testing.assert_allclose(block[ramp:], expected[ramp:], atol=1e-6)
    # inside the ramp it is attenuated
    assert np.all(np.abs(block[:ramp]) <= np.abs(expected[:ramp]) + 1e-6)


def test_volume_ramps_down_to_silence():
    tone = LoopingTone(ToneFrequency.HIGH, ramp_seconds=0.005)
    tone.set_volume(1)
    tone.render(1024)
    tone.set_volume(0)
    block = tone.render(1024)
    assert np.any(block[:100])
    assert not np.any(block[240:])


def test_loop_continues_across_blocks():
    tone = LoopingTone(ToneFrequency.MIDDLE, gain=1.0, ramp_seconds=0.001)
    tone.set_volume(1)
    tone.render(100)
    a = tone.render(150)
    b = tone.render(150)
    loop = tone_loop(720, 48000, gain=1.0)
    joined = np.concatenate([a, b])
    expected = np.resize(np.roll(loop, -100), len(joined))
    np.testing.assert_allclose(joined, expected, atol=1e-6)


def test_set_volume_is_clamped():
    tone = LoopingTone()
    tone.set_volume(3)
    assert tone.volume == 1.0
    tone.set_volume(-1)
    assert tone.volume == 0.0


def test_prepare_without_sounddevice_raises(monkeypatch):
    monkeypatch.setattr(mb_audio, "sd", None)
    tone = LoopingTone()
    with pytest.raises(AudioInitError):
        tone.prepare()
    assert not tone.is_open


class _FakeStream:
    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.started = False
        self.closed = False

    def start(self):
        self.started = True

    def stop(self):
        self.started = False

    def close(self):
        self.closed = True


class _FakeSoundDevice:
    def __init__(self, fail=False):
        self.fail = fail
        self.streams = []

    def OutputStream(self, **kwargs):
        if self.fail:
            raise OSError("no default output device")
        stream = _FakeStream(**kwargs)
        self.streams.append(stream)
        return stream


def test_prepare_opens_mono_stream_and_stop_closes(monkeypatch):
    fake = _FakeSoundDevice()
    monkeypatch.setattr(mb_audio, "sd", fake)
    tone = LoopingTone(ToneFrequency.HIGH)
    tone.prepare()
    tone.prepare()
    assert len(fake.streams) == 1
    stream = fake.streams[0]
    assert stream.started
    assert stream.kwargs["channels"] == 1
    assert stream.kwargs["samplerate"] == 48000

    outdata = np.ones((64, 1), dtype=np.float32)
    stream.kwargs["callback"](outdata, 64, None, None)
    assert not np.any(outdata)

    tone.stop()
    tone.stop()
    assert stream.closed
    assert not tone.is_open


def test_device_error_becomes_audio_init_error(monkeypatch):
    monkeypatch.setattr(mb_audio, "sd", _FakeSoundDevice(fail=True))
    with pytest.raises(AudioInitError):
        LoopingTone().prepare()
