from __future__ import annotations

import pytest

from mb_controller import TICK_INTERVAL, MorseController
from mb_decoder import Symbol
from mb_synth import ToneFrequency


@pytest.fixture
def controller(sink, scheduler, config, clock, backend) -> MorseController:
    ctl = MorseController(sink, scheduler, config=config, clock=clock, backend=backend)
    yield ctl
    ctl.close()


def test_tick_loop_starts_on_construction(controller, scheduler):
    assert controller.running
    assert scheduler.pending == 1


def test_tap_is_decoded_by_the_tick_loop(controller, scheduler, sink):
    controller.begin_press()
    scheduler.advance(0.1)
    controller.end_press()
    scheduler.advance(0.3)
    assert sink.chars == []
    scheduler.advance(0.1)
    assert sink.chars == ["e"]


def test_flush_happens_within_one_tick_of_char_gap(controller, scheduler, clock, config, sink):
    controller.manual_symbol(Symbol.DASH)
    scheduler.run_until(config.char_gap - 0.001)
    assert sink.chars == []
    scheduler.run_until(config.char_gap + TICK_INTERVAL + 0.001)
    assert sink.chars == ["t"]


def test_word_space_follows_character(controller, scheduler, sink):
    controller.manual_symbol(Symbol.DOT)
    controller.manual_symbol(Symbol.DASH)
    scheduler.advance(2.0)
    assert sink.chars == ["a", " "]


def test_manual_symbols_do_not_sound(controller, backend):
    controller.manual_symbol(Symbol.DOT)
    assert backend.changes == []


def test_minimum_beep_through_controller(controller, scheduler, backend):
    controller.begin_press()
    assert backend.volume == 1
    scheduler.advance(0.1)
    controller.end_press()
    scheduler.run_until(0.49)
    assert backend.volume == 1
    scheduler.run_until(0.51)
    assert backend.volume == 0
    off_at = backend.changes[-1][0]
    assert off_at >= 0.5 - 1e-9


def test_close_stops_loop_and_audio(controller, scheduler, backend, sink):
    controller.begin_press()
    controller.close()
    assert not controller.running
    assert backend.volume == 0
    assert backend.stopped
    assert scheduler.pending == 0

    controller.manual_symbol(Symbol.DOT)
    scheduler.advance(2.0)
    assert sink.chars == []


def test_audio_failure_keeps_decoding(sink, scheduler, config, clock, failing_backend):
    ctl = MorseController(sink, scheduler, config=config, clock=clock, backend=failing_backend)
    assert not ctl.tone_gate.available
    ctl.begin_press()
    scheduler.advance(0.5)
    ctl.end_press()
    scheduler.advance(0.5)
    assert sink.chars == ["t"]
    assert failing_backend.changes == []
    ctl.close()


def test_config_changes_apply_without_rebuilding(controller, scheduler, config, sink):
    config.error_glyph = "*"
    for s in "......":
        controller.manual_symbol(Symbol.from_char(s))
    scheduler.advance(0.5)
    assert sink.chars == ["*"]


def test_tone_frequency_is_fixed_at_construction(controller, config):
    config.tone_frequency = ToneFrequency.HIGH
    assert controller.tone_frequency is ToneFrequency.MIDDLE


def test_duplicate_begin_does_not_restart_the_tone(controller, scheduler, backend, sink):
    controller.begin_press()
    scheduler.run_until(0.45)
    controller.begin_press()
    scheduler.run_until(0.6)
    controller.end_press()

    assert backend.volume == 0
    assert backend.changes == [(0.0, 1), (0.6, 0)]
    assert scheduler.pending == 1  # only the tick
    scheduler.run_until(1.0)
    assert sink.chars == ["t"]


def test_end_without_begin_is_silent(controller, scheduler, backend, sink):
    scheduler.run_until(0.2)
    controller.end_press()
    scheduler.run_until(2.0)

    assert backend.changes == []
    assert sink.chars == []


def test_repeated_end_keeps_single_minimum_beep(controller, scheduler, backend, sink):
    controller.begin_press()
    scheduler.run_until(0.1)
    controller.end_press()
    scheduler.run_until(0.2)
    controller.end_press()
    scheduler.run_until(0.8)

    assert [vol for _, vol in backend.changes] == [1, 0]
    assert backend.changes[-1][0] == pytest.approx(0.5)
    assert sink.chars == ["e"]


class _BrokenSink:
    def insert_character(self, text: str) -> None:
        raise RuntimeError("text field is gone")


def test_tick_loop_survives_a_failing_sink(scheduler, config, clock, backend):
    ctl = MorseController(_BrokenSink(), scheduler, config=config, clock=clock, backend=backend)
    ctl.manual_symbol(Symbol.DOT)
    with pytest.raises(RuntimeError):
        scheduler.run_until(1.0)

    assert ctl.running
    assert scheduler.pending == 1
    assert ctl.engine.pending == []
    ctl.close()
