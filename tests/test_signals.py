from __future__ import annotations

import math

import numpy as np
import pytest

from sigsynth import signals
from sigsynth.signals import TAU


class _Scripted(signals.Signal):
    """Emits a fixed list of values, one per call, then zeros."""

    def __init__(self, values):
        self.values = list(values)
        self.calls: list[float] = []

    def sample(self, t):
        self.calls.append(t)
        idx = len(self.calls) - 1
        return self.values[idx] if idx < len(self.values) else 0.0

    def duplicate(self):
        clone = _Scripted(self.values)
        clone.calls = list(self.calls)
        return clone


class _Clock(signals.Signal):
    """Returns the time it is sampled at; a pure function of ``t``."""

    def __init__(self):
        self.seen: list[float] = []

    def sample(self, t):
        self.seen.append(t)
        return t

    def duplicate(self):
        return _Clock()


def test_constant_returns_value_every_call():
    const = signals.Constant(0.25)
    assert [const.sample(t) for t in (0.0, 1.0, 99.0)] == [0.25, 0.25, 0.25]


def test_as_signal_wraps_numbers_and_rejects_others():
    wrapped = signals.as_signal(3)
    assert isinstance(wrapped, signals.Constant)
    assert wrapped.value == 3.0
    osc = signals.Oscillator(440.0)
    assert signals.as_signal(osc) is osc
    with pytest.raises(TypeError):
        signals.as_signal("440")
    with pytest.raises(TypeError):
        signals.as_signal(True)


def test_oscillator_starts_at_cosine_zero():
    osc = signals.Oscillator(signals.Constant(440.0), sample_rate=44_100)
    assert osc.sample(0.0) == pytest.approx(1.0)


def test_oscillator_returns_to_start_after_one_period():
    sample_rate = 44_100
    freq = 441.0  # exactly 100 samples per cycle
    osc = signals.Oscillator(freq, sample_rate=sample_rate)
    period_samples = int(sample_rate / freq)
    outputs = [osc.sample(i / sample_rate) for i in range(period_samples)]
    assert min(osc.phase, TAU - osc.phase) < 1e-9
    assert osc.sample(period_samples / sample_rate) == pytest.approx(outputs[0], abs=1e-9)
    assert outputs[period_samples // 2] == pytest.approx(-1.0, abs=1e-9)


def test_oscillator_samples_frequency_once_per_call():
    freq = _Scripted([100.0] * 8)
    osc = signals.Oscillator(freq, sample_rate=1000)
    for i in range(8):
        osc.sample(i / 1000)
    assert len(freq.calls) == 8


def test_oscillator_follows_time_varying_frequency():
    sample_rate = 1000
    freq = _Scripted([0.0, 250.0, 250.0])
    osc = signals.Oscillator(freq, sample_rate=sample_rate)
    out = [osc.sample(i / sample_rate) for i in range(4)]
    # Phase holds for the zero-Hz sample, then advances a quarter turn per sample.
    assert out[0] == pytest.approx(1.0)
    assert out[1] == pytest.approx(1.0)
    assert out[2] == pytest.approx(0.0, abs=1e-12)
    assert out[3] == pytest.approx(-1.0)


def test_oscillator_rejects_bad_sample_rate():
    with pytest.raises(ValueError):
        signals.Oscillator(440.0, sample_rate=0)


def test_gain_scales_input():
    gain = signals.Gain(signals.Constant(0.5), 3.0)
    assert gain.sample(0.0) == pytest.approx(1.5)


def test_mixer_is_commutative():
    ts = [i / 8000 for i in range(200)]
    left = signals.Mixer(signals.Oscillator(220.0, sample_rate=8000), signals.Constant(0.3))
    right = signals.Mixer(signals.Constant(0.3), signals.Oscillator(220.0, sample_rate=8000))
    assert [left.sample(t) for t in ts] == [right.sample(t) for t in ts]


def test_mix_folds_to_sum():
    total = signals.mix(signals.Constant(0.1), signals.Constant(0.2), signals.Constant(0.3))
    assert total.sample(0.0) == pytest.approx(0.6)
    assert signals.mix().sample(0.0) == 0.0


def test_periodic_gate_pulses():
    gate = signals.PeriodicGate(0.5, 0.3)
    assert gate.sample(0.0) == 1.0
    assert gate.sample(0.29) == 1.0
    assert gate.sample(0.35) == 0.0
    assert gate.sample(0.6) == 1.0
    assert gate.sample(0.95) == 0.0


def test_periodic_gate_rejects_non_positive_period():
    with pytest.raises(ValueError):
        signals.PeriodicGate(0.0, 0.1)


def test_sample_player_plays_once_and_retriggers():
    gate = _Scripted([1, 1, 1, 1, 0, 1, 1])
    player = signals.SamplePlayer(gate, [0.1, 0.2, 0.3])
    out = [player.sample(i * 0.001) for i in range(7)]
    assert out == pytest.approx([0.1, 0.2, 0.3, 0.0, 0.0, 0.1, 0.2])


def test_sample_player_stores_read_only_copy():
    pcm = np.array([0.5, -0.5])
    player = signals.SamplePlayer(signals.Constant(1.0), pcm)
    pcm[0] = 9.0
    assert player.sample(0.0) == 0.5
    assert not player.samples.flags.writeable


def test_sample_player_rejects_multichannel_input():
    with pytest.raises(ValueError):
        signals.SamplePlayer(signals.Constant(1.0), np.zeros((2, 4)))


def test_step_sequence_uses_local_time():
    first = _Clock()
    second = _Clock()
    seq = signals.StepSequence([(first, 1.0), (second, 2.0)])
    assert seq.sample(1.5) == pytest.approx(0.5)
    assert second.seen == [pytest.approx(0.5)]
    assert first.seen == []


def test_step_sequence_loops_over_total_time():
    seq = signals.StepSequence([(_Clock(), 1.0), (_Clock(), 2.0)])
    assert seq.total_time == pytest.approx(3.0)
    for t in (0.0, 0.7, 1.25, 2.9):
        for k in (1, 2, 5):
            base = seq.duplicate().sample(t)
            looped = seq.duplicate().sample(t + k * seq.total_time)
            assert looped == pytest.approx(base, abs=1e-9)


def test_step_sequence_selects_segment_by_boundary():
    seq = signals.StepSequence([(1.0, 0.5), (2.0, 0.5), (3.0, 1.0)])
    assert seq.sample(0.0) == 1.0
    assert seq.sample(0.5) == 2.0
    assert seq.sample(0.99) == 2.0
    assert seq.sample(1.0) == 3.0


def test_step_sequence_empty_or_zero_length_is_silent():
    assert signals.StepSequence([]).sample(1.0) == 0.0
    child = _Scripted([1.0])
    seq = signals.StepSequence([(child, 0.0)])
    assert seq.sample(0.0) == 0.0
    assert child.calls == []


def test_step_sequence_loop_point_has_no_silent_gap():
    seq = signals.StepSequence([(1.0, 0.1)] * 10)
    # The loop length matches the segment walk, not an exactly rounded sum.
    assert seq.total_time == sum([0.1] * 10)
    assert seq.sample(math.nextafter(seq.total_time, 0.0)) == 1.0
    assert seq.sample(0.9999999999999999) == 1.0
    assert seq.sample(1.0) == 1.0


def test_step_sequence_rounding_past_last_boundary_is_silent():
    child = _Scripted([1.0])
    seq = signals.StepSequence([(signals.Constant(2.0), 0.5), (child, 0.5)])
    # A tiny negative time wraps to exactly the loop length.
    assert -1e-20 % seq.total_time == seq.total_time
    assert seq.sample(-1e-20) == 0.0
    assert child.calls == []


def test_step_sequence_rejects_negative_duration():
    with pytest.raises(ValueError):
        signals.StepSequence([(signals.Constant(1.0), -0.1)])


def test_duplicate_snapshots_oscillator_state():
    osc = signals.Oscillator(330.0, sample_rate=8000)
    for i in range(10):
        osc.sample(i / 8000)
    copy = osc.duplicate()
    assert copy.phase == osc.phase
    ts = [(10 + i) / 8000 for i in range(20)]
    expected = [osc.sample(t) for t in ts]
    assert [copy.sample(t) for t in ts] == expected


def test_duplicate_is_independent():
    source = signals.Envelope(
        signals.Constant(1.0), signals.Oscillator(440.0, sample_rate=8000), sample_rate=8000
    )
    for i in range(5):
        source.sample(i / 8000)
    copy = source.duplicate()
    snapshot = (copy.stage, copy.value, copy.input.phase)

    for i in range(500):
        source.sample(i / 8000)
    assert (copy.stage, copy.value, copy.input.phase) == snapshot

    copy.sample(0.0)
    copy.sample(0.0)
    assert copy.value != source.value


def test_duplicate_keeps_sample_player_cursor_and_shares_pcm():
    player = signals.SamplePlayer(signals.Constant(1.0), [0.1, 0.2, 0.3])
    player.sample(0.0)
    copy = player.duplicate()
    assert copy.index == 1
    assert copy.samples is player.samples
    assert copy.sample(0.0) == pytest.approx(0.2)
    assert player.index == 1


def test_step_sequence_duplicate_deep_copies_children():
    osc = signals.Oscillator(100.0, sample_rate=1000)
    seq = signals.StepSequence([(osc, 1.0)])
    copy = seq.duplicate()
    copied_osc = copy.steps[0][0]
    assert copied_osc is not osc
    seq.sample(0.0)
    assert copied_osc.phase == 0.0
    assert osc.phase == pytest.approx(TAU * 100.0 / 1000)


def test_signal_registry_and_describe():
    assert signals.SIGNAL_TYPES["adsr"] is signals.Envelope
    tree = signals.Gain(signals.Mixer(1.0, signals.Oscillator(2.0)), 0.5)
    lines = signals.describe(tree)
    assert lines[0].startswith("- Gain")
    assert any("Oscillator" in line for line in lines)
    assert math.isclose(tree.sample(0.0), 1.0)
