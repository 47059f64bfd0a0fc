from __future__ import annotations

import math

import numpy as np
import pytest

from sigsynth import signals
from sigsynth.render import frame_count, pan, render, summarise


class _Recorder(signals.Signal):
    def __init__(self):
        self.times: list[float] = []

    def sample(self, t):
        self.times.append(t)
        return 1.0

    def duplicate(self):
        return _Recorder()


def test_render_scaled_sine_end_to_end():
    sr = 44_100
    root = signals.Gain(signals.Oscillator(440.0, sample_rate=sr), 0.5)
    buffer = render(root, sr, sample_rate=sr, volume=1.0)
    assert buffer.shape == (2, sr)
    assert buffer.dtype == np.float64
    assert buffer[0, 0] == pytest.approx(0.5)
    assert buffer[1, 0] == pytest.approx(0.5)
    assert np.array_equal(buffer[0], buffer[1])
    rms = float(np.sqrt(np.mean(np.square(buffer[0]))))
    assert rms == pytest.approx(0.5 / math.sqrt(2.0), abs=1e-3)


def test_render_samples_root_once_per_frame():
    recorder = _Recorder()
    render(recorder, 5, sample_rate=10)
    assert recorder.times == pytest.approx([0.0, 0.1, 0.2, 0.3, 0.4])


def test_render_applies_master_volume():
    buffer = render(signals.Constant(1.0), 4, sample_rate=100, volume=0.4)
    assert np.allclose(buffer, 0.4)


def test_render_zero_frames():
    buffer = render(signals.Constant(1.0), 0)
    assert buffer.shape == (2, 0)


def test_render_rejects_bad_arguments():
    with pytest.raises(ValueError):
        render(signals.Constant(1.0), -1)
    with pytest.raises(ValueError):
        render(signals.Constant(1.0), 10, sample_rate=0)


def test_render_pans_hard_left():
    buffer = render(signals.Constant(1.0), 3, sample_rate=100, volume=1.0, pan_position=-1.0)
    assert np.allclose(buffer[0], 1.0)
    assert np.allclose(buffer[1], 0.0)


@pytest.mark.parametrize(
    "position, expected",
    [
        (0.0, (0.8, 0.8)),
        (-1.0, (0.8, 0.0)),
        (1.0, (0.0, 0.8)),
        (0.5, (0.4, 0.8)),
        (-0.25, (0.8, 0.6)),
        (3.0, (0.0, 0.8)),
    ],
)
def test_pan_law(position, expected):
    assert pan(0.8, position) == pytest.approx(expected)


def test_frame_count():
    assert frame_count(5.0, 44_100) == 220_500
    assert frame_count(0.0) == 0
    assert frame_count(0.29, 100) == 29
    assert frame_count(0.05, 8000) == 400
    with pytest.raises(ValueError):
        frame_count(-1.0)


def test_summarise_reports_peak_and_rms():
    buffer = np.array([[0.5, -0.5, 0.5, -0.5], [0.0, 0.0, 0.0, 0.0]])
    stats = summarise(buffer, 4)
    assert stats.frames == 4
    assert stats.seconds == pytest.approx(1.0)
    assert stats.peak == pytest.approx(0.5)
    assert stats.rms == pytest.approx(math.sqrt(0.125))


def test_summarise_empty_buffer():
    stats = summarise(np.zeros((2, 0)))
    assert stats.frames == 0
    assert stats.peak == 0.0
