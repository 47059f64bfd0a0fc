"""Offline render loop driving a signal graph into a stereo buffer."""

from __future__ import annotations

import time
from dataclasses import dataclass

import numpy as np

from .diagnostics import log_render_event, render_logging_enabled
from .signals import Signal
from .state import OUTPUT_CHANNELS, RAW_DTYPE, SAMPLE_RATE, VOLUME


@dataclass(slots=True)
class RenderStats:
    """Simple statistics captured for a rendered buffer."""

    frames: int
    seconds: float
    peak: float
    rms: float


def frame_count(duration: float, sample_rate: float = SAMPLE_RATE) -> int:
    """Number of whole frames in ``duration`` seconds."""

    if duration < 0:
        raise ValueError(f"duration must be non-negative, got {duration}")
    return int(round(duration * sample_rate))


def pan(sample: float, position: float = 0.0) -> tuple[float, float]:
    """Split a mono sample into ``(left, right)``.

    ``position`` runs from -1.0 (hard left) to 1.0 (hard right).  At 0.0 both
    channels carry the full sample; moving off centre attenuates the far side
    linearly.
    """

    position = min(max(position, -1.0), 1.0)
    return sample * min(1.0, 1.0 - position), sample * min(1.0, 1.0 + position)


def render(
    root: Signal,
    frames: int,
    *,
    sample_rate: float = SAMPLE_RATE,
    volume: float = VOLUME,
    pan_position: float = 0.0,
) -> np.ndarray:
    """Render ``frames`` frames of ``root`` into a ``(2, frames)`` buffer.

    The root is sampled exactly once per frame at ``t = i / sample_rate``.
    """

    if frames < 0:
        raise ValueError(f"frames must be non-negative, got {frames}")
    if sample_rate <= 0:
        raise ValueError(f"sample_rate must be positive, got {sample_rate}")

    sample_period = 1.0 / float(sample_rate)
    buffer = np.zeros((OUTPUT_CHANNELS, frames), dtype=RAW_DTYPE)
    left = buffer[0]
    right = buffer[1]

    log_enabled = render_logging_enabled()
    if log_enabled:
        log_render_event(f"render start: {frames} frames @ {sample_rate:g} Hz")
        started = time.perf_counter()

    for i in range(frames):
        t = i * sample_period
        value = root.sample(t) * volume
        left[i], right[i] = pan(value, pan_position)

    if log_enabled:
        elapsed = time.perf_counter() - started
        log_render_event(f"render done: {frames} frames in {elapsed:.3f}s")
    return buffer


def summarise(buffer: np.ndarray, sample_rate: float = SAMPLE_RATE) -> RenderStats:
    """Return peak/RMS statistics for a rendered ``(channels, frames)`` buffer."""

    data = np.asarray(buffer, dtype=RAW_DTYPE)
    frames = int(data.shape[-1]) if data.ndim else 0
    if data.size == 0:
        return RenderStats(frames=frames, seconds=0.0, peak=0.0, rms=0.0)
    return RenderStats(
        frames=frames,
        seconds=frames / float(sample_rate),
        peak=float(np.max(np.abs(data))),
        rms=float(np.sqrt(np.mean(np.square(data)))),
    )


__all__ = ["RenderStats", "frame_count", "pan", "render", "summarise"]
