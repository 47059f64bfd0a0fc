"""High level application orchestration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .config import AppConfig, PercussionConfig, load_configuration
from .diagnostics import log_render_event
from .melody import build_voice
from .render import frame_count, render
from .signals import Gain, Mixer, PeriodicGate, SamplePlayer, Signal, describe
from .wavio import read_wav


def build_percussion(
    config: PercussionConfig,
    sample_rate: int,
    notices: Optional[List[str]] = None,
) -> Signal:
    """Load the configured sample and gate it with a periodic pulse train.

    Samples are played one per output frame without resampling.  When the
    file's rate differs from ``sample_rate`` a warning is appended to
    ``notices`` and written to the render log.
    """

    samples, file_rate = read_wav(config.sample_file)
    log_render_event(
        f"loaded percussion sample '{config.sample_file}' ({samples.shape[0]} samples @ {file_rate} Hz)"
    )
    if file_rate != sample_rate:
        warning = (
            f"percussion sample '{config.sample_file}' is {file_rate} Hz but the render runs at "
            f"{sample_rate} Hz; it will play at {sample_rate / file_rate:.3g}x speed"
        )
        log_render_event(f"warning: {warning}")
        if notices is not None:
            notices.append(warning)
    gate = PeriodicGate(config.period, config.duration)
    return Gain(SamplePlayer(gate, samples), config.gain)


def build_signal_graph(config: AppConfig, notices: Optional[List[str]] = None) -> Signal:
    """Assemble the song: enveloped melody voice plus the optional percussion voice."""

    sample_rate = config.render.sample_rate
    melody = config.melody
    voice: Signal = build_voice(
        melody.notes,
        melody.bpm,
        envelope=config.envelope.to_params(),
        silence_gap=melody.silence_gap,
        harmonics=melody.harmonics,
        sample_rate=sample_rate,
    )
    log_render_event(
        f"built melody voice: {len(melody.notes)} notes @ {melody.bpm:g} bpm, "
        f"{len(melody.harmonics)} harmonics"
    )
    if config.percussion.enabled:
        voice = Mixer(voice, build_percussion(config.percussion, sample_rate, notices))
    return voice


@dataclass(slots=True)
class SynthApplication:
    """Runtime container for a configuration and the signal graph built from it.

    Each render samples a fresh duplicate of the graph, so repeated renders
    start from the same initial state and produce identical buffers.
    """

    config: AppConfig
    root: Signal
    notices: List[str] = field(default_factory=list)

    @classmethod
    def from_config(cls, config: AppConfig) -> "SynthApplication":
        notices: List[str] = []
        root = build_signal_graph(config, notices)
        return cls(config=config, root=root, notices=notices)

    @classmethod
    def from_file(cls, path: str) -> "SynthApplication":
        return cls.from_config(load_configuration(path))

    @property
    def sample_rate(self) -> int:
        return self.config.render.sample_rate

    def render(self, frames: Optional[int] = None) -> np.ndarray:
        """
        Render a ``(2, frames)`` output buffer from the configured graph.

        Parameters
        ----------
        frames:
            Optional frame count. When omitted, the configured duration is
            converted to frames at the configured sample rate.
        """
        render_cfg = self.config.render
        if frames is None:
            frames = frame_count(render_cfg.duration, render_cfg.sample_rate)
        return render(
            self.root.duplicate(),
            frames,
            sample_rate=render_cfg.sample_rate,
            volume=render_cfg.volume,
            pan_position=render_cfg.pan,
        )

    def summary(self) -> str:
        """Return a human-readable description of the configuration and graph."""

        render_cfg = self.config.render
        melody = self.config.melody
        percussion = self.config.percussion
        lines = [
            f"Sample rate: {render_cfg.sample_rate} Hz",
            f"Duration: {render_cfg.duration:g} s",
            f"Volume: {render_cfg.volume:g}  Pan: {render_cfg.pan:+.2f}",
            f"Melody: {len(melody.notes)} notes @ {melody.bpm:g} bpm",
        ]
        if percussion.enabled:
            lines.append(
                f"Percussion: {percussion.sample_file} every {percussion.period:g}s (x{percussion.gain:g})"
            )
        else:
            lines.append("Percussion: disabled")
        lines.extend(f"Warning: {notice}" for notice in self.notices)
        lines.append("Graph:")
        lines.extend(describe(self.root, indent=1))
        return "\n".join(lines)


__all__ = ["SynthApplication", "build_percussion", "build_signal_graph"]
