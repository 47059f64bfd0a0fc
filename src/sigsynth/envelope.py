"""Per-sample ADSR envelope stepping."""

from __future__ import annotations

from dataclasses import dataclass

STAGE_IDLE = 0
STAGE_ATTACK = 1
STAGE_DECAY = 2
STAGE_SUSTAIN = 3
STAGE_RELEASE = 4

STAGE_NAMES = {
    STAGE_IDLE: "idle",
    STAGE_ATTACK: "attack",
    STAGE_DECAY: "decay",
    STAGE_SUSTAIN: "sustain",
    STAGE_RELEASE: "release",
}


@dataclass(frozen=True, slots=True)
class EnvelopeParams:
    """Static parameters that describe an ADSR envelope.

    Phase durations are in seconds; levels are linear amplitudes.
    """

    attack: float = 0.01
    decay: float = 0.3
    sustain_level: float = 0.5
    release: float = 0.01
    peak_level: float = 1.0

    def __post_init__(self) -> None:
        for field_name in ("attack", "decay", "release"):
            value = getattr(self, field_name)
            if value < 0.0:
                raise ValueError(f"{field_name} must be non-negative, got {value}")
        if self.peak_level <= 0.0:
            raise ValueError(f"peak_level must be positive, got {self.peak_level}")
        if not 0.0 <= self.sustain_level <= self.peak_level:
            raise ValueError(
                f"sustain_level must lie within [0, {self.peak_level}], got {self.sustain_level}"
            )


def _phase_samples(seconds: float, sample_rate: float) -> float:
    """Length of a phase in samples, floored at one sample."""

    return max(seconds * sample_rate, 1.0)


def apply_gate(stage: int, value: float, beg_value: float, gate: bool, gate_last: bool) -> tuple[int, float]:
    """Return ``(stage, beg_value)`` after reacting to a gate edge."""

    if gate and not gate_last:
        return STAGE_ATTACK, value
    if gate_last and not gate:
        return STAGE_RELEASE, value
    return stage, beg_value


def advance(
    stage: int,
    value: float,
    beg_value: float,
    params: EnvelopeParams,
    sample_rate: float,
) -> tuple[int, float, float]:
    """Advance the envelope by one sample and return ``(stage, value, beg_value)``."""

    peak = params.peak_level
    sustain = params.sustain_level

    if stage == STAGE_IDLE:
        beg_value = 0.0

    elif stage == STAGE_ATTACK:
        value += peak / _phase_samples(params.attack, sample_rate)
        if value >= peak:
            value = peak
            stage = STAGE_DECAY

    elif stage == STAGE_DECAY:
        value -= (peak - sustain) / _phase_samples(params.decay, sample_rate)
        if value <= sustain:
            value = sustain
            stage = STAGE_SUSTAIN

    elif stage == STAGE_SUSTAIN:
        value = sustain

    elif stage == STAGE_RELEASE:
        # Ramp from wherever the release started, not from the sustain level.
        value -= beg_value / _phase_samples(params.release, sample_rate)
        if value <= 0.0:
            value = 0.0
            stage = STAGE_IDLE

    else:
        raise ValueError(f"unknown envelope stage {stage!r}")

    return stage, value, beg_value


__all__ = [
    "EnvelopeParams",
    "STAGE_ATTACK",
    "STAGE_DECAY",
    "STAGE_IDLE",
    "STAGE_NAMES",
    "STAGE_RELEASE",
    "STAGE_SUSTAIN",
    "advance",
    "apply_gate",
]
