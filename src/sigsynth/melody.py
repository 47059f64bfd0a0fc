"""Melody to signal-graph construction.

Turns an ordered list of ``(frequency, beats)`` notes and a tempo into a pair
of aligned step sequences: one carrying a harmonic-stack voice per note and
one carrying the gate that articulates each note with a short rest.  Nothing
here samples a signal.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .envelope import EnvelopeParams
from .signals import Constant, Envelope, Gain, Oscillator, Signal, StepSequence, mix
from .state import HARMONICS, SAMPLE_RATE, SILENCE_GAP


def harmonic_stack(
    base_frequency: float,
    harmonics: Sequence[float] = HARMONICS,
    *,
    sample_rate: float = SAMPLE_RATE,
) -> Signal:
    """Additive voice: one oscillator per integer multiple of ``base_frequency``."""

    partials = []
    for index, volume in enumerate(harmonics):
        freq = Constant(base_frequency * (index + 1))
        partials.append(Gain(Oscillator(freq, sample_rate=sample_rate), volume))
    return mix(*partials)


def _validate_notes(notes: Iterable[tuple[float, float]]) -> list[tuple[float, float]]:
    checked = []
    for idx, (freq, beats) in enumerate(notes):
        freq = float(freq)
        beats = float(beats)
        if freq <= 0.0:
            raise ValueError(f"notes[{idx}]: frequency must be positive, got {freq}")
        if beats <= 0.0:
            raise ValueError(f"notes[{idx}]: duration must be positive, got {beats}")
        checked.append((freq, beats))
    return checked


def build_melody(
    notes: Iterable[tuple[float, float]],
    bpm: float,
    *,
    silence_gap: float = SILENCE_GAP,
    harmonics: Sequence[float] = HARMONICS,
    sample_rate: float = SAMPLE_RATE,
) -> tuple[StepSequence, StepSequence]:
    """Return ``(frequency_sequence, gate_sequence)`` for ``notes`` at ``bpm``.

    Durations and ``silence_gap`` are measured in beats.  Each note holds the
    gate high for its duration minus the gap (never less than zero) and then
    low for the remainder, so both sequences share the same total length.
    """

    if bpm <= 0:
        raise ValueError(f"bpm must be positive, got {bpm}")
    if silence_gap < 0:
        raise ValueError(f"silence_gap must be non-negative, got {silence_gap}")

    seconds_per_beat = 60.0 / float(bpm)
    freqs: list[tuple[Signal, float]] = []
    gates: list[tuple[Signal, float]] = []

    for freq, beats in _validate_notes(notes):
        freqs.append(
            (harmonic_stack(freq, harmonics, sample_rate=sample_rate), beats * seconds_per_beat)
        )
        gap = min(silence_gap, beats)
        gates.append((Constant(1.0), (beats - gap) * seconds_per_beat))
        gates.append((Constant(0.0), gap * seconds_per_beat))

    return StepSequence(freqs), StepSequence(gates)


def build_voice(
    notes: Iterable[tuple[float, float]],
    bpm: float,
    *,
    envelope: EnvelopeParams | None = None,
    silence_gap: float = SILENCE_GAP,
    harmonics: Sequence[float] = HARMONICS,
    sample_rate: float = SAMPLE_RATE,
) -> Envelope:
    """Wrap the melody's voice sequence in an ADSR envelope keyed by its gate."""

    freq_signal, gate_signal = build_melody(
        notes,
        bpm,
        silence_gap=silence_gap,
        harmonics=harmonics,
        sample_rate=sample_rate,
    )
    return Envelope(gate_signal, freq_signal, envelope, sample_rate=sample_rate)


__all__ = ["build_melody", "build_voice", "harmonic_stack"]
