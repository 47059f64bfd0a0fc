# notes.py
"""Equal-tempered pitch table used by melody configurations."""

from __future__ import annotations

HALF_STEP = 2.0 ** (1.0 / 12.0)


def note(base: float, steps: float) -> float:
    """Frequency ``steps`` semitones away from ``base``."""

    return base * HALF_STEP ** steps


C4 = 261.63
B3 = note(C4, -1.0)
D4 = note(C4, 2.0)
E4 = note(C4, 4.0)
F4 = note(C4, 5.0)
G4 = note(C4, 7.0)
A4 = note(C4, 9.0)
B4 = note(C4, 11.0)

PITCHES = {
    "B3": B3,
    "C4": C4,
    "D4": D4,
    "E4": E4,
    "F4": F4,
    "G4": G4,
    "A4": A4,
    "B4": B4,
}


def frequency_of(value) -> float:
    """Resolve a frequency in Hz or a pitch name from :data:`PITCHES`."""

    if isinstance(value, str):
        try:
            return PITCHES[value.strip().upper()]
        except KeyError as exc:
            raise KeyError(f"Unknown pitch '{value}'") from exc
    return float(value)


DEFAULT_MELODY: tuple[tuple[float, float], ...] = (
    (E4, 1.5),
    (E4, 0.5),
    (G4, 0.5 * 1.5),
    (E4, 0.5 * 1.5),
    (D4, 0.5),
    (C4, 2.0),
    (B3, 2.0),
)

__all__ = [
    "A4",
    "B3",
    "B4",
    "C4",
    "D4",
    "DEFAULT_MELODY",
    "E4",
    "F4",
    "G4",
    "HALF_STEP",
    "PITCHES",
    "frequency_of",
    "note",
]
