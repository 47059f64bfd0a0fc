"""Rendering defaults and constants."""

from __future__ import annotations

import numpy as np

# =========================
# Settings / fidelity
# =========================
RAW_DTYPE = np.float64
SAMPLE_RATE = 44_100
OUTPUT_CHANNELS = 2

# Master volume applied by the render loop.
VOLUME = 0.4

# =========================
# Voice defaults
# =========================
# First ten harmonic volumes of a piano sample (sounds like an electric piano).
HARMONICS: tuple[float, ...] = (
    0.700, 0.243, 0.229, 0.095, 0.139, 0.087, 0.288, 0.199, 0.124, 0.090,
)

# Forced rest between consecutive notes, in beats.
SILENCE_GAP = 0.02

DEFAULT_BPM = 120
DEFAULT_DURATION = 5.0

__all__ = [
    "DEFAULT_BPM",
    "DEFAULT_DURATION",
    "HARMONICS",
    "OUTPUT_CHANNELS",
    "RAW_DTYPE",
    "SAMPLE_RATE",
    "SILENCE_GAP",
    "VOLUME",
]
