"""Real-time output of rendered buffers through sounddevice."""

from __future__ import annotations

import numpy as np


class PlaybackUnavailableError(RuntimeError):
    """Raised when no audio output backend is available."""


def play(buffer: np.ndarray, sample_rate: int, *, device=None) -> None:
    """Play a ``(channels, frames)`` buffer and block until it finishes."""

    try:
        import sounddevice as sd
    except (ImportError, OSError) as exc:  # OSError: PortAudio library missing
        raise PlaybackUnavailableError(f"sounddevice unavailable: {exc}") from exc

    frames = np.ascontiguousarray(np.asarray(buffer, dtype=np.float32).T)
    try:
        sd.play(frames, samplerate=int(sample_rate), device=device)
        sd.wait()
    except sd.PortAudioError as exc:
        raise PlaybackUnavailableError(f"audio output failed: {exc}") from exc


__all__ = ["PlaybackUnavailableError", "play"]
