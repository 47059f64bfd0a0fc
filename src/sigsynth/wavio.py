"""Audio file adapters: buffer writer and PCM WAV reader."""

from __future__ import annotations

import json
import wave
from pathlib import Path
from typing import Any

import numpy as np

from .state import RAW_DTYPE


def _interleave(buffer: np.ndarray) -> np.ndarray:
    data = np.asarray(buffer, dtype=RAW_DTYPE)
    if data.ndim == 1:
        data = data[None, :]
    if data.ndim != 2:
        raise ValueError(f"expected a (channels, frames) buffer, got shape {data.shape}")
    # (C, F) -> (F, C) so frames are contiguous on disk.
    return np.ascontiguousarray(data.T)


def write_wav(path: str | Path, buffer: np.ndarray, sample_rate: int) -> dict[str, Any]:
    """Write ``buffer`` as 16-bit PCM WAV, clipping to [-1, 1]."""

    frames = _interleave(buffer)
    pcm16 = np.clip(np.rint(np.clip(frames, -1.0, 1.0) * 32767.0), -32768, 32767).astype("<i2")
    with wave.open(str(path), "wb") as wf:
        wf.setnchannels(frames.shape[1])
        wf.setsampwidth(2)
        wf.setframerate(int(sample_rate))
        wf.writeframes(pcm16.tobytes())
    return {
        "frames": int(frames.shape[0]),
        "channels": int(frames.shape[1]),
        "sample_rate": int(sample_rate),
        "format": "wav",
        "dtype": "int16",
    }


def write_raw(path: str | Path, buffer: np.ndarray, sample_rate: int) -> dict[str, Any]:
    """Write ``buffer`` as raw little-endian float32 interleaved frames."""

    frames = _interleave(buffer)
    frames.astype("<f4").tofile(str(path))
    return {
        "frames": int(frames.shape[0]),
        "channels": int(frames.shape[1]),
        "sample_rate": int(sample_rate),
        "format": "raw",
        "dtype": "float32",
    }


def write_audio(path: str | Path, buffer: np.ndarray, sample_rate: int) -> dict[str, Any]:
    """Write ``buffer`` to ``path`` and a JSON metadata sidecar next to it.

    Paths ending in ``.wav`` are written as 16-bit WAV; other suffixes receive
    raw float32 frames (little-endian).
    """

    path = Path(path)
    if path.suffix.lower() == ".wav":
        metadata = write_wav(path, buffer, sample_rate)
    else:
        metadata = write_raw(path, buffer, sample_rate)
    sidecar = path.with_suffix(path.suffix + ".json")
    sidecar.write_text(json.dumps(metadata, indent=2), encoding="utf8")
    return metadata


def _decode_pcm(raw: bytes, sample_width: int) -> np.ndarray:
    if sample_width == 1:
        data = np.frombuffer(raw, dtype=np.uint8).astype(RAW_DTYPE)
        return (data - 128.0) / 128.0
    if sample_width == 2:
        return np.frombuffer(raw, dtype="<i2").astype(RAW_DTYPE) / 32768.0
    if sample_width == 3:
        triples = np.frombuffer(raw, dtype=np.uint8).reshape(-1, 3).astype(np.int32)
        data = triples[:, 0] | (triples[:, 1] << 8) | (triples[:, 2] << 16)
        data = np.where(data & 0x800000, data - (1 << 24), data)
        return data.astype(RAW_DTYPE) / float(1 << 23)
    if sample_width == 4:
        return np.frombuffer(raw, dtype="<i4").astype(RAW_DTYPE) / float(1 << 31)
    raise ValueError(f"Unsupported WAV sample width: {sample_width * 8} bits")


def read_wav(path: str | Path) -> tuple[np.ndarray, int]:
    """Decode a PCM WAV file into read-only mono samples and its sample rate.

    Multi-channel files are averaged down to a single channel.
    """

    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"WAV file not found: {path}")
    with wave.open(str(path), "rb") as wf:
        channels = wf.getnchannels()
        sample_width = wf.getsampwidth()
        sample_rate = wf.getframerate()
        raw = wf.readframes(wf.getnframes())
    data = _decode_pcm(raw, sample_width)
    if channels > 1:
        usable = (data.shape[0] // channels) * channels
        data = data[:usable].reshape(-1, channels).mean(axis=1)
    data = np.ascontiguousarray(data, dtype=RAW_DTYPE)
    data.setflags(write=False)
    return data, int(sample_rate)


__all__ = ["read_wav", "write_audio", "write_raw", "write_wav"]
