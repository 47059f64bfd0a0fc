"""Configuration loading for the synthesiser."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Tuple

from .envelope import EnvelopeParams
from .notes import DEFAULT_MELODY, frequency_of
from .state import (
    DEFAULT_BPM,
    DEFAULT_DURATION,
    HARMONICS,
    SAMPLE_RATE,
    SILENCE_GAP,
    VOLUME,
)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "configs" / "default.json"


@dataclass(slots=True)
class RenderConfig:
    """Parameters of the render loop itself."""

    sample_rate: int = SAMPLE_RATE
    duration: float = DEFAULT_DURATION
    volume: float = VOLUME
    pan: float = 0.0


@dataclass(slots=True)
class EnvelopeConfig:
    attack: float = 0.01
    decay: float = 0.3
    sustain_level: float = 0.5
    release: float = 0.01
    peak_level: float = 1.0

    def to_params(self) -> EnvelopeParams:
        return EnvelopeParams(
            attack=self.attack,
            decay=self.decay,
            sustain_level=self.sustain_level,
            release=self.release,
            peak_level=self.peak_level,
        )


@dataclass(slots=True)
class MelodyConfig:
    bpm: float = DEFAULT_BPM
    silence_gap: float = SILENCE_GAP
    notes: List[Tuple[float, float]] = field(default_factory=lambda: list(DEFAULT_MELODY))
    harmonics: Tuple[float, ...] = HARMONICS


@dataclass(slots=True)
class PercussionConfig:
    """Optional sample-based percussion voice triggered by a periodic gate."""

    sample_file: str | None = None
    period: float = 0.5
    duration: float = 0.3
    gain: float = 3.0

    @property
    def enabled(self) -> bool:
        return bool(self.sample_file)


@dataclass(slots=True)
class AppConfig:
    render: RenderConfig = field(default_factory=RenderConfig)
    envelope: EnvelopeConfig = field(default_factory=EnvelopeConfig)
    melody: MelodyConfig = field(default_factory=MelodyConfig)
    percussion: PercussionConfig = field(default_factory=PercussionConfig)

    @property
    def sample_rate(self) -> int:
        return self.render.sample_rate


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    data = raw.get(name)
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"{name} must be a JSON object, got {type(data).__name__}")
    return data


def _number(data: Mapping[str, Any], section: str, key: str, default, cast=float):
    """Read ``data[key]`` through ``cast``, reporting bad values as ``ValueError``."""

    value = data.get(key, default)
    try:
        return cast(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{section}.{key}: expected a number, got {value!r}") from exc


def _normalise_render(data: Mapping[str, Any]) -> RenderConfig:
    render = RenderConfig(
        sample_rate=_number(data, "render", "sample_rate", SAMPLE_RATE, int),
        duration=_number(data, "render", "duration", DEFAULT_DURATION),
        volume=_number(data, "render", "volume", VOLUME),
        pan=_number(data, "render", "pan", 0.0),
    )
    if render.sample_rate <= 0:
        raise ValueError("render.sample_rate must be positive")
    if render.duration < 0:
        raise ValueError("render.duration must be non-negative")
    if not -1.0 <= render.pan <= 1.0:
        raise ValueError("render.pan must lie within [-1, 1]")
    return render


def _normalise_envelope(data: Mapping[str, Any]) -> EnvelopeConfig:
    defaults = EnvelopeConfig()
    envelope = EnvelopeConfig(
        attack=_number(data, "envelope", "attack", defaults.attack),
        decay=_number(data, "envelope", "decay", defaults.decay),
        sustain_level=_number(data, "envelope", "sustain_level", defaults.sustain_level),
        release=_number(data, "envelope", "release", defaults.release),
        peak_level=_number(data, "envelope", "peak_level", defaults.peak_level),
    )
    # EnvelopeParams owns the range checks.
    try:
        envelope.to_params()
    except ValueError as exc:
        raise ValueError(f"envelope: {exc}") from exc
    return envelope


def _normalise_notes(note_items: Any) -> List[Tuple[float, float]]:
    if not isinstance(note_items, (list, tuple)):
        raise ValueError(f"melody.notes must be a list of notes, got {type(note_items).__name__}")
    notes = []
    for idx, item in enumerate(note_items):
        if isinstance(item, Mapping):
            pitch, beats = item.get("pitch", item.get("frequency")), item.get("beats")
        else:
            try:
                pitch, beats = item
            except (TypeError, ValueError) as exc:
                raise ValueError(
                    f"melody.notes[{idx}] must be a [pitch, beats] pair"
                ) from exc
        if pitch is None or beats is None:
            raise ValueError(f"melody.notes[{idx}] must provide a pitch and beats")
        try:
            freq = frequency_of(pitch)
            beats = float(beats)
        except KeyError as exc:
            raise ValueError(f"melody.notes[{idx}]: {exc.args[0]}") from exc
        except (TypeError, ValueError) as exc:
            raise ValueError(f"melody.notes[{idx}]: {exc}") from exc
        if freq <= 0 or beats <= 0:
            raise ValueError(f"melody.notes[{idx}] must have positive frequency and beats")
        notes.append((freq, beats))
    return notes


def _normalise_melody(data: Mapping[str, Any]) -> MelodyConfig:
    bpm = _number(data, "melody", "bpm", DEFAULT_BPM)
    if bpm <= 0:
        raise ValueError("melody.bpm must be positive")
    silence_gap = _number(data, "melody", "silence_gap", SILENCE_GAP)
    if silence_gap < 0:
        raise ValueError("melody.silence_gap must be non-negative")

    note_items = data.get("notes")
    notes = list(DEFAULT_MELODY) if note_items is None else _normalise_notes(note_items)

    raw_harmonics = data.get("harmonics", HARMONICS)
    try:
        harmonics = tuple(float(v) for v in raw_harmonics)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"melody.harmonics: expected a list of volumes, got {raw_harmonics!r}") from exc
    if not harmonics:
        raise ValueError("melody.harmonics must contain at least one volume")
    return MelodyConfig(bpm=bpm, silence_gap=silence_gap, notes=notes, harmonics=harmonics)


def _normalise_percussion(data: Mapping[str, Any], base_dir: Path | None) -> PercussionConfig:
    sample_file = data.get("sample_file")
    if sample_file:
        sample_path = Path(str(sample_file))
        if base_dir is not None and not sample_path.is_absolute():
            sample_path = base_dir / sample_path
        sample_file = str(sample_path)
    else:
        sample_file = None
    percussion = PercussionConfig(
        sample_file=sample_file,
        period=_number(data, "percussion", "period", 0.5),
        duration=_number(data, "percussion", "duration", 0.3),
        gain=_number(data, "percussion", "gain", 3.0),
    )
    if percussion.period <= 0:
        raise ValueError("percussion.period must be positive")
    return percussion


def config_from_mapping(raw: Mapping[str, Any], *, base_dir: Path | None = None) -> AppConfig:
    """Build an :class:`AppConfig` from already-parsed JSON data."""

    return AppConfig(
        render=_normalise_render(_section(raw, "render")),
        envelope=_normalise_envelope(_section(raw, "envelope")),
        melody=_normalise_melody(_section(raw, "melody")),
        percussion=_normalise_percussion(_section(raw, "percussion"), base_dir),
    )


def load_configuration(path: str | Path) -> AppConfig:
    """Load an :class:`AppConfig` from ``path``.

    Relative sample paths resolve against the configuration file's directory.
    """

    path = Path(path)
    with open(path, "r", encoding="utf8") as fh:
        raw = json.load(fh)
    if not isinstance(raw, Mapping):
        raise ValueError("configuration root must be a JSON object")
    return config_from_mapping(raw, base_dir=path.resolve().parent)


__all__ = [
    "AppConfig",
    "DEFAULT_CONFIG_PATH",
    "EnvelopeConfig",
    "MelodyConfig",
    "PercussionConfig",
    "RenderConfig",
    "config_from_mapping",
    "load_configuration",
]
