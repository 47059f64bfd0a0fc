# signals.py
from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

import numpy as np

from . import envelope
from .state import RAW_DTYPE, SAMPLE_RATE

TAU = 2.0 * math.pi


# =========================
# Signal graph
# =========================
#
# Every generator pulls its children once per call to ``sample``.  Calls are
# not idempotent: phase accumulators, envelope stages and playback cursors
# advance as a side effect, so a node must be sampled at most once per frame.
class Signal:
    """Base class for stateful generators of a time-indexed amplitude stream."""

    __slots__ = ()

    def sample(self, t: float) -> float:
        raise NotImplementedError

    def duplicate(self) -> "Signal":
        """Return an independent copy carrying the current state."""

        raise NotImplementedError


def as_signal(value) -> Signal:
    """Coerce ``value`` into a :class:`Signal`, wrapping plain numbers."""

    if isinstance(value, Signal):
        return value
    if isinstance(value, (int, float, np.floating, np.integer)) and not isinstance(value, bool):
        return Constant(float(value))
    raise TypeError(f"expected a Signal or a real number, got {type(value).__name__}")


class Constant(Signal):
    __slots__ = ("value",)

    def __init__(self, value: float) -> None:
        self.value = float(value)

    def sample(self, t: float) -> float:
        return self.value

    def duplicate(self) -> "Constant":
        return Constant(self.value)

    def __repr__(self) -> str:
        return f"Constant({self.value!r})"


class Oscillator(Signal):
    """Cosine oscillator driven by a (possibly time-varying) frequency signal."""

    __slots__ = ("frequency", "sample_rate", "sample_period", "phase")

    def __init__(self, frequency, *, sample_rate: float = SAMPLE_RATE, phase: float = 0.0) -> None:
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        self.frequency = as_signal(frequency)
        self.sample_rate = float(sample_rate)
        self.sample_period = 1.0 / self.sample_rate
        self.phase = float(phase) % TAU

    def sample(self, t: float) -> float:
        out = math.cos(self.phase)
        self.phase = (self.phase + TAU * self.sample_period * self.frequency.sample(t)) % TAU
        return out

    def duplicate(self) -> "Oscillator":
        return Oscillator(self.frequency.duplicate(), sample_rate=self.sample_rate, phase=self.phase)


class Gain(Signal):
    __slots__ = ("signal", "gain")

    def __init__(self, signal, gain: float) -> None:
        self.signal = as_signal(signal)
        self.gain = float(gain)

    def sample(self, t: float) -> float:
        return self.signal.sample(t) * self.gain

    def duplicate(self) -> "Gain":
        return Gain(self.signal.duplicate(), self.gain)


class Mixer(Signal):
    """Binary sum of two signals."""

    __slots__ = ("a", "b")

    def __init__(self, a, b) -> None:
        self.a = as_signal(a)
        self.b = as_signal(b)

    def sample(self, t: float) -> float:
        return self.a.sample(t) + self.b.sample(t)

    def duplicate(self) -> "Mixer":
        return Mixer(self.a.duplicate(), self.b.duplicate())


def mix(*signals) -> Signal:
    """Fold ``signals`` into a chain of :class:`Mixer` nodes."""

    acc: Signal = Constant(0.0)
    for signal in signals:
        acc = Mixer(acc, signal)
    return acc


class PeriodicGate(Signal):
    """Pulse train: high for ``duration`` seconds at the start of every ``period``."""

    __slots__ = ("period", "duration")

    def __init__(self, period: float, duration: float) -> None:
        if period <= 0:
            raise ValueError(f"period must be positive, got {period}")
        self.period = float(period)
        self.duration = float(duration)

    def sample(self, t: float) -> float:
        return 1.0 if (t % self.period) < self.duration else 0.0

    def duplicate(self) -> "PeriodicGate":
        return PeriodicGate(self.period, self.duration)


class SamplePlayer(Signal):
    """Gated one-shot playback of decoded PCM samples.

    The cursor rewinds whenever the gate drops to zero or below.  Once the
    recording runs out the player stays silent until it is re-triggered.
    """

    __slots__ = ("gate", "samples", "index")

    def __init__(self, gate, samples, *, index: int = 0) -> None:
        self.gate = as_signal(gate)
        array = np.asarray(samples, dtype=RAW_DTYPE)
        if array.ndim != 1:
            raise ValueError(f"samples must be one-dimensional, got shape {array.shape}")
        if array.flags.writeable:
            array = array.copy()
            array.setflags(write=False)
        self.samples = array
        self.index = int(index)

    def sample(self, t: float) -> float:
        gate = self.gate.sample(t)
        if gate <= 0.0:
            self.index = 0
            return 0.0
        if self.index < self.samples.shape[0]:
            value = float(self.samples[self.index])
            self.index += 1
            return value
        return 0.0

    def duplicate(self) -> "SamplePlayer":
        # The sample array is read-only, so duplicates may share it.
        return SamplePlayer(self.gate.duplicate(), self.samples, index=self.index)


class StepSequence(Signal):
    """Looping concatenation of timed sub-signals.

    Each segment's signal sees local time, starting at zero when the segment
    begins.
    """

    __slots__ = ("_steps", "_bounds", "_total_time")

    def __init__(self, steps: Iterable[tuple[object, float]]) -> None:
        normalised: list[tuple[Signal, float]] = []
        bounds: list[float] = []
        end = 0.0
        for signal, duration in steps:
            duration = float(duration)
            if duration < 0.0:
                raise ValueError(f"step durations must be non-negative, got {duration}")
            normalised.append((as_signal(signal), duration))
            end += duration
            bounds.append(end)
        self._steps = normalised
        # Segment end times; the loop length is the last one.
        self._bounds = bounds
        self._total_time = bounds[-1] if bounds else 0.0

    @property
    def steps(self) -> Sequence[tuple[Signal, float]]:
        return tuple(self._steps)

    @property
    def total_time(self) -> float:
        return self._total_time

    def sample(self, t: float) -> float:
        if self._total_time <= 0.0:
            return 0.0
        t = t % self._total_time
        start = 0.0
        for (signal, _), end in zip(self._steps, self._bounds):
            if t < end:
                return signal.sample(t - start)
            start = end
        # Rounding left ``t`` past the final boundary.
        return 0.0

    def duplicate(self) -> "StepSequence":
        return StepSequence((signal.duplicate(), duration) for signal, duration in self._steps)


class Envelope(Signal):
    """ADSR amplitude shaper: scales ``input`` by a level driven from ``gate``."""

    __slots__ = ("gate", "input", "params", "sample_rate", "_stage", "_value", "_beg_value", "_gate_last")

    def __init__(
        self,
        gate,
        input,
        params: envelope.EnvelopeParams | None = None,
        *,
        sample_rate: float = SAMPLE_RATE,
    ) -> None:
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        self.gate = as_signal(gate)
        self.input = as_signal(input)
        self.params = params or envelope.EnvelopeParams()
        self.sample_rate = float(sample_rate)
        self._stage = envelope.STAGE_IDLE
        self._value = 0.0
        self._beg_value = 0.0
        self._gate_last = False

    @property
    def stage(self) -> int:
        return self._stage

    @property
    def stage_name(self) -> str:
        return envelope.STAGE_NAMES[self._stage]

    @property
    def value(self) -> float:
        return self._value

    @property
    def beg_value(self) -> float:
        return self._beg_value

    def sample(self, t: float) -> float:
        gate = self.gate.sample(t) > 0.0
        self._stage, self._beg_value = envelope.apply_gate(
            self._stage, self._value, self._beg_value, gate, self._gate_last
        )
        self._gate_last = gate
        self._stage, self._value, self._beg_value = envelope.advance(
            self._stage, self._value, self._beg_value, self.params, self.sample_rate
        )
        return self._value * self.input.sample(t)

    def duplicate(self) -> "Envelope":
        clone = Envelope(
            self.gate.duplicate(),
            self.input.duplicate(),
            self.params,
            sample_rate=self.sample_rate,
        )
        clone._stage = self._stage
        clone._value = self._value
        clone._beg_value = self._beg_value
        clone._gate_last = self._gate_last
        return clone


SIGNAL_TYPES = {
    "constant": Constant,
    "oscillator": Oscillator,
    "sine": Oscillator,
    "gain": Gain,
    "mixer": Mixer,
    "sum": Mixer,
    "periodic_gate": PeriodicGate,
    "every": PeriodicGate,
    "sample_player": SamplePlayer,
    "step_sequence": StepSequence,
    "envelope": Envelope,
    "adsr": Envelope,
}


def describe(signal: Signal, *, indent: int = 0) -> list[str]:
    """Return an indented outline of the tree rooted at ``signal``."""

    pad = "  " * indent
    if isinstance(signal, Constant):
        return [f"{pad}- Constant {signal.value:g}"]
    if isinstance(signal, StepSequence):
        return [f"{pad}- StepSequence ({len(signal.steps)} steps, {signal.total_time:.3f}s)"]
    if isinstance(signal, Oscillator):
        lines = [f"{pad}- Oscillator"]
        lines.extend(describe(signal.frequency, indent=indent + 1))
        return lines
    if isinstance(signal, Gain):
        lines = [f"{pad}- Gain x{signal.gain:g}"]
        lines.extend(describe(signal.signal, indent=indent + 1))
        return lines
    if isinstance(signal, Mixer):
        lines = [f"{pad}- Mixer"]
        lines.extend(describe(signal.a, indent=indent + 1))
        lines.extend(describe(signal.b, indent=indent + 1))
        return lines
    if isinstance(signal, PeriodicGate):
        return [f"{pad}- PeriodicGate every {signal.period:g}s for {signal.duration:g}s"]
    if isinstance(signal, SamplePlayer):
        lines = [f"{pad}- SamplePlayer ({signal.samples.shape[0]} samples)"]
        lines.extend(describe(signal.gate, indent=indent + 1))
        return lines
    if isinstance(signal, Envelope):
        p = signal.params
        lines = [
            f"{pad}- Envelope A={p.attack:g}s D={p.decay:g}s S={p.sustain_level:g} R={p.release:g}s"
        ]
        lines.extend(describe(signal.gate, indent=indent + 1))
        lines.extend(describe(signal.input, indent=indent + 1))
        return lines
    return [f"{pad}- {signal.__class__.__name__}"]


__all__ = [
    "Constant",
    "Envelope",
    "SIGNAL_TYPES",
    "describe",
    "Gain",
    "Mixer",
    "Oscillator",
    "PeriodicGate",
    "SamplePlayer",
    "Signal",
    "StepSequence",
    "TAU",
    "as_signal",
    "mix",
]
