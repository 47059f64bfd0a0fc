"""Utilities for benchmarking individual signal types across block lengths.

This module provides a small harness that instantiates each registered signal
type, drives it sample by sample for a block of frames, and records how long
the block takes.  The intent is to make it easy to compare the per-sample
cost of nodes without building a full song graph, so we can reason about
which parts of a graph dominate render time.
"""

from __future__ import annotations

import argparse
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping

import numpy as np

from . import signals
from .melody import harmonic_stack
from .state import RAW_DTYPE, SAMPLE_RATE


# ---------------------------------------------------------------------------
# Benchmark factories


SignalFactory = Callable[[np.random.Generator, float], signals.Signal]


@dataclass(slots=True)
class BenchmarkStats:
    """Simple statistics captured for each (signal, block length) pair."""

    mean_seconds: float
    stdev_seconds: float
    min_seconds: float
    max_seconds: float


def _random_steps(rng: np.random.Generator, count: int) -> list[tuple[signals.Signal, float]]:
    levels = rng.uniform(-1.0, 1.0, size=count)
    lengths = rng.uniform(0.001, 0.01, size=count)
    return [(signals.Constant(float(level)), float(length)) for level, length in zip(levels, lengths)]


def _sample_player(rng: np.random.Generator, sample_rate: float) -> signals.Signal:
    pcm = rng.uniform(-1.0, 1.0, size=int(sample_rate // 10)).astype(RAW_DTYPE, copy=False)
    return signals.SamplePlayer(signals.PeriodicGate(0.05, 0.03), pcm)


def _envelope(rng: np.random.Generator, sample_rate: float) -> signals.Signal:
    gate = signals.StepSequence([(signals.Constant(1.0), 0.02), (signals.Constant(0.0), 0.01)])
    osc = signals.Oscillator(float(rng.uniform(110.0, 880.0)), sample_rate=sample_rate)
    return signals.Envelope(gate, osc, sample_rate=sample_rate)


SIGNAL_BENCHMARKS: dict[str, SignalFactory] = {
    "constant": lambda rng, sr: signals.Constant(float(rng.uniform(-1.0, 1.0))),
    "oscillator": lambda rng, sr: signals.Oscillator(float(rng.uniform(55.0, 880.0)), sample_rate=sr),
    "gain": lambda rng, sr: signals.Gain(signals.Constant(1.0), float(rng.uniform(0.1, 2.0))),
    "mixer": lambda rng, sr: signals.Mixer(signals.Constant(0.25), signals.Constant(0.5)),
    "periodic_gate": lambda rng, sr: signals.PeriodicGate(0.5, 0.3),
    "sample_player": _sample_player,
    "step_sequence": lambda rng, sr: signals.StepSequence(_random_steps(rng, 16)),
    "envelope": _envelope,
    "harmonic_stack": lambda rng, sr: harmonic_stack(float(rng.uniform(110.0, 440.0)), sample_rate=sr),
}


def run_node_benchmarks(
    frame_counts: Iterable[int],
    *,
    sample_rate: float = float(SAMPLE_RATE),
    iterations: int = 5,
    node_names: Iterable[str] | None = None,
    seed: int = 0,
) -> dict[str, dict[int, BenchmarkStats]]:
    """Benchmark the registered signals for each block length in ``frame_counts``."""

    frame_counts = list(frame_counts)
    if iterations <= 0:
        raise ValueError("iterations must be a positive integer")
    if sample_rate <= 0:
        raise ValueError("sample_rate must be positive")

    selected = list(node_names) if node_names is not None else sorted(SIGNAL_BENCHMARKS)
    unknown = [name for name in selected if name not in SIGNAL_BENCHMARKS]
    if unknown:
        raise KeyError(f"Unknown benchmark node(s): {', '.join(unknown)}")

    period = 1.0 / sample_rate
    results: dict[str, dict[int, BenchmarkStats]] = {}
    for node_name in selected:
        factory = SIGNAL_BENCHMARKS[node_name]
        node_results: dict[int, BenchmarkStats] = {}
        for frames in frame_counts:
            if frames <= 0:
                raise ValueError("frame counts must be positive integers")
            rng = np.random.default_rng(seed + frames)
            template = factory(rng, sample_rate)

            times: list[float] = []
            for _ in range(iterations):
                node = template.duplicate()
                sample = node.sample
                start = time.perf_counter()
                for i in range(frames):
                    sample(i * period)
                elapsed = time.perf_counter() - start
                times.append(elapsed)

            times_arr = np.array(times, dtype=RAW_DTYPE)
            node_results[frames] = BenchmarkStats(
                mean_seconds=float(times_arr.mean()),
                stdev_seconds=float(times_arr.std(ddof=0)),
                min_seconds=float(times_arr.min()),
                max_seconds=float(times_arr.max()),
            )
        results[node_name] = node_results
    return results


def _format_table(results: Mapping[str, Mapping[int, BenchmarkStats]]) -> str:
    if not results:
        return "No results"

    frame_counts = sorted({frames for node in results.values() for frames in node})
    if not frame_counts:
        return "No results"

    header = ["Signal"] + [f"F={frames}" for frames in frame_counts]
    widths = [max(len(header[0]), max(len(name) for name in results))] + [
        max(len(h), 22) for h in header[1:]
    ]
    lines = [" ".join(h.ljust(w) for h, w in zip(header, widths))]
    lines.append(" ".join("-" * w for w in widths))
    for name in sorted(results):
        row = [name.ljust(widths[0])]
        for idx, frames in enumerate(frame_counts, start=1):
            stats = results[name].get(frames)
            if stats is None:
                cell = "n/a"
            else:
                mean_ms = stats.mean_seconds * 1e3
                stdev_ms = stats.stdev_seconds * 1e3
                cell = f"{mean_ms:8.3f}+/-{stdev_ms:6.3f} ms"
            row.append(cell.ljust(widths[idx]))
        lines.append(" ".join(row))
    return "\n".join(lines)


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Benchmark sigsynth signal types across block lengths")
    parser.add_argument("--sample-rate", type=float, default=float(SAMPLE_RATE), help="Sample rate")
    parser.add_argument(
        "--frames",
        type=int,
        nargs="*",
        default=[256, 1024, 4096],
        help="Block lengths (in frames) to benchmark",
    )
    parser.add_argument("--iterations", type=int, default=5, help="Samples per measurement")
    parser.add_argument("--seed", type=int, default=0, help="RNG seed for synthetic parameters")
    parser.add_argument(
        "--nodes",
        nargs="*",
        default=None,
        help="Optional subset of signal names to benchmark",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List available signal names and exit",
    )
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.list:
        for name in sorted(SIGNAL_BENCHMARKS):
            print(name)
        return 0

    results = run_node_benchmarks(
        args.frames,
        sample_rate=args.sample_rate,
        iterations=args.iterations,
        node_names=args.nodes,
        seed=args.seed,
    )
    print(_format_table(results))
    return 0


__all__ = [
    "BenchmarkStats",
    "SIGNAL_BENCHMARKS",
    "main",
    "run_node_benchmarks",
]


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    raise SystemExit(main())
