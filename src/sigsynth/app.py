"""Offline synthesiser application: render, write and optionally play."""

from __future__ import annotations

import queue
import sys
import threading
import time
import wave
from collections import deque
from dataclasses import replace
from pathlib import Path

from .application import SynthApplication
from .config import DEFAULT_CONFIG_PATH, AppConfig, load_configuration
from .diagnostics import enable_render_logging, log_render_event, render_log_path
from .playback import PlaybackUnavailableError, play
from .render import summarise
from .wavio import write_audio


class AsyncThrottledPrinter:
    """Background printer that rate limits console output."""

    def __init__(
        self,
        *,
        window_seconds: float = 0.75,
        max_messages: int = 8,
    ) -> None:
        self._queue: "queue.Queue[tuple[str, str] | None]" = queue.Queue()
        self._history: deque[float] = deque()
        self._history_window = window_seconds
        self._max_messages = max_messages
        self._history_lock = threading.Lock()
        self._worker = threading.Thread(target=self._run, daemon=True)
        self._worker.start()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is None:
                self._queue.task_done()
                break
            text, end = item
            try:
                sys.stdout.write(text + end)
                sys.stdout.flush()
            finally:
                self._queue.task_done()

    def emit(self, message: str, *, end: str = "\n", force: bool = False) -> bool:
        """Queue *message* for printing when under the rate limit.

        Returns ``True`` when the message is enqueued for output."""

        now = time.monotonic()
        with self._history_lock:
            while self._history and now - self._history[0] > self._history_window:
                self._history.popleft()
            if not force and len(self._history) >= self._max_messages:
                return False
            self._history.append(now)
        self._queue.put((message, end))
        return True

    def flush(self) -> None:
        """Block until queued messages have been printed."""

        self._queue.join()


STATUS_PRINTER = AsyncThrottledPrinter()


def _apply_overrides(
    config: AppConfig,
    *,
    duration: float | None,
    bpm: float | None,
    volume: float | None,
    pan: float | None,
    sample_rate: int | None,
    sample_file: str | None,
) -> AppConfig:
    render_cfg = config.render
    if duration is not None:
        if duration < 0:
            raise ValueError("duration must be non-negative")
        render_cfg = replace(render_cfg, duration=float(duration))
    if volume is not None:
        render_cfg = replace(render_cfg, volume=float(volume))
    if pan is not None:
        if not -1.0 <= pan <= 1.0:
            raise ValueError("pan must lie within [-1, 1]")
        render_cfg = replace(render_cfg, pan=float(pan))
    if sample_rate is not None:
        if sample_rate <= 0:
            raise ValueError("sample rate must be positive")
        render_cfg = replace(render_cfg, sample_rate=int(sample_rate))

    melody = config.melody
    if bpm is not None:
        if bpm <= 0:
            raise ValueError("bpm must be positive")
        melody = replace(melody, bpm=float(bpm))

    percussion = config.percussion
    if sample_file is not None:
        percussion = replace(percussion, sample_file=sample_file or None)

    return replace(config, render=render_cfg, melody=melody, percussion=percussion)


def run(
    *,
    config_path: str | None = None,
    output: str | None = None,
    play_audio: bool = False,
    summary_only: bool = False,
    duration: float | None = None,
    bpm: float | None = None,
    volume: float | None = None,
    pan: float | None = None,
    sample_rate: int | None = None,
    sample_file: str | None = None,
    log_render: bool = False,
    log_path: str | None = None,
) -> int:
    """Render the configured song.

    Parameters
    ----------
    config_path:
        JSON configuration to load; defaults to the packaged configuration.
    output:
        Optional path to write rendered audio. Paths ending in ``.wav`` are
        written as 16-bit WAV; other suffixes receive raw float32 frames.
    play_audio:
        Stream the rendered buffer to the default output device.
    summary_only:
        Print the graph summary without rendering.
    """

    if log_render:
        enable_render_logging(True, log_path)

    cfg_path = config_path or str(DEFAULT_CONFIG_PATH)
    try:
        config = _apply_overrides(
            load_configuration(cfg_path),
            duration=duration,
            bpm=bpm,
            volume=volume,
            pan=pan,
            sample_rate=sample_rate,
            sample_file=sample_file,
        )
        app = SynthApplication.from_config(config)
    except (FileNotFoundError, ValueError, wave.Error) as exc:
        STATUS_PRINTER.emit(f"Error: {exc}", force=True)
        STATUS_PRINTER.flush()
        return 1

    STATUS_PRINTER.emit(app.summary(), force=True)
    if summary_only:
        STATUS_PRINTER.flush()
        return 0

    started = time.perf_counter()
    buffer = app.render()
    elapsed = time.perf_counter() - started
    stats = summarise(buffer, app.sample_rate)
    STATUS_PRINTER.emit(
        f"Rendered {stats.frames} frames @ {app.sample_rate} Hz in {elapsed:.2f}s "
        f"(peak {stats.peak:.3f}, rms {stats.rms:.3f})",
        force=True,
    )

    exit_code = 0
    if output:
        try:
            metadata = write_audio(Path(output), buffer, app.sample_rate)
        except OSError as exc:
            STATUS_PRINTER.emit(f"Error: could not write '{output}': {exc}", force=True)
            exit_code = 1
        else:
            log_render_event(f"wrote {metadata['frames']} frames to {output} ({metadata['format']})")
            STATUS_PRINTER.emit(
                f"Wrote {output} ({metadata['format']}, {metadata['dtype']})", force=True
            )

    if play_audio and exit_code == 0:
        try:
            play(buffer, app.sample_rate)
        except PlaybackUnavailableError as exc:
            STATUS_PRINTER.emit(f"Error: {exc}", force=True)
            exit_code = 1

    if log_render:
        STATUS_PRINTER.emit(f"Render log: {render_log_path()}", force=True)
    STATUS_PRINTER.flush()
    return exit_code


__all__ = ["AsyncThrottledPrinter", "STATUS_PRINTER", "run"]
