"""Render loop driving capture, sampling, glyph mapping and publishing once per display tick."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from enum import Enum
from pathlib import Path
import time
from typing import Any, Protocol

from loguru import logger

from ..errors import CaptureError, EmptyPaletteError
from .capture import CaptureConstraints, CaptureSource
from .frames import RenderedFrame
from .glyphs import map_to_text
from .render_config import RenderConfig
from .sampler import sample
from .scheduler import DisplayScheduler


class LoopState(Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    STOPPED = "stopped"


class OutputSink(Protocol):
    def publish(self, frame: RenderedFrame) -> None: ...


class AsciiRenderLoop:
    """Turns the newest camera frame into text on every display tick.

    The loop is single-threaded: each tick runs to completion and then asks the
    display scheduler for the next one. Stopping or reconfiguring cancels the
    pending tick and bumps a generation counter, so a tick that is already
    running finishes its frame with the config it read and never reschedules.

    All frame-rate bookkeeping is owned by the instance.
    """

    def __init__(
        self,
        source: CaptureSource,
        scheduler: DisplayScheduler,
        sink: OutputSink,
        config: RenderConfig,
        constraints: CaptureConstraints | None = None,
        clock: Callable[[], float] = time.perf_counter,
        fps_window: float = 1.0,
    ) -> None:
        """Initialize the render loop.

        Args:
            source: Capture source providing raster frames
            scheduler: Display scheduler invoking ticks at the refresh rate
            sink: Receives every produced frame and the cleared frame on stop
            config: Initial render configuration
            constraints: Camera selection and size hints used on start
            clock: Monotonic clock in seconds, used for the frame-rate window
            fps_window: Length of the frame-rate window in seconds
        """
        self._source = source
        self._scheduler = scheduler
        self._sink = sink
        self._config = config
        self._constraints = constraints or CaptureConstraints()
        self._clock = clock
        self._fps_window = fps_window

        self._state = LoopState.IDLE
        self._handle: object | None = None
        self._pending: Any = None
        self._generation = 0

        self._latest = RenderedFrame.empty()
        self._fps = 0
        self._frame_count = 0
        self._window_start = 0.0

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def config(self) -> RenderConfig:
        return self._config

    @property
    def latest(self) -> RenderedFrame:
        """The most recently published frame, empty when nothing has been produced."""
        return self._latest

    @property
    def fps(self) -> int:
        return self._fps

    def start(self) -> None:
        """Acquire the capture source and begin ticking.

        Raises:
            CaptureError: If the camera cannot be acquired; the loop stays where it was
        """
        if self._state is LoopState.CAPTURING:
            logger.debug("AsciiRenderLoop: Already capturing, ignoring start request.")
            return

        try:
            handle = self._source.acquire(self._constraints)
        except CaptureError as ex:
            logger.error("AsciiRenderLoop: Unable to start capture: {}", ex)
            raise

        self._handle = handle
        self._reset_output()
        self._state = LoopState.CAPTURING
        self._restart_ticks()
        logger.success(
            "AsciiRenderLoop: Capture started (camera={}, block={}x{}).",
            self._constraints.camera_index,
            self._config.block_width,
            self._config.block_height,
        )

    def stop(self) -> None:
        """Cancel ticking, release the camera and clear the published output."""
        if self._state is not LoopState.CAPTURING:
            return

        self._cancel_pending()
        self._generation += 1
        self._state = LoopState.STOPPED

        handle, self._handle = self._handle, None
        if handle is not None:
            self._source.release(handle)

        self._reset_output()
        self._sink.publish(self._latest)
        logger.info("AsciiRenderLoop: Capture stopped.")

    def reconfigure(self, config: RenderConfig | None = None, **changes: Any) -> RenderConfig:
        """Replace the render configuration and restart the tick sequence.

        Either pass a complete ``config`` or field ``changes`` applied to the
        current one. An invalid configuration is rejected and the current one kept.

        Raises:
            EmptyPaletteError: If the new palette has no characters
            ValueError: If the new block size is below 1x1
        """
        try:
            new_config = config if config is not None else self._config.with_changes(**changes)
        except EmptyPaletteError:
            logger.warning("AsciiRenderLoop: Rejected empty palette, keeping current configuration.")
            raise
        except ValueError as ex:
            logger.warning("AsciiRenderLoop: Rejected configuration: {}", ex)
            raise

        self._config = new_config
        if self._state is LoopState.CAPTURING:
            self._restart_ticks()
        logger.info(
            "AsciiRenderLoop: Reconfigured (palette={}, block={}x{}, invert={}).",
            new_config.palette.label,
            new_config.block_width,
            new_config.block_height,
            new_config.invert,
        )
        return new_config

    def export(self, directory: str | Path) -> Path | None:
        """Write the most recent text frame, unmodified, to a new file in ``directory``.

        Returns:
            Path of the written file, or None when there is no frame to export
        """
        text = self._latest.text
        if not text:
            logger.warning("AsciiRenderLoop: No frame available to export.")
            return None

        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        stem = f"ascii-frame-{int(time.time() * 1000)}"
        path = directory / f"{stem}.txt"
        suffix = 1
        while True:
            try:
                with path.open("xb") as handle:
                    handle.write(text.encode("utf-8"))
                break
            except FileExistsError:
                path = directory / f"{stem}-{suffix}.txt"
                suffix += 1
        logger.success("AsciiRenderLoop: Exported frame to {}.", path)
        return path

    def _restart_ticks(self) -> None:
        self._cancel_pending()
        self._generation += 1
        self._schedule(self._generation)

    def _schedule(self, generation: int) -> None:
        self._pending = self._scheduler.schedule_next_tick(lambda: self._tick(generation))

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._scheduler.cancel(self._pending)
            self._pending = None

    def _tick(self, generation: int) -> None:
        if generation != self._generation or self._state is not LoopState.CAPTURING:
            return
        self._pending = None

        # One snapshot per tick
        config = self._config
        try:
            frame = self._source.latest_frame(self._handle)
            if frame is None:
                self._refresh_rate()
            else:
                grid = sample(frame, config.block_width, config.block_height, config.invert)
                text = map_to_text(grid, config.palette)
                self._count_frame()
                self._latest = RenderedFrame(text=text, cols=grid.cols, rows=grid.rows, fps=self._fps)
                self._sink.publish(self._latest)
        except Exception as ex:
            logger.exception("AsciiRenderLoop: Tick failed: {}", ex)

        # Stop or reconfigure during this tick already took over scheduling
        if generation == self._generation and self._state is LoopState.CAPTURING:
            self._schedule(generation)

    def _count_frame(self) -> None:
        self._frame_count += 1
        self._close_window()

    def _close_window(self) -> bool:
        """Publish the window's frame count as the rate once the window has elapsed."""
        now = self._clock()
        if now - self._window_start < self._fps_window:
            return False
        self._fps = self._frame_count
        self._frame_count = 0
        self._window_start = now
        return True

    def _refresh_rate(self) -> None:
        """Let the rate fall while the camera delivers nothing. The sink sees no new frame."""
        if self._close_window() and self._latest.text:
            self._latest = replace(self._latest, fps=self._fps)

    def _reset_output(self) -> None:
        self._latest = RenderedFrame.empty()
        self._fps = 0
        self._frame_count = 0
        self._window_start = self._clock()
