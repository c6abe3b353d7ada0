"""asciicam TUI - Textual application showing the live ASCII camera feed.

The app is the output sink of the render loop: each tick publishes a frame
that the app pushes into the display and stats widgets. Ticks run on Textual
timers, so the loop shares the app's event loop and never runs concurrently
with a key binding handler.
"""

from typing import ClassVar

from loguru import logger
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, ScrollableContainer, Vertical
from textual.widgets import Footer, Header

from ..config import COLORS, AsciiCamConfig
from ..errors import CaptureError, EmptyPaletteError
from ..vision.capture import CaptureSource, OpenCVCaptureSource
from ..vision.frames import RenderedFrame
from ..vision.glyphs import next_palette_name, resolve_palette
from ..vision.render_loop import AsciiRenderLoop, LoopState
from ..vision.scheduler import TextualScheduler
from .screens import HelpScreen
from .widgets import AsciiDisplay, Printer, StatsPanel

# Resolution steps offered by the +/- bindings
RESOLUTION_MIN = 4
RESOLUTION_MAX = 16
RESOLUTION_STEP = 2


class AsciiCamApp(App[None]):
    """Live ASCII camera viewer."""

    TITLE = "asciicam"

    CSS = """
    #main {
        height: 1fr;
    }
    #display_container {
        width: 1fr;
        background: black;
    }
    #sidebar {
        width: 34;
    }
    #stats {
        height: auto;
        border: round $accent;
        padding: 0 1;
    }
    #log {
        height: 1fr;
        border: round $panel;
    }
    .hidden {
        display: none;
    }
    """

    BINDINGS: ClassVar[list[Binding | tuple[str, str] | tuple[str, str, str]]] = [
        Binding(key="space", action="toggle_capture", description="Start/Stop"),
        Binding(key="p", action="next_palette", description="Palette"),
        Binding(key="plus,equals_sign", action="resolution(1)", description="Coarser", key_display="+"),
        Binding(key="minus", action="resolution(-1)", description="Finer", key_display="-"),
        Binding(key="i", action="toggle_invert", description="Invert"),
        Binding(key="c", action="next_color", description="Color"),
        Binding(key="e", action="export", description="Export"),
        Binding(key="t", action="toggle_stats", description="Stats"),
        Binding(key="question_mark", action="help", description="Help", key_display="?"),
        Binding(key="q", action="quit", description="Quit"),
    ]

    def __init__(
        self,
        config: AsciiCamConfig | None = None,
        source: CaptureSource | None = None,
        autostart: bool = True,
        log_level: str = "INFO",
    ) -> None:
        super().__init__()
        self.cam_config = config or AsciiCamConfig()
        self._source = source or OpenCVCaptureSource()
        self._autostart = autostart
        self._log_level = log_level
        self._color = self.cam_config.display.color
        self.render_loop: AsciiRenderLoop | None = None
        self._log_handler: int | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Horizontal(id="main"):
            with ScrollableContainer(id="display_container"):
                yield AsciiDisplay(id="display")
            with Vertical(id="sidebar"):
                yield StatsPanel(id="stats", classes="" if self.cam_config.display.show_stats else "hidden")
                yield Printer(id="log")
        yield Footer()

    def on_load(self) -> None:
        """Route log records into the log panel."""
        logger.remove()
        fmt = "{time:HH:mm:ss} | {level} | {message}"
        self._log_handler = logger.add(print, format=fmt, level=self._log_level)

    def on_mount(self) -> None:
        self.render_loop = AsciiRenderLoop(
            source=self._source,
            scheduler=TextualScheduler(self, self.cam_config.display.refresh_hz),
            sink=self,
            config=self.cam_config.render.to_render_config(),
            constraints=self.cam_config.capture.to_constraints(),
        )
        self.query_one(AsciiDisplay).set_color(COLORS[self._color])
        self._refresh_stats(RenderedFrame.empty())
        # Stats also move when no frame arrives
        self.set_interval(1.0, self._poll_stats)
        if self._autostart:
            self.action_toggle_capture()

    def on_unmount(self) -> None:
        if self.render_loop is not None:
            self.render_loop.stop()
        if self._log_handler is not None:
            logger.remove(self._log_handler)
            self._log_handler = None

    def publish(self, frame: RenderedFrame) -> None:
        """Output sink for the render loop. Widgets may already be gone during shutdown."""
        for display in self.query(AsciiDisplay):
            display.show_frame(frame.text)
        self._refresh_stats(frame)

    def action_toggle_capture(self) -> None:
        loop = self._require_loop()
        if loop.state is LoopState.CAPTURING:
            loop.stop()
            return
        try:
            loop.start()
        except CaptureError as ex:
            self.notify(f"{ex}. Check the camera connection and permissions.", title="Camera", severity="error")

    def action_next_palette(self) -> None:
        loop = self._require_loop()
        name = next_palette_name(loop.config.palette.name)
        self._reconfigure(palette=resolve_palette(name))

    def action_resolution(self, direction: int) -> None:
        loop = self._require_loop()
        current = loop.config.block_width
        # Clamp only in the direction of travel; outside the range a step never reverses
        if direction > 0:
            resolution = max(current, min(RESOLUTION_MAX, current + RESOLUTION_STEP))
        else:
            resolution = min(current, max(RESOLUTION_MIN, current - RESOLUTION_STEP))
        if resolution != current:
            self._reconfigure(block_width=resolution, block_height=resolution * 2)

    def action_toggle_invert(self) -> None:
        loop = self._require_loop()
        self._reconfigure(invert=not loop.config.invert)

    def action_next_color(self) -> None:
        names = list(COLORS)
        self._color = names[(names.index(self._color) + 1) % len(names)]
        for display in self.query(AsciiDisplay):
            display.set_color(COLORS[self._color])

    def action_export(self) -> None:
        path = self._require_loop().export(self.cam_config.export.directory)
        if path is None:
            self.notify("Nothing to export yet.", title="Export", severity="warning")
        else:
            self.notify(f"Saved {path}", title="Export")

    def action_toggle_stats(self) -> None:
        for stats in self.query(StatsPanel):
            stats.toggle_class("hidden")

    def action_help(self) -> None:
        self.push_screen(HelpScreen(id="help_screen"))

    async def action_quit(self) -> None:
        logger.info("Quit action initiated in TUI.")
        if self.render_loop is not None:
            self.render_loop.stop()
        self.exit()

    def _reconfigure(self, **changes) -> None:
        loop = self._require_loop()
        try:
            loop.reconfigure(**changes)
        except (EmptyPaletteError, ValueError) as ex:
            self.notify(str(ex), title="Configuration", severity="error")
            return
        self._refresh_stats(loop.latest)

    def _poll_stats(self) -> None:
        if self.render_loop is not None:
            self._refresh_stats(self.render_loop.latest)

    def _refresh_stats(self, frame: RenderedFrame) -> None:
        if self.render_loop is not None:
            for stats in self.query(StatsPanel):
                stats.update_stats(frame, self.render_loop.config)

    def _require_loop(self) -> AsciiRenderLoop:
        if self.render_loop is None:
            raise RuntimeError("AsciiCamApp: render loop is created on mount")
        return self.render_loop
