"""TUI Widgets for asciicam - the frame display, stats panel and log panel."""

from rich.text import Text
from textual import events
from textual.widgets import RichLog, Static

from ..vision.frames import RenderedFrame
from ..vision.render_config import RenderConfig

PLACEHOLDER = "Press [b]space[/b] to start the camera\n\n[dim]Make sure this terminal may access the camera[/dim]"


class Printer(RichLog):
    """A subclass of Textual's RichLog which captures and displays all print calls.

    The app routes loguru output through ``print``, so this is the log panel.
    """

    def on_mount(self) -> None:
        self.wrap = True
        self.markup = True
        self.begin_capture_print()

    def on_print(self, event: events.Print) -> None:
        if (text := event.text) != "\n":
            formatted_text = text.rstrip().replace("ERROR", "[red]ERROR[/]").replace("WARNING", "[yellow]WARNING[/]")
            self.write(formatted_text)


class AsciiDisplay(Static):
    """Shows the current text frame, or a hint when capture is not running."""

    DEFAULT_CSS = """
    AsciiDisplay {
        width: auto;
        height: auto;
    }"""

    def __init__(self, **kwargs) -> None:
        super().__init__(PLACEHOLDER, **kwargs)
        self.frame_text = ""

    def show_frame(self, text: str) -> None:
        """Display ``text`` verbatim; palettes contain markup characters such as ``[``."""
        self.frame_text = text
        if text:
            self.update(Text(text, no_wrap=True, end=""))
        else:
            self.update(PLACEHOLDER)

    def set_color(self, color: str) -> None:
        self.styles.color = color


class StatsPanel(Static):
    """Frame rate, grid size and the active render settings."""

    def update_stats(self, frame: RenderedFrame, config: RenderConfig) -> None:
        lines = [
            "[b]Performance[/b]",
            f"FPS:        {frame.fps}",
            f"Resolution: {frame.cols}×{frame.rows}",
            f"Characters: {frame.characters:,}",
            "",
            "[b]Render[/b]",
            f"Palette:    {config.palette.label}",
            f"Block:      {config.block_width}×{config.block_height}px",
            f"Invert:     {'on' if config.invert else 'off'}",
        ]
        self.update("\n".join(lines))
