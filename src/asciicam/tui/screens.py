"""TUI Screens for asciicam."""

from typing import ClassVar

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static

HELP_TEXT = """\
[b]space[/b]  start / stop the camera
[b]p[/b]      next character palette
[b]+ -[/b]    coarser / finer sampling
[b]i[/b]      invert brightness
[b]c[/b]      next display color
[b]e[/b]      export the current frame as text
[b]t[/b]      show / hide stats
[b]?[/b]      this help
[b]q[/b]      quit
"""


class HelpScreen(ModalScreen[None]):
    """Modal help screen listing the key bindings."""

    BINDINGS: ClassVar[list[Binding | tuple[str, str] | tuple[str, str, str]]] = [
        ("escape", "app.pop_screen", "Close screen")
    ]

    DEFAULT_CSS = """
    HelpScreen {
        align: center middle;
    }
    #help_dialog {
        width: 50;
        height: auto;
        border: round $accent;
        padding: 1 2;
    }"""

    TITLE = "Help"

    def compose(self) -> ComposeResult:
        yield Container(Static(HELP_TEXT, id="help_text"), id="help_dialog")

    def on_mount(self) -> None:
        dialog = self.query_one("#help_dialog")
        dialog.border_title = self.TITLE
        dialog.border_subtitle = "[blink]Press Esc key to continue[/]"
