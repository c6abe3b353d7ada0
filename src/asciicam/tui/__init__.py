"""TUI Components for asciicam.

Modules:
- app: the Textual application acting as the render loop's output sink
- widgets: frame display, stats panel and log panel
- screens: the help screen
"""

from .app import AsciiCamApp
from .screens import HelpScreen
from .widgets import AsciiDisplay, Printer, StatsPanel

__all__ = [
    "AsciiCamApp",
    "AsciiDisplay",
    "HelpScreen",
    "Printer",
    "StatsPanel",
]
