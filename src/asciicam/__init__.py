"""asciicam - Live camera feed rendered as ASCII art in the terminal."""

from .config import AsciiCamConfig
from .vision import AsciiRenderLoop, RenderConfig

__version__ = "0.1.0"
__all__ = ["AsciiCamConfig", "AsciiRenderLoop", "RenderConfig"]
