"""Frame sampling, glyph mapping and the render loop."""

from .capture import CaptureConstraints, CaptureSource, OpenCVCaptureSource
from .frames import RasterFrame, RenderedFrame, SampleGrid
from .glyphs import PALETTES, Palette, map_to_text, resolve_palette
from .render_config import RenderConfig
from .render_loop import AsciiRenderLoop, LoopState, OutputSink
from .sampler import sample
from .scheduler import DisplayScheduler, FrameScheduler, TextualScheduler

__all__ = [
    "PALETTES",
    "AsciiRenderLoop",
    "CaptureConstraints",
    "CaptureSource",
    "DisplayScheduler",
    "FrameScheduler",
    "LoopState",
    "OpenCVCaptureSource",
    "OutputSink",
    "Palette",
    "RasterFrame",
    "RenderConfig",
    "RenderedFrame",
    "SampleGrid",
    "TextualScheduler",
    "map_to_text",
    "resolve_palette",
    "sample",
]
