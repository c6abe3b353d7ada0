"""Command line entry point: the Textual viewer, or plain frames printed to the terminal."""

import argparse
from pathlib import Path
import sys
import threading
from typing import TextIO

from loguru import logger
from pydantic import ValidationError
import yaml

from .config import AsciiCamConfig
from .errors import CaptureError
from .vision.capture import OpenCVCaptureSource
from .vision.frames import RenderedFrame
from .vision.render_loop import AsciiRenderLoop
from .vision.scheduler import FrameScheduler

# ANSI control sequences
CLEAR_SCREEN = "\x1b[2J"
CURSOR_HOME = "\x1b[H"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"


class TerminalSink:
    """Redraws every frame in place on a plain terminal."""

    def __init__(self, stream: TextIO, show_stats: bool = True) -> None:
        self._stream = stream
        self._show_stats = show_stats
        self._started = False

    def publish(self, frame: RenderedFrame) -> None:
        if not frame.text:
            return
        if not self._started:
            self._stream.write(HIDE_CURSOR + CLEAR_SCREEN)
            self._started = True

        output = CURSOR_HOME + frame.text
        if self._show_stats:
            output += f"{frame.fps:>3} fps | {frame.cols}x{frame.rows} | {frame.characters:,} chars"
        self._stream.write(output)
        self._stream.flush()

    def close(self) -> None:
        if self._started:
            self._stream.write(SHOW_CURSOR + "\n")
            self._stream.flush()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="asciicam", description="Live camera feed rendered as ASCII art.")
    parser.add_argument("--config", type=Path, help="YAML configuration file")
    parser.add_argument("--camera", type=int, help="camera index to open")
    parser.add_argument("--palette", help="palette name (standard, blocks, detailed, simple, binary, shades) or literal characters")
    parser.add_argument("--resolution", type=int, help="block width in pixels; blocks are twice as tall")
    parser.add_argument("--invert", action=argparse.BooleanOptionalAction, default=None, help="invert brightness")
    parser.add_argument("--export-dir", type=Path, help="directory for exported frames")
    parser.add_argument("--plain", action="store_true", help="print frames to the terminal instead of starting the TUI")
    parser.add_argument("--log-level", default="INFO", help="log level (DEBUG, INFO, SUCCESS, WARNING, ERROR)")
    return parser


def load_config(args: argparse.Namespace) -> AsciiCamConfig:
    """Load the YAML configuration, if any, and apply command line overrides."""
    config = AsciiCamConfig.from_yaml(args.config) if args.config else AsciiCamConfig()
    data = config.model_dump()

    if args.camera is not None:
        data["capture"]["camera_index"] = args.camera
    if args.palette is not None:
        data["render"]["palette"] = args.palette
    if args.resolution is not None:
        data["render"]["resolution"] = args.resolution
    if args.invert is not None:
        data["render"]["invert"] = args.invert
    if args.export_dir is not None:
        data["export"]["directory"] = args.export_dir

    return AsciiCamConfig.model_validate(data)


def run_plain(config: AsciiCamConfig, stream: TextIO = sys.stdout) -> int:
    """Run the render loop on the calling thread until interrupted."""
    scheduler = FrameScheduler(refresh_hz=config.display.refresh_hz)
    sink = TerminalSink(stream, show_stats=config.display.show_stats)
    loop = AsciiRenderLoop(
        source=OpenCVCaptureSource(),
        scheduler=scheduler,
        sink=sink,
        config=config.render.to_render_config(),
        constraints=config.capture.to_constraints(),
    )

    try:
        loop.start()
    except CaptureError:
        return 1

    try:
        scheduler.run(threading.Event())
    except KeyboardInterrupt:
        logger.info("MAIN: KeyboardInterrupt received. Stopping capture...")
    finally:
        loop.stop()
        sink.close()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level=args.log_level.upper())

    try:
        config = load_config(args)
    except FileNotFoundError:
        logger.error("MAIN: Configuration file '{}' not found.", args.config)
        return 1
    except (ValidationError, KeyError, yaml.YAMLError) as ex:
        logger.error("MAIN: Invalid configuration: {}", ex)
        return 1

    if args.plain:
        return run_plain(config)

    from .tui import AsciiCamApp

    AsciiCamApp(config, log_level=args.log_level.upper()).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
