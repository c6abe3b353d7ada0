"""
asciicam Configuration - Configuration models and YAML loading.

The configuration is split into capture, render, display and export sections.
Every field has a default, so an empty file or a missing section is valid.
"""

from pathlib import Path
from typing import Final, Literal

import yaml
from pydantic import BaseModel, Field

from .vision.capture import CaptureConstraints
from .vision.render_config import RenderConfig

# Display themes, in cycling order
COLORS: Final[dict[str, str]] = {
    "green": "#00ff00",
    "cyan": "#00ffff",
    "magenta": "#ff00ff",
    "yellow": "#ffff00",
    "white": "#ffffff",
    "red": "#ff6b6b",
}

ColorName = Literal["green", "cyan", "magenta", "yellow", "white", "red"]


class CaptureConfig(BaseModel):
    """Camera selection and requested frame size."""

    camera_index: int = Field(default=0, ge=0, description="Index of the camera to open. Use 0 if only one camera is connected.")
    width: int = Field(default=640, gt=0, description="Requested capture width in pixels. The driver may pick another size.")
    height: int = Field(default=480, gt=0, description="Requested capture height in pixels. The driver may pick another size.")

    def to_constraints(self) -> CaptureConstraints:
        return CaptureConstraints(camera_index=self.camera_index, width=self.width, height=self.height)


class RenderSettings(BaseModel):
    """How frames are turned into text."""

    palette: str = Field(default="standard", min_length=1, description="A named palette or the literal characters, darkest first.", examples=["standard", "blocks", " .:-=+*#%@"])
    resolution: int = Field(default=6, ge=1, le=64, description="Block width in pixels. Blocks are twice as tall as they are wide.")
    invert: bool = Field(default=True, description="Invert luminance before choosing glyphs.")

    def to_render_config(self) -> RenderConfig:
        return RenderConfig.from_resolution(self.palette, self.resolution, invert=self.invert)


class DisplayConfig(BaseModel):
    refresh_hz: float = Field(default=60.0, gt=0.0, le=240.0, description="Display refresh rate the render loop ticks at.")
    color: ColorName = "green"
    show_stats: bool = True


class ExportConfig(BaseModel):
    directory: Path = Field(default=Path("."), description="Directory exported frames are written to.")


class AsciiCamConfig(BaseModel):
    """Top-level configuration for the ASCII camera."""

    capture: CaptureConfig = Field(default_factory=CaptureConfig)
    render: RenderSettings = Field(default_factory=RenderSettings)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)

    @classmethod
    def from_yaml(
        cls,
        path: str | Path,
        key_to_config: tuple[str, ...] = ("AsciiCam",),
    ) -> "AsciiCamConfig":
        """
        Load the configuration from a YAML file.

        Parameters:
            path (str | Path): Path to the YAML configuration file.
            key_to_config (tuple[str, ...], optional): Keys to walk down to
                reach the configuration section. Defaults to ("AsciiCam",).

        Returns:
            AsciiCamConfig: The validated configuration.

        Raises:
            OSError: If the file cannot be read
            KeyError: If a key in ``key_to_config`` is missing or a level is not a mapping
            yaml.YAMLError: If the file is not valid YAML
            pydantic.ValidationError: If a value fails validation

        Example:
            >>> # YAML file example:
            >>> # AsciiCam:
            >>> #   capture:
            >>> #     camera_index: 1
            >>> #   render:
            >>> #     palette: blocks
            >>> #     resolution: 8
            >>> config = AsciiCamConfig.from_yaml("asciicam.yaml")
        """
        path = Path(path)

        # Try different encodings to handle various file formats
        for encoding in ["utf-8", "utf-8-sig"]:
            try:
                data = yaml.safe_load(path.read_text(encoding=encoding))
                break
            except UnicodeDecodeError:
                if encoding == "utf-8-sig":
                    raise

        # Navigate through nested keys to find configuration; an empty file is an empty mapping
        config = data if data is not None else {}
        for key in key_to_config:
            if not isinstance(config, dict):
                raise KeyError(f"expected a mapping above '{key}' in {path}")
            config = config[key]

        return cls.model_validate(config or {})
