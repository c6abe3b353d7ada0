"""Glyph palettes and the luminance-to-text mapper."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

import numpy as np

from ..errors import EmptyPaletteError
from .frames import SampleGrid
from .sampler import CHANNEL_MAX

# Named palettes, lowest intensity first. Insertion order is the UI cycling order.
PALETTES: Final[dict[str, str]] = {
    "standard": "@%#*+=-:. ",
    "blocks": "█▓▒░ ",
    "detailed": "$@B%8&WM#*oahkbdpqwmZO0QLCJUYXzcvunxrjft/\\|()1{}[]?-_+~<>i!lI;:,^`. ",
    "simple": "@#%*+=-. ",
    "binary": "01 ",
    "shades": " ░▒▓█",
}


@dataclass(frozen=True, slots=True)
class Palette:
    """Ordered characters used to draw luminance, darkest entry first."""

    chars: str
    name: str | None = None

    def __post_init__(self) -> None:
        if not self.chars:
            raise EmptyPaletteError("Palette must contain at least one character")

    def __len__(self) -> int:
        return len(self.chars)

    @property
    def label(self) -> str:
        return self.name or "custom"


def resolve_palette(value: str) -> Palette:
    """Look up a named palette, or treat ``value`` as the literal characters."""
    if value in PALETTES:
        return Palette(PALETTES[value], name=value)
    return Palette(value)


def next_palette_name(current: str | None) -> str:
    """Name of the palette after ``current`` in cycling order."""
    names = list(PALETTES)
    if current not in names:
        return names[0]
    return names[(names.index(current) + 1) % len(names)]


def map_to_text(grid: SampleGrid, palette: Palette | str) -> str:
    """Render a luminance grid as text.

    Each value ``v`` selects ``palette[floor(v / 255 * (len(palette) - 1))]``.
    Every row, including the last, ends with a newline.

    Raises:
        EmptyPaletteError: If ``palette`` has no characters
    """
    chars = palette.chars if isinstance(palette, Palette) else palette
    if not chars:
        raise EmptyPaletteError("Palette must contain at least one character")
    if grid.rows == 0 or grid.cols == 0:
        return ""

    last = len(chars) - 1
    indices = np.floor(grid.luminance / CHANNEL_MAX * last).astype(np.intp)
    indices = np.clip(indices, 0, last)

    glyphs = np.array(list(chars))
    lines = []
    for row in glyphs[indices]:
        lines.append("".join(row) + "\n")

    return "".join(lines)
