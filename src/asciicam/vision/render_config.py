from __future__ import annotations

from dataclasses import dataclass, replace

from .glyphs import Palette, resolve_palette


@dataclass(frozen=True, slots=True)
class RenderConfig:
    """Parameters for turning one frame into text. Read once per tick."""

    palette: Palette
    block_width: int
    block_height: int
    invert: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.palette, str):
            object.__setattr__(self, "palette", resolve_palette(self.palette))
        if self.block_width < 1 or self.block_height < 1:
            raise ValueError(f"Block size must be at least 1x1, got {self.block_width}x{self.block_height}")

    @classmethod
    def from_resolution(cls, palette: Palette | str, resolution: int, invert: bool = False) -> RenderConfig:
        """Blocks ``resolution`` pixels wide and twice as tall, matching terminal cell proportions."""
        return cls(palette=palette, block_width=resolution, block_height=resolution * 2, invert=invert)

    def with_changes(self, **changes: object) -> RenderConfig:
        return replace(self, **changes)
