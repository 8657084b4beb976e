"""Preview rendering: turn a quantized grid back into a picture."""

from __future__ import annotations

from PIL import Image

from blockprint.color import lab_to_rgb
from blockprint.models import Palette, QuantizedGrid


def build_color_map(palette: Palette) -> dict[str, tuple[int, int, int, int]]:
    """Map each palette identifier to an opaque RGBA preview color."""
    return {entry.identifier: (*lab_to_rgb(entry.lab), 255) for entry in palette}


def render_grid(
    grid: QuantizedGrid,
    palette: Palette,
    scale: int = 1,
    unknown: tuple[int, int, int, int] = (0, 0, 0, 0),
) -> Image.Image:
    """Render *grid* using each entry's representative color.

    Cell ``grid[y][x]`` becomes a ``scale`` x ``scale`` block at
    ``(x * scale, y * scale)``. Identifiers missing from *palette*
    (such as the fallback) are drawn with *unknown*.

    Raises:
        ValueError: If *scale* is not positive or the grid is empty.
    """
    if scale < 1:
        raise ValueError(f"scale must be >= 1, got {scale}")
    if grid.height == 0 or grid.width == 0:
        raise ValueError("Cannot render an empty grid")

    colors = build_color_map(palette)
    img = Image.new("RGBA", (grid.width, grid.height))
    img.putdata([colors.get(cell, unknown) for row in grid.rows for cell in row])
    if scale > 1:
        img = img.resize(
            (grid.width * scale, grid.height * scale),
            resample=Image.Resampling.NEAREST,
        )
    return img
