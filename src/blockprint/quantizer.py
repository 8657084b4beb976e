"""Nearest-palette-entry quantization of images into identifier grids."""

from __future__ import annotations

from collections.abc import Callable

import numpy as np
from PIL import Image

from blockprint.color import rgb_array_to_lab
from blockprint.constants import AIR
from blockprint.distance import delta_e2000_matrix
from blockprint.errors import QuantizationCancelledError
from blockprint.image_io import image_to_array, load_image
from blockprint.logging import get_logger
from blockprint.models import Palette, QuantizedGrid
from blockprint.sources import ImageSource

logger = get_logger("quantizer")

# Distinct colors matched per distance-matrix evaluation.
CHUNK_SIZE = 4096


def palette_lab_array(palette: Palette) -> np.ndarray:
    """Palette colors as an ``[M, 3]`` float64 array, in palette order."""
    if not len(palette):
        return np.empty((0, 3), dtype=np.float64)
    return np.array([entry.lab.as_tuple() for entry in palette], dtype=np.float64)


def nearest_indices(
    labs: np.ndarray,
    palette_labs: np.ndarray,
    should_cancel: Callable[[], bool] | None = None,
    chunk_size: int = CHUNK_SIZE,
) -> np.ndarray:
    """Index of the closest palette color (CIEDE2000) for each Lab row.

    Exact ties resolve to the lowest index, i.e. the entry inserted first.
    """
    out = np.empty(len(labs), dtype=np.intp)
    for start in range(0, len(labs), chunk_size):
        if should_cancel is not None and should_cancel():
            raise QuantizationCancelledError("Quantization cancelled")
        stop = start + chunk_size
        distances = delta_e2000_matrix(labs[start:stop], palette_labs)
        # argmin returns the first minimum, which is the tie-break we want.
        out[start:stop] = np.argmin(distances, axis=1)
    return out


def quantize(
    image: Image.Image | np.ndarray,
    palette: Palette,
    fallback: str = AIR,
    should_cancel: Callable[[], bool] | None = None,
) -> QuantizedGrid:
    """Map every pixel of *image* to the identifier of its closest palette entry.

    The source image's alpha channel is ignored. Pixels sharing an RGB
    value are matched once. With an empty palette every cell becomes
    *fallback*.

    Args:
        image: A Pillow image or an ``[H, W, 3|4]`` uint8 array.
        palette: The palette to match against; its order sets the tie-break.
        fallback: Identifier used when no entry can be chosen.
        should_cancel: Polled between color chunks and scan-lines;
            returning True aborts the run.

    Returns:
        A grid with the image's height and width. An image with no
        pixels (zero height or zero width) yields the empty grid, whose
        height and width are both 0.

    Raises:
        QuantizationCancelledError: If *should_cancel* returned True.
    """
    pixels = image_to_array(image) if isinstance(image, Image.Image) else image
    pixels = np.asarray(pixels)
    if pixels.ndim != 3 or pixels.shape[2] < 3:
        raise ValueError(f"Expected an [H, W, 3|4] array, got shape {pixels.shape}")

    height, width = pixels.shape[:2]
    if height == 0 or width == 0:
        return QuantizedGrid()

    if not len(palette):
        logger.warning("Quantizing against an empty palette; using %s", fallback)
        return QuantizedGrid(rows=[[fallback] * width for _ in range(height)])

    rgb = pixels[..., :3].astype(np.uint8).reshape(-1, 3)
    unique_rgb, inverse = np.unique(rgb, axis=0, return_inverse=True)
    inverse = inverse.reshape(height, width)

    logger.debug(
        "Quantizing %dx%d image (%d distinct colors) against %d entries",
        width,
        height,
        len(unique_rgb),
        len(palette),
    )

    best = nearest_indices(
        rgb_array_to_lab(unique_rgb), palette_lab_array(palette), should_cancel
    )
    identifiers = palette.identifiers
    color_ids = [identifiers[i] for i in best]

    rows: list[list[str]] = []
    for y in range(height):
        if should_cancel is not None and should_cancel():
            raise QuantizationCancelledError(f"Quantization cancelled at row {y}")
        rows.append([color_ids[i] for i in inverse[y]])
    return QuantizedGrid(rows=rows)


def load_source_image(image_source: ImageSource, logical_path: str) -> Image.Image:
    """Fetch the image to be quantized.

    Raises:
        ImageLoadError: If the image cannot be fetched or decoded.
    """
    image = load_image(image_source, logical_path)
    logger.info("Loaded %s (%dx%d)", logical_path, image.width, image.height)
    return image
