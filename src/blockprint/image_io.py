"""Image decoding helpers shared by palette sampling and quantization."""

from __future__ import annotations

import io
from pathlib import Path

import numpy as np
from PIL import Image, ImageOps

from blockprint.errors import ImageLoadError
from blockprint.sources import ImageSource


def decode_image(data: bytes, name: str = "<bytes>") -> Image.Image:
    """Decode encoded image bytes (PNG, JPEG, ...) into an RGBA image.

    EXIF orientation is applied so photos come out upright.

    Raises:
        ImageLoadError: If the bytes are not a readable image.
    """
    # Pillow plugins raise SyntaxError, struct.error and others on corrupt data.
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
        img = ImageOps.exif_transpose(img) or img
        if img.mode != "RGBA":
            img = img.convert("RGBA")
    except Exception as exc:
        raise ImageLoadError(f"Cannot decode image: {name}") from exc
    return img


def load_image(source: ImageSource, logical_path: str) -> Image.Image:
    """Fetch and decode an image; any failure is fatal to the caller."""
    return decode_image(source.fetch(logical_path), name=logical_path)


def open_image_file(path: str | Path) -> Image.Image:
    """Read an image straight from disk."""
    p = Path(path)
    if not p.is_file():
        raise ImageLoadError(f"Image not found: {p}")
    return decode_image(p.read_bytes(), name=str(p))


def image_to_array(image: Image.Image) -> np.ndarray:
    """Return an ``[H, W, 4]`` uint8 RGBA array for *image*."""
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    return np.asarray(image, dtype=np.uint8)


def image_to_png_bytes(image: Image.Image) -> bytes:
    """Serialize an image to PNG bytes."""
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()
