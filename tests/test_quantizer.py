"""Tests for blockprint.quantizer — nearest-entry image quantization."""

from __future__ import annotations

import numpy as np
import pytest
from image_helpers import png_bytes
from PIL import Image

from blockprint.constants import AIR
from blockprint.errors import ImageLoadError, QuantizationCancelledError
from blockprint.models import LabColor, Palette, PaletteEntry, QuantizedGrid
from blockprint.quantizer import (
    load_source_image,
    nearest_indices,
    palette_lab_array,
    quantize,
)
from blockprint.sources import MappingImageSource


def _solid(color: tuple[int, int, int], size: tuple[int, int] = (3, 2)) -> Image.Image:
    return Image.new("RGB", size, color)


class TestQuantize:
    """Tests for the quantize function."""

    def test_single_entry_maps_everything(self) -> None:
        palette = Palette(
            entries=(PaletteEntry(identifier="only", lab=LabColor(L=40, a=5, b=5)),)
        )
        rng = np.random.default_rng(0)
        pixels = rng.integers(0, 256, size=(6, 7, 3), dtype=np.uint8)
        grid = quantize(pixels, palette)
        assert grid.height == 6
        assert grid.width == 7
        assert grid.identifiers() == {"only"}

    def test_near_black_and_near_white(self, black_white_palette: Palette) -> None:
        assert quantize(_solid((10, 10, 10)), black_white_palette)[0][0] == "black"
        assert quantize(_solid((245, 245, 245)), black_white_palette)[0][0] == "white"

    def test_ties_keep_first_inserted(self) -> None:
        lab = LabColor(L=50, a=10, b=-10)
        palette = Palette(
            entries=(
                PaletteEntry(identifier="first", lab=lab),
                PaletteEntry(identifier="second", lab=lab),
            )
        )
        rng = np.random.default_rng(1)
        pixels = rng.integers(0, 256, size=(5, 5, 3), dtype=np.uint8)
        for _ in range(3):
            assert quantize(pixels, palette).identifiers() == {"first"}

    def test_tie_order_follows_palette_order(self) -> None:
        lab = LabColor(L=50, a=10, b=-10)
        palette = Palette(
            entries=(
                PaletteEntry(identifier="second", lab=lab),
                PaletteEntry(identifier="first", lab=lab),
            )
        )
        assert quantize(_solid((1, 2, 3)), palette)[0][0] == "second"

    def test_empty_palette_uses_fallback(self) -> None:
        grid = quantize(_solid((200, 10, 10)), Palette())
        assert grid.identifiers() == {AIR}
        assert (grid.width, grid.height) == (3, 2)

    def test_custom_fallback(self) -> None:
        grid = quantize(_solid((200, 10, 10)), Palette(), fallback="mod:void")
        assert grid.identifiers() == {"mod:void"}

    def test_picks_matching_hue(self, rgb_palette: Palette) -> None:
        img = Image.new("RGB", (3, 1))
        img.putdata([(220, 20, 20), (20, 180, 30), (30, 40, 220)])
        grid = quantize(img, rgb_palette)
        assert grid.rows == (
            ("minecraft:red_wool", "minecraft:green_wool", "minecraft:blue_wool"),
        )

    def test_row_major_layout(self, black_white_palette: Palette) -> None:
        img = Image.new("RGB", (2, 3), (255, 255, 255))
        img.putpixel((1, 2), (0, 0, 0))
        grid = quantize(img, black_white_palette)
        assert grid.height == 3
        assert grid.width == 2
        assert grid[2][1] == "black"
        assert grid[0] == ("white", "white")

    def test_alpha_ignored(self, black_white_palette: Palette) -> None:
        img = Image.new("RGBA", (2, 2), (250, 250, 250, 0))
        assert quantize(img, black_white_palette).identifiers() == {"white"}

    def test_matches_brute_force(self, rgb_palette: Palette) -> None:
        from blockprint.color import rgb_to_lab
        from blockprint.distance import delta_e2000

        rng = np.random.default_rng(5)
        pixels = rng.integers(0, 256, size=(4, 6, 3), dtype=np.uint8)
        grid = quantize(pixels, rgb_palette)
        for y in range(4):
            for x in range(6):
                lab = rgb_to_lab(*(int(c) for c in pixels[y, x]))
                best = min(rgb_palette, key=lambda e: delta_e2000(lab, e.lab))
                assert grid[y][x] == best.identifier

    def test_deterministic(self, rgb_palette: Palette) -> None:
        rng = np.random.default_rng(9)
        pixels = rng.integers(0, 256, size=(8, 8, 3), dtype=np.uint8)
        assert quantize(pixels, rgb_palette) == quantize(pixels, rgb_palette)

    def test_zero_sized_image(self, rgb_palette: Palette) -> None:
        grid = quantize(np.zeros((0, 4, 3), dtype=np.uint8), rgb_palette)
        assert grid.height == 0
        assert grid.width == 0

    def test_zero_width_image(self, rgb_palette: Palette) -> None:
        grid = quantize(np.zeros((4, 0, 3), dtype=np.uint8), rgb_palette)
        assert grid == QuantizedGrid()

    def test_bad_shape(self, rgb_palette: Palette) -> None:
        with pytest.raises(ValueError, match="Expected an"):
            quantize(np.zeros((4, 4), dtype=np.uint8), rgb_palette)

    def test_cancellation(self, rgb_palette: Palette) -> None:
        with pytest.raises(QuantizationCancelledError):
            quantize(_solid((1, 1, 1)), rgb_palette, should_cancel=lambda: True)

    def test_cancellation_between_rows(self, rgb_palette: Palette) -> None:
        calls = {"n": 0}

        def cancel_late() -> bool:
            calls["n"] += 1
            return calls["n"] > 2

        with pytest.raises(QuantizationCancelledError, match="row"):
            quantize(_solid((1, 1, 1), (2, 5)), rgb_palette, should_cancel=cancel_late)


class TestHelpers:
    """Tests for the lower-level matching helpers."""

    def test_palette_lab_array_order(self, black_white_palette: Palette) -> None:
        arr = palette_lab_array(black_white_palette)
        assert arr.shape == (2, 3)
        assert arr[0, 0] == 0.0
        assert arr[1, 0] == 100.0

    def test_palette_lab_array_empty(self) -> None:
        assert palette_lab_array(Palette()).shape == (0, 3)

    def test_nearest_indices_chunks(self) -> None:
        labs = np.array([[0.0, 0.0, 0.0], [100.0, 0.0, 0.0]] * 5)
        ref = np.array([[100.0, 0.0, 0.0], [0.0, 0.0, 0.0]])
        out = nearest_indices(labs, ref, chunk_size=3)
        assert out.tolist() == [1, 0] * 5


class TestLoadSourceImage:
    """Tests for fetching the image to quantize."""

    def test_loads_image(self) -> None:
        source = MappingImageSource({"logo.png": png_bytes((1, 2, 3, 255), (5, 4))})
        img = load_source_image(source, "logo.png")
        assert img.size == (5, 4)
        assert img.mode == "RGBA"

    def test_missing_image_is_fatal(self) -> None:
        with pytest.raises(ImageLoadError, match="not found"):
            load_source_image(MappingImageSource({}), "logo.png")

    def test_corrupt_image_is_fatal(self) -> None:
        source = MappingImageSource({"logo.png": b"\x89PNG garbage"})
        with pytest.raises(ImageLoadError, match="Cannot decode"):
            load_source_image(source, "logo.png")
