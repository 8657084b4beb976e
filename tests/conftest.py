"""Shared fixtures for blockprint tests."""

from __future__ import annotations

import pytest

from blockprint.color import rgb_to_lab
from blockprint.models import LabColor, Palette, PaletteEntry


@pytest.fixture()
def black_white_palette() -> Palette:
    """Pure black then pure white, by Lab value."""
    return Palette(
        entries=(
            PaletteEntry(identifier="black", lab=LabColor(L=0, a=0, b=0)),
            PaletteEntry(identifier="white", lab=LabColor(L=100, a=0, b=0)),
        )
    )


@pytest.fixture()
def rgb_palette() -> Palette:
    """Blocks with red, green and blue representative colors."""
    return Palette(
        entries=(
            PaletteEntry(identifier="minecraft:red_wool", lab=rgb_to_lab(200, 30, 30)),
            PaletteEntry(
                identifier="minecraft:green_wool", lab=rgb_to_lab(30, 160, 40)
            ),
            PaletteEntry(identifier="minecraft:blue_wool", lab=rgb_to_lab(40, 50, 190)),
        )
    )
