"""Tests for blockprint.models — pydantic data models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from blockprint.models import (
    BoundingBox,
    GridPacket,
    LabColor,
    Palette,
    PaletteCandidate,
    PaletteEntry,
    QuantizedGrid,
    split_identifier,
)


class TestSplitIdentifier:
    def test_namespaced(self) -> None:
        assert split_identifier("mod:marble_bricks") == ("mod", "marble_bricks")

    def test_default_namespace(self) -> None:
        assert split_identifier("stone") == ("minecraft", "stone")


class TestLabColor:
    def test_as_tuple(self) -> None:
        assert LabColor(L=50, a=-3, b=4.5).as_tuple() == (50.0, -3.0, 4.5)

    def test_negative_lightness_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LabColor(L=-1, a=0, b=0)

    def test_frozen(self) -> None:
        color = LabColor(L=1, a=2, b=3)
        with pytest.raises(ValidationError):
            color.L = 5  # type: ignore[misc]


class TestBoundingBox:
    def test_unit_cube(self) -> None:
        assert BoundingBox.unit().is_unit_cube()

    def test_within_epsilon(self) -> None:
        box = BoundingBox.from_sequence([1e-7, 0, 0, 1, 1 - 1e-7, 1])
        assert box.is_unit_cube()

    def test_outside_epsilon(self) -> None:
        box = BoundingBox.from_sequence([0, 0, 0, 1, 1 - 1e-5, 1])
        assert not box.is_unit_cube()

    def test_slab(self) -> None:
        assert not BoundingBox.from_sequence([0, 0, 0, 1, 0.5, 1]).is_unit_cube()

    def test_wrong_length(self) -> None:
        with pytest.raises(ValueError, match="6 values"):
            BoundingBox.from_sequence([0, 0, 0])


class TestPaletteCandidate:
    def test_defaults_to_full_cube(self) -> None:
        candidate = PaletteCandidate(identifier="minecraft:stone")
        assert candidate.is_full_cube()
        assert not candidate.void

    def test_no_collision_is_not_full_cube(self) -> None:
        assert not PaletteCandidate(identifier="minecraft:torch", bounds=None).is_full_cube()

    def test_bounds_from_nested_list(self) -> None:
        candidate = PaletteCandidate(
            identifier="minecraft:slab", bounds=[[0, 0, 0], [1, 0.5, 1]]
        )
        assert candidate.bounds is not None
        assert candidate.bounds.max_y == 0.5

    def test_empty_identifier_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PaletteCandidate(identifier="")

    def test_texture_path_from_template(self) -> None:
        candidate = PaletteCandidate(identifier="mod:marble")
        assert (
            candidate.texture_path("assets/{namespace}/textures/block/{path}.png")
            == "assets/mod/textures/block/marble.png"
        )

    def test_explicit_texture_wins(self) -> None:
        candidate = PaletteCandidate(identifier="mod:marble", texture="x/y.png")
        assert candidate.texture_path("{namespace}/{path}") == "x/y.png"


class TestPalette:
    def _entry(self, identifier: str, L: float = 50) -> PaletteEntry:
        return PaletteEntry(identifier=identifier, lab=LabColor(L=L, a=0, b=0))

    def test_order_and_lookup(self) -> None:
        palette = Palette(entries=(self._entry("b"), self._entry("a", 10)))
        assert palette.identifiers == ["b", "a"]
        assert len(palette) == 2
        assert "a" in palette
        assert "c" not in palette
        found = palette.get("a")
        assert found is not None
        assert found.lab.L == 10
        assert palette.get("c") is None

    def test_duplicates_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Duplicate"):
            Palette(entries=(self._entry("a"), self._entry("a")))

    def test_json_round_trip(self) -> None:
        palette = Palette(entries=(self._entry("x"), self._entry("y", 70)))
        assert Palette.model_validate_json(palette.model_dump_json()) == palette


class TestQuantizedGrid:
    def test_dimensions(self) -> None:
        grid = QuantizedGrid(rows=[["a", "b", "c"], ["d", "e", "f"]])
        assert grid.height == 2
        assert grid.width == 3
        assert grid[1][2] == "f"
        assert grid.identifiers() == {"a", "b", "c", "d", "e", "f"}

    def test_empty(self) -> None:
        grid = QuantizedGrid()
        assert grid.height == 0
        assert grid.width == 0
        assert grid.identifiers() == set()

    def test_zero_width_rows_collapse(self) -> None:
        grid = QuantizedGrid(rows=[[], [], []])
        assert grid == QuantizedGrid()
        assert grid.height == 0

    def test_rows_are_immutable(self) -> None:
        grid = QuantizedGrid(rows=[["a"]])
        assert isinstance(grid.rows, tuple)
        assert isinstance(grid.rows[0], tuple)

    def test_ragged_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Row 1"):
            QuantizedGrid(rows=[["a", "b"], ["c"]])


class TestGridPacket:
    def test_defaults(self) -> None:
        packet = GridPacket()
        assert packet.origin == (0, 0, 0)
        assert packet.grid == QuantizedGrid()
