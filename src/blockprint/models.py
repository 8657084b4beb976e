"""Pydantic data models for colors, palette candidates, palettes and grids."""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from blockprint.constants import DEFAULT_NAMESPACE, FULL_CUBE_EPSILON


def split_identifier(identifier: str) -> tuple[str, str]:
    """Split ``"namespace:path"`` into its parts.

    Identifiers without a colon belong to the default namespace.
    """
    namespace, sep, path = identifier.partition(":")
    if not sep:
        return DEFAULT_NAMESPACE, identifier
    return namespace, path


class LabColor(BaseModel):
    """A CIE L*a*b* color.

    Attributes:
        L: Lightness (0 and up; the forward conversion clamps at 0).
        a: Green–red opponent axis.
        b: Blue–yellow opponent axis.
    """

    model_config = ConfigDict(frozen=True)

    L: float = Field(..., ge=0.0)
    a: float
    b: float

    def as_tuple(self) -> tuple[float, float, float]:
        """Return the color as an ``(L, a, b)`` tuple."""
        return (self.L, self.a, self.b)


class BoundingBox(BaseModel):
    """Axis-aligned bounds of a candidate's collision volume."""

    model_config = ConfigDict(frozen=True)

    min_x: float
    min_y: float
    min_z: float
    max_x: float
    max_y: float
    max_z: float

    @classmethod
    def unit(cls) -> "BoundingBox":
        """The ``[0,0,0]``–``[1,1,1]`` cube."""
        return cls(min_x=0, min_y=0, min_z=0, max_x=1, max_y=1, max_z=1)

    @classmethod
    def from_sequence(cls, values: list[float] | tuple[float, ...]) -> "BoundingBox":
        """Build from ``[min_x, min_y, min_z, max_x, max_y, max_z]``."""
        if len(values) != 6:
            raise ValueError(f"bounds must have 6 values, got {len(values)}")
        return cls(
            min_x=values[0],
            min_y=values[1],
            min_z=values[2],
            max_x=values[3],
            max_y=values[4],
            max_z=values[5],
        )

    def is_unit_cube(self, eps: float = FULL_CUBE_EPSILON) -> bool:
        """True when the box spans exactly one unit on every axis from the origin."""
        return (
            abs(self.min_x) < eps
            and abs(self.min_y) < eps
            and abs(self.min_z) < eps
            and abs(self.max_x - 1.0) < eps
            and abs(self.max_y - 1.0) < eps
            and abs(self.max_z - 1.0) < eps
        )


class PaletteCandidate(BaseModel):
    """A block that may become a palette entry.

    Attributes:
        identifier: Namespaced key, e.g. ``"minecraft:stone"``.
        bounds: Collision bounds; ``None`` means an empty collision volume.
        void: True for air-like blocks, which never join the palette.
        texture: Explicit texture path; derived from the identifier when unset.
    """

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(..., min_length=1)
    bounds: BoundingBox | None = Field(default_factory=BoundingBox.unit)
    void: bool = False
    texture: str | None = None

    @field_validator("bounds", mode="before")
    @classmethod
    def _bounds_from_list(cls, v: object) -> object:
        if isinstance(v, (list, tuple)):
            # Accept [[min...], [max...]] as well as a flat list of six.
            if len(v) == 2 and all(isinstance(p, (list, tuple)) for p in v):
                v = [*v[0], *v[1]]
            return BoundingBox.from_sequence(v)
        return v

    def is_full_cube(self, eps: float = FULL_CUBE_EPSILON) -> bool:
        return self.bounds is not None and self.bounds.is_unit_cube(eps)

    def texture_path(self, template: str) -> str:
        """Logical path of this candidate's texture."""
        if self.texture:
            return self.texture
        namespace, path = split_identifier(self.identifier)
        return template.format(namespace=namespace, path=path)


class PaletteEntry(BaseModel):
    """A palette member: identifier plus representative Lab color."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    lab: LabColor


class Palette(BaseModel):
    """Immutable, ordered collection of palette entries.

    Iteration follows insertion order, which is also the tie-break order
    used during quantization: among equally close entries the earliest
    one wins.
    """

    model_config = ConfigDict(frozen=True)

    entries: tuple[PaletteEntry, ...] = ()

    @model_validator(mode="after")
    def _unique_identifiers(self) -> "Palette":
        seen: set[str] = set()
        for entry in self.entries:
            if entry.identifier in seen:
                raise ValueError(f"Duplicate palette identifier: {entry.identifier!r}")
            seen.add(entry.identifier)
        return self

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[PaletteEntry]:  # type: ignore[override]
        return iter(self.entries)

    def __contains__(self, identifier: object) -> bool:
        return any(entry.identifier == identifier for entry in self.entries)

    @property
    def identifiers(self) -> list[str]:
        return [entry.identifier for entry in self.entries]

    def get(self, identifier: str) -> PaletteEntry | None:
        """Look up an entry by identifier."""
        for entry in self.entries:
            if entry.identifier == identifier:
                return entry
        return None


class QuantizedGrid(BaseModel):
    """Rows of palette identifiers, ``rows[y][x]``.

    All rows share one width. An empty grid has height 0 and width 0;
    rows with no cells are collapsed to the empty grid, so a grid with
    a positive height always has a positive width.
    """

    model_config = ConfigDict(frozen=True)

    rows: tuple[tuple[str, ...], ...] = ()

    @field_validator("rows", mode="before")
    @classmethod
    def _freeze_rows(cls, v: object) -> object:
        if isinstance(v, (list, tuple)):
            rows = tuple(tuple(row) for row in v)
            if all(not row for row in rows):
                return ()
            return rows
        return v

    @model_validator(mode="after")
    def _rectangular(self) -> "QuantizedGrid":
        if self.rows:
            width = len(self.rows[0])
            for y, row in enumerate(self.rows):
                if len(row) != width:
                    raise ValueError(
                        f"Row {y} has {len(row)} cells, expected {width}"
                    )
        return self

    @property
    def height(self) -> int:
        return len(self.rows)

    @property
    def width(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    def __getitem__(self, y: int) -> tuple[str, ...]:
        return self.rows[y]

    def identifiers(self) -> set[str]:
        """Distinct identifiers used in the grid."""
        return {cell for row in self.rows for cell in row}


class GridPacket(BaseModel):
    """A grid together with the world origin it should be placed at."""

    model_config = ConfigDict(frozen=True)

    origin: tuple[int, int, int] = (0, 0, 0)
    grid: QuantizedGrid = Field(default_factory=QuantizedGrid)
