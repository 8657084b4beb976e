"""Translate a grid into world placements for a :class:`Materializer`."""

from __future__ import annotations

from collections.abc import Container, Iterator

from blockprint.models import GridPacket, QuantizedGrid
from blockprint.sources import Materializer

Position = tuple[int, int, int]


def iter_placements(
    origin: Position, grid: QuantizedGrid
) -> Iterator[tuple[Position, str]]:
    """Yield ``(position, identifier)`` for every cell, row-major.

    The grid lies flat: cell ``(x, y)`` goes to ``origin + (x, 0, y)``.
    """
    ox, oy, oz = origin
    for y, row in enumerate(grid.rows):
        for x, identifier in enumerate(row):
            yield (ox + x, oy, oz + y), identifier


def known_placements(
    origin: Position, grid: QuantizedGrid, known: Container[str]
) -> Iterator[tuple[Position, str]]:
    """Like :func:`iter_placements` but drops identifiers not in *known*."""
    for position, identifier in iter_placements(origin, grid):
        if identifier in known:
            yield position, identifier


def deliver(packet: GridPacket, materializer: Materializer) -> None:
    """Hand a decoded packet to *materializer*."""
    materializer.place(packet.origin, packet.grid)
