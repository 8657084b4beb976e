"""Boundaries to the host environment: image bytes, block shapes, placement.

BlockPrint never talks to a game or resource manager directly. Hosts
implement these small interfaces; :class:`DirectoryImageSource` and
:class:`MappingImageSource` cover the common file-system and in-memory
cases.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from pathlib import Path

from blockprint.errors import ImageLoadError
from blockprint.models import BoundingBox, PaletteCandidate, QuantizedGrid


class ImageSource(ABC):
    """Supplies raw image bytes for a logical path."""

    @abstractmethod
    def fetch(self, logical_path: str) -> bytes:
        """Return the bytes stored at *logical_path*.

        Raises:
            ImageLoadError: If nothing is stored there or it cannot be read.
        """


class DirectoryImageSource(ImageSource):
    """Reads images from a directory tree, e.g. an unpacked resource pack."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def resolve(self, logical_path: str) -> Path:
        """Map *logical_path* to a file under the root.

        Raises:
            ImageLoadError: If the path would escape the root directory.
        """
        candidate = (self.root / logical_path).resolve()
        if candidate != self.root and self.root not in candidate.parents:
            raise ImageLoadError(f"Path escapes image root: {logical_path}")
        return candidate

    def fetch(self, logical_path: str) -> bytes:
        path = self.resolve(logical_path)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise ImageLoadError(f"Image not found: {logical_path}") from exc
        except OSError as exc:
            raise ImageLoadError(f"Cannot read image {logical_path}: {exc}") from exc

    def __repr__(self) -> str:
        return f"DirectoryImageSource({str(self.root)!r})"


class MappingImageSource(ImageSource):
    """Serves images from an in-memory ``{logical_path: bytes}`` mapping."""

    def __init__(self, images: Mapping[str, bytes]) -> None:
        self._images = dict(images)

    def fetch(self, logical_path: str) -> bytes:
        try:
            return self._images[logical_path]
        except KeyError:
            raise ImageLoadError(f"Image not found: {logical_path}") from None


class ShapeDescriptor(ABC):
    """Host-side knowledge of a block's physical shape."""

    @abstractmethod
    def bounding_box(self, identifier: str) -> BoundingBox | None:
        """Collision bounds of the block, or ``None`` if it has no collision volume."""

    @abstractmethod
    def is_void(self, identifier: str) -> bool:
        """True for air-like blocks."""


def candidates_from_shapes(
    identifiers: Iterable[str], shapes: ShapeDescriptor
) -> list[PaletteCandidate]:
    """Describe each identifier as a palette candidate using *shapes*."""
    return [
        PaletteCandidate(
            identifier=identifier,
            bounds=shapes.bounding_box(identifier),
            void=shapes.is_void(identifier),
        )
        for identifier in identifiers
    ]


class Materializer(ABC):
    """Realizes a decoded grid as physical objects in a world."""

    @abstractmethod
    def place(self, origin: tuple[int, int, int], grid: QuantizedGrid) -> None:
        """Place *grid* at *origin*, skipping identifiers it does not know."""
