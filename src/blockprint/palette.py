"""Palette construction from block textures.

Each candidate is filtered by shape, its texture is fetched and decoded,
and the mean color of its opaque pixels becomes the entry's Lab color.
A candidate whose texture is missing or unreadable is skipped; the skip
is recorded in the :class:`PaletteBuildReport` instead of failing the
whole build.
"""

from __future__ import annotations

import enum
from collections import Counter
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import numpy as np
from PIL import Image
from pydantic import BaseModel, ConfigDict, ValidationError

from blockprint.color import rgb_to_lab
from blockprint.constants import (
    ALPHA_THRESHOLD,
    DEFAULT_TEXTURE_TEMPLATE,
    FALLBACK_RGB,
)
from blockprint.errors import ImageLoadError, PaletteError
from blockprint.image_io import decode_image, image_to_array
from blockprint.logging import get_logger
from blockprint.models import LabColor, Palette, PaletteCandidate, PaletteEntry
from blockprint.sources import ImageSource

logger = get_logger("palette")


class SkipReason(str, enum.Enum):
    """Why a candidate did not make it into the palette."""

    NOT_FULL_CUBE = "not_full_cube"
    VOID = "void"
    TEXTURE_MISSING = "texture_missing"
    TEXTURE_UNREADABLE = "texture_unreadable"


class CandidateOutcome(BaseModel):
    """Result of sampling one candidate."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    entry: PaletteEntry | None = None
    skip_reason: SkipReason | None = None
    detail: str = ""

    @property
    def included(self) -> bool:
        return self.entry is not None


class PaletteBuildReport(BaseModel):
    """A built palette plus what happened to every candidate."""

    model_config = ConfigDict(frozen=True)

    palette: Palette
    outcomes: tuple[CandidateOutcome, ...] = ()

    @property
    def skipped(self) -> list[CandidateOutcome]:
        return [o for o in self.outcomes if not o.included]

    def skip_counts(self) -> dict[SkipReason, int]:
        """Number of skipped candidates per reason."""
        return dict(Counter(o.skip_reason for o in self.skipped if o.skip_reason))


def average_texture_lab(
    image: Image.Image, alpha_threshold: int = ALPHA_THRESHOLD
) -> LabColor:
    """Representative Lab color of a texture.

    Pixels with alpha below *alpha_threshold* are ignored. The remaining
    pixels' RGB channels are averaged, truncated to integers and converted
    to Lab. A texture with no qualifying pixels yields the Lab color of
    magenta so degenerate textures stand out.
    """
    pixels = image_to_array(image).reshape(-1, 4)
    opaque = pixels[pixels[:, 3] >= alpha_threshold]
    if len(opaque) == 0:
        return rgb_to_lab(*FALLBACK_RGB)

    sums = opaque[:, :3].sum(axis=0, dtype=np.int64)
    count = len(opaque)
    r, g, b = (int(channel / count) for channel in sums)
    return rgb_to_lab(r, g, b)


def sample_candidate(
    candidate: PaletteCandidate,
    image_source: ImageSource,
    texture_template: str = DEFAULT_TEXTURE_TEMPLATE,
    alpha_threshold: int = ALPHA_THRESHOLD,
) -> CandidateOutcome:
    """Filter one candidate and, if eligible, compute its palette entry."""
    identifier = candidate.identifier
    if not candidate.is_full_cube():
        return CandidateOutcome(
            identifier=identifier, skip_reason=SkipReason.NOT_FULL_CUBE
        )
    if candidate.void:
        return CandidateOutcome(identifier=identifier, skip_reason=SkipReason.VOID)

    texture_path = candidate.texture_path(texture_template)
    # Any fetch failure skips just this candidate.
    try:
        data = image_source.fetch(texture_path)
    except Exception as exc:
        logger.debug("Skipping %s: %s", identifier, exc)
        return CandidateOutcome(
            identifier=identifier,
            skip_reason=SkipReason.TEXTURE_MISSING,
            detail=str(exc),
        )

    try:
        image = decode_image(data, name=texture_path)
        lab = average_texture_lab(image, alpha_threshold)
    except ImageLoadError as exc:
        logger.debug("Skipping %s: %s", identifier, exc)
        return CandidateOutcome(
            identifier=identifier,
            skip_reason=SkipReason.TEXTURE_UNREADABLE,
            detail=str(exc),
        )

    return CandidateOutcome(
        identifier=identifier, entry=PaletteEntry(identifier=identifier, lab=lab)
    )


def build_palette_report(
    candidates: Iterable[PaletteCandidate],
    image_source: ImageSource,
    *,
    texture_template: str = DEFAULT_TEXTURE_TEMPLATE,
    alpha_threshold: int = ALPHA_THRESHOLD,
    max_workers: int | None = None,
) -> PaletteBuildReport:
    """Sample every candidate and assemble a palette.

    Candidates are independent, so with ``max_workers > 1`` they are
    sampled on a thread pool. Outcomes are always merged in candidate
    order, so the palette's order does not depend on scheduling.

    If two candidates share an identifier the later one's color wins,
    keeping the position of the first.

    Args:
        candidates: Blocks to consider.
        image_source: Where textures are fetched from.
        texture_template: Format string for derived texture paths
            (``{namespace}`` and ``{path}`` placeholders).
        alpha_threshold: Minimum alpha for a texture pixel to count.
        max_workers: Thread count; ``None`` or ``1`` samples serially.

    Returns:
        A report holding the palette and one outcome per candidate.
    """
    items = list(candidates)

    def _sample(candidate: PaletteCandidate) -> CandidateOutcome:
        return sample_candidate(
            candidate, image_source, texture_template, alpha_threshold
        )

    if max_workers is not None and max_workers > 1 and len(items) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            outcomes = list(pool.map(_sample, items))
    else:
        outcomes = [_sample(c) for c in items]

    by_id: dict[str, PaletteEntry] = {}
    for outcome in outcomes:
        if outcome.entry is not None:
            if outcome.identifier in by_id:
                logger.warning("Duplicate palette candidate %s", outcome.identifier)
            by_id[outcome.identifier] = outcome.entry

    palette = Palette(entries=tuple(by_id.values()))
    report = PaletteBuildReport(palette=palette, outcomes=tuple(outcomes))

    logger.info("Palette size = %d (%d candidates)", len(palette), len(items))
    for reason, count in sorted(report.skip_counts().items()):
        logger.debug("Skipped %d candidate(s): %s", count, reason.value)
    return report


def build_palette(
    candidates: Iterable[PaletteCandidate],
    image_source: ImageSource,
    *,
    texture_template: str = DEFAULT_TEXTURE_TEMPLATE,
    alpha_threshold: int = ALPHA_THRESHOLD,
    max_workers: int | None = None,
) -> Palette:
    """Build a palette, discarding the per-candidate report."""
    return build_palette_report(
        candidates,
        image_source,
        texture_template=texture_template,
        alpha_threshold=alpha_threshold,
        max_workers=max_workers,
    ).palette


def save_palette(palette: Palette, path: str | Path) -> None:
    """Write *palette* to a JSON file."""
    dest = Path(path)
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_text(palette.model_dump_json(indent=2) + "\n", encoding="utf-8")


def load_palette(path: str | Path) -> Palette:
    """Read a palette previously written by :func:`save_palette`.

    Raises:
        FileNotFoundError: If the file does not exist.
        PaletteError: If the file is not a valid palette.
    """
    src = Path(path)
    if not src.is_file():
        raise FileNotFoundError(f"Palette file not found: {src}")
    try:
        return Palette.model_validate_json(src.read_text(encoding="utf-8"))
    except ValidationError as exc:
        raise PaletteError(f"Invalid palette file {src}: {exc}") from exc
