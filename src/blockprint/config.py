"""YAML manifest loading for palette builds."""

from __future__ import annotations

from collections import Counter
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from blockprint.constants import AIR, ALPHA_THRESHOLD, DEFAULT_TEXTURE_TEMPLATE
from blockprint.errors import ConfigError
from blockprint.logging import get_logger
from blockprint.models import PaletteCandidate

logger = get_logger("config")


class TextureConfig(BaseModel):
    """Where candidate textures live.

    Attributes:
        root: Directory holding textures; relative paths are resolved
            against the manifest's directory.
        template: Texture path pattern with ``{namespace}`` and ``{path}``.
    """

    root: Path = Path(".")
    template: str = DEFAULT_TEXTURE_TEMPLATE

    @field_validator("template")
    @classmethod
    def _template_placeholders(cls, v: str) -> str:
        try:
            v.format(namespace="ns", path="p")
        except (KeyError, IndexError, ValueError) as exc:
            raise ValueError(
                "template may only use {namespace} and {path} placeholders"
            ) from exc
        return v


class PaletteManifest(BaseModel):
    """Everything needed to build a palette.

    Attributes:
        textures: Texture location settings.
        fallback: Identifier used for pixels no entry can match.
        alpha_threshold: Minimum texture alpha counted when averaging.
        workers: Thread count for sampling (1 = serial).
        candidates: Blocks considered for the palette, in priority order.
    """

    textures: TextureConfig = Field(default_factory=TextureConfig)
    fallback: str = Field(default=AIR, min_length=1)
    alpha_threshold: int = Field(default=ALPHA_THRESHOLD, ge=0, le=255)
    workers: int = Field(default=1, ge=1)
    candidates: list[PaletteCandidate] = []

    @field_validator("candidates", mode="before")
    @classmethod
    def _rename_id(cls, v: object) -> object:
        if not isinstance(v, list):
            return v
        out = []
        for item in v:
            if isinstance(item, str):
                item = {"identifier": item}
            elif isinstance(item, dict) and "id" in item:
                item = {
                    ("identifier" if key == "id" else key): value
                    for key, value in item.items()
                }
            out.append(item)
        return out


def validate_manifest_path(path: str | Path) -> Path:
    """Resolve *path* and check that it is an existing file.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    resolved = Path(path)
    if not resolved.is_file():
        raise FileNotFoundError(f"Manifest file not found: {resolved}")
    return resolved


def _parse_yaml(path: Path) -> dict:
    with open(path, "r", encoding="utf-8") as fh:
        try:
            data = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Malformed YAML in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}"
        )
    return data


def load_manifest(path: str | Path) -> PaletteManifest:
    """Load and validate a palette manifest.

    The texture root is made absolute relative to the manifest file.

    Raises:
        FileNotFoundError: If the manifest doesn't exist.
        ConfigError: If the YAML is malformed or fails validation.
    """
    resolved = validate_manifest_path(path)
    data = _parse_yaml(resolved)

    if "candidates" in data and not isinstance(data["candidates"], list):
        raise ConfigError(
            "'candidates' must be a YAML sequence, "
            f"got {type(data['candidates']).__name__}"
        )

    try:
        manifest = PaletteManifest(**data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid manifest {resolved}: {exc}") from exc

    root = manifest.textures.root
    if not root.is_absolute():
        root = (resolved.parent / root).resolve()
    manifest = manifest.model_copy(
        update={"textures": manifest.textures.model_copy(update={"root": root})}
    )

    counts = Counter(c.identifier for c in manifest.candidates)
    duplicates = sorted(i for i, n in counts.items() if n > 1)
    if duplicates:
        logger.warning("Manifest lists candidates more than once: %s", duplicates)

    logger.info(
        "Loaded manifest %s (%d candidates, textures at %s)",
        resolved,
        len(manifest.candidates),
        root,
    )
    return manifest
