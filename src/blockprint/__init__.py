"""BlockPrint — quantize images into grids of palette blocks."""

from blockprint.codec import (
    decode_grid,
    decode_packet,
    encode_grid,
    encode_packet,
    read_packet,
    write_packet,
)
from blockprint.color import lab_to_rgb, rgb_array_to_lab, rgb_to_lab
from blockprint.config import PaletteManifest, load_manifest
from blockprint.constants import AIR
from blockprint.distance import delta_e2000, delta_e2000_matrix
from blockprint.errors import (
    BlockPrintError,
    ConfigError,
    GridCodecError,
    GridDecodeError,
    GridEncodeError,
    ImageLoadError,
    PaletteError,
    QuantizationCancelledError,
)
from blockprint.logging import get_logger, setup_logging
from blockprint.models import (
    BoundingBox,
    GridPacket,
    LabColor,
    Palette,
    PaletteCandidate,
    PaletteEntry,
    QuantizedGrid,
)
from blockprint.palette import (
    CandidateOutcome,
    PaletteBuildReport,
    SkipReason,
    build_palette,
    build_palette_report,
    load_palette,
    save_palette,
)
from blockprint.placement import iter_placements
from blockprint.quantizer import load_source_image, quantize
from blockprint.renderer import render_grid
from blockprint.sources import (
    DirectoryImageSource,
    ImageSource,
    MappingImageSource,
    Materializer,
    ShapeDescriptor,
)

__all__ = [
    "AIR",
    "BlockPrintError",
    "BoundingBox",
    "CandidateOutcome",
    "ConfigError",
    "DirectoryImageSource",
    "GridCodecError",
    "GridDecodeError",
    "GridEncodeError",
    "GridPacket",
    "ImageLoadError",
    "ImageSource",
    "LabColor",
    "MappingImageSource",
    "Materializer",
    "Palette",
    "PaletteBuildReport",
    "PaletteCandidate",
    "PaletteEntry",
    "PaletteError",
    "PaletteManifest",
    "QuantizationCancelledError",
    "QuantizedGrid",
    "ShapeDescriptor",
    "SkipReason",
    "build_palette",
    "build_palette_report",
    "decode_grid",
    "decode_packet",
    "delta_e2000",
    "delta_e2000_matrix",
    "encode_grid",
    "encode_packet",
    "get_logger",
    "iter_placements",
    "lab_to_rgb",
    "load_manifest",
    "load_palette",
    "load_source_image",
    "quantize",
    "read_packet",
    "render_grid",
    "rgb_array_to_lab",
    "rgb_to_lab",
    "save_palette",
    "setup_logging",
    "write_packet",
]
