"""BlockPrint error hierarchy.

All custom exceptions inherit from BlockPrintError, enabling callers
to catch the base class for blanket error handling or specific
subclasses for targeted recovery.
"""


class BlockPrintError(Exception):
    """Base exception for all BlockPrint errors."""


class ConfigError(BlockPrintError):
    """Raised when manifest loading or validation fails."""


class PaletteError(BlockPrintError):
    """Raised when palette operations fail (duplicate ids, bad palette file)."""


class ImageLoadError(BlockPrintError):
    """Raised when an image cannot be fetched or decoded."""


class QuantizationCancelledError(BlockPrintError):
    """Raised when a quantization run is cancelled by its caller."""


class GridCodecError(BlockPrintError):
    """Base class for grid stream encode/decode failures."""


class GridEncodeError(GridCodecError):
    """Raised when a grid packet cannot be written (origin or identifier out of range)."""


class GridDecodeError(GridCodecError):
    """Raised when a grid stream is truncated or malformed."""
