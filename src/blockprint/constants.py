"""Shared constants for palette construction, quantization and framing."""

# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------

# Namespace assumed for identifiers written without one ("stone").
DEFAULT_NAMESPACE: str = "minecraft"

# Identifier emitted when no palette entry matches (empty palette).
AIR: str = "minecraft:air"

# Resource-pack location of a block texture, relative to the pack root.
DEFAULT_TEXTURE_TEMPLATE: str = "assets/{namespace}/textures/block/{path}.png"

# ---------------------------------------------------------------------------
# Palette sampling
# ---------------------------------------------------------------------------

# Pixels with alpha below this are treated as background while averaging.
ALPHA_THRESHOLD: int = 128

# Sentinel color for textures with no opaque pixels.
FALLBACK_RGB: tuple[int, int, int] = (255, 0, 255)

# Tolerance for the unit-cube collision test.
FULL_CUBE_EPSILON: float = 1e-6

# ---------------------------------------------------------------------------
# Grid framing
# ---------------------------------------------------------------------------

# Longest identifier accepted on the wire, in characters.
MAX_IDENTIFIER_LENGTH: int = 32767

# Varints are capped at 5 bytes (values below 2**31).
MAX_VARINT_BYTES: int = 5
