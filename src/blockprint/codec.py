"""Binary framing for grid packets.

Layout, in order::

    origin   3 x signed 32-bit little-endian integers (x, y, z)
    height   unsigned LEB128 varint
    width    unsigned LEB128 varint, >= 1    (omitted when height == 0)
    tokens   height * width identifiers, row-major (y outer, x inner);
             each is a varint byte count followed by UTF-8 bytes

Varints use 7 data bits per byte, low bits first, high bit set on every
byte but the last, at most 5 bytes (values below 2**31).
"""

from __future__ import annotations

import io
import struct
from typing import BinaryIO

from blockprint.constants import MAX_IDENTIFIER_LENGTH, MAX_VARINT_BYTES
from blockprint.errors import GridDecodeError, GridEncodeError
from blockprint.models import GridPacket, QuantizedGrid

_ORIGIN = struct.Struct("<iii")
_MAX_VARINT = 2**31 - 1
# A character encodes to at most 3 UTF-8 bytes within the length limit.
_MAX_IDENTIFIER_BYTES = MAX_IDENTIFIER_LENGTH * 3


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------


def write_varint(stream: BinaryIO, value: int) -> None:
    """Write a non-negative integer as an unsigned LEB128 varint."""
    if value < 0 or value > _MAX_VARINT:
        raise GridEncodeError(f"Varint out of range: {value}")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            break
    stream.write(bytes(out))


def _read_exact(stream: BinaryIO, size: int, what: str) -> bytes:
    data = stream.read(size)
    if data is None or len(data) != size:
        got = 0 if not data else len(data)
        raise GridDecodeError(f"Stream ended while reading {what} ({got}/{size} bytes)")
    return data


def read_varint(stream: BinaryIO, what: str = "varint") -> int:
    """Read an unsigned LEB128 varint written by :func:`write_varint`."""
    value = 0
    for shift in range(0, 7 * MAX_VARINT_BYTES, 7):
        byte = _read_exact(stream, 1, what)[0]
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            if value > _MAX_VARINT:
                raise GridDecodeError(f"{what} out of range: {value}")
            return value
    raise GridDecodeError(f"{what} is longer than {MAX_VARINT_BYTES} bytes")


def write_identifier(stream: BinaryIO, identifier: str) -> None:
    if len(identifier) > MAX_IDENTIFIER_LENGTH:
        raise GridEncodeError(
            f"Identifier longer than {MAX_IDENTIFIER_LENGTH} characters"
        )
    try:
        raw = identifier.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise GridEncodeError(f"Identifier is not valid text: {identifier!r}") from exc
    write_varint(stream, len(raw))
    stream.write(raw)


def read_identifier(stream: BinaryIO) -> str:
    size = read_varint(stream, "identifier length")
    if size > _MAX_IDENTIFIER_BYTES:
        raise GridDecodeError(f"Identifier length {size} exceeds limit")
    raw = _read_exact(stream, size, "identifier")
    try:
        identifier = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise GridDecodeError("Identifier is not valid UTF-8") from exc
    if len(identifier) > MAX_IDENTIFIER_LENGTH:
        raise GridDecodeError(
            f"Identifier longer than {MAX_IDENTIFIER_LENGTH} characters"
        )
    return identifier


# ---------------------------------------------------------------------------
# Packets
# ---------------------------------------------------------------------------


def write_packet(stream: BinaryIO, packet: GridPacket) -> None:
    """Serialize *packet* onto *stream*."""
    try:
        stream.write(_ORIGIN.pack(*packet.origin))
    except struct.error as exc:
        raise GridEncodeError(f"Origin out of range: {packet.origin}") from exc

    grid = packet.grid
    write_varint(stream, grid.height)
    if grid.height == 0:
        return
    write_varint(stream, grid.width)
    for row in grid.rows:
        for identifier in row:
            write_identifier(stream, identifier)


def read_packet(stream: BinaryIO) -> GridPacket:
    """Read one packet from *stream*.

    Consumes exactly the bytes of one packet, so several packets can be
    read back to back from the same stream.

    Raises:
        GridDecodeError: If the stream is truncated or malformed.
    """
    origin = _ORIGIN.unpack(_read_exact(stream, _ORIGIN.size, "origin"))
    height = read_varint(stream, "height")
    if height == 0:
        return GridPacket(origin=origin, grid=QuantizedGrid())

    width = read_varint(stream, "width")
    if width == 0:
        raise GridDecodeError(f"Grid declares height {height} but width 0")
    rows: list[list[str]] = []
    for y in range(height):
        row: list[str] = []
        for x in range(width):
            try:
                row.append(read_identifier(stream))
            except GridDecodeError as exc:
                raise GridDecodeError(f"Cell ({x}, {y}): {exc}") from exc
        rows.append(row)
    return GridPacket(origin=origin, grid=QuantizedGrid(rows=rows))


def encode_packet(packet: GridPacket) -> bytes:
    """Serialize *packet* to bytes."""
    buf = io.BytesIO()
    write_packet(buf, packet)
    return buf.getvalue()


def decode_packet(data: bytes) -> GridPacket:
    """Deserialize a packet produced by :func:`encode_packet`.

    Raises:
        GridDecodeError: If *data* is truncated, malformed, or carries
            bytes beyond the declared grid.
    """
    buf = io.BytesIO(data)
    packet = read_packet(buf)
    leftover = len(data) - buf.tell()
    if leftover:
        raise GridDecodeError(f"{leftover} trailing byte(s) after grid data")
    return packet


def encode_grid(grid: QuantizedGrid, origin: tuple[int, int, int] = (0, 0, 0)) -> bytes:
    """Shorthand for encoding a bare grid."""
    return encode_packet(GridPacket(origin=origin, grid=grid))


def decode_grid(data: bytes) -> QuantizedGrid:
    """Shorthand for decoding a packet and keeping only its grid."""
    return decode_packet(data).grid


__all__ = [
    "decode_grid",
    "decode_packet",
    "encode_grid",
    "encode_packet",
    "read_identifier",
    "read_packet",
    "read_varint",
    "write_identifier",
    "write_packet",
    "write_varint",
]
