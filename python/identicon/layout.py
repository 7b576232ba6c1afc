# python/identicon/layout.py
# Static byte layout of an indexed-color PNG built from stored deflate blocks
# Exists so every chunk offset is known before a single color is registered
# RELEVANT FILES: python/identicon/encoder.py, tests/test_layout.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Tuple

from .errors import InvalidDimensions

logger = logging.getLogger(__name__)

CHUNK_OVERHEAD = 12  # length + type + crc
IHDR_PAYLOAD = 13
ZLIB_HEADER_SIZE = 2
ADLER_SIZE = 4
BLOCK_HEADER_SIZE = 5
MAX_BLOCK = 0xFFFF
MAX_DEPTH = 256

CHUNK_ORDER: Tuple[bytes, ...] = (b"IHDR", b"PLTE", b"tRNS", b"IDAT", b"IEND")


@dataclass(frozen=True)
class ChunkSpan:
    """Position of one chunk inside the encoder buffer (signature excluded)."""

    name: bytes
    offset: int
    size: int

    @property
    def payload_offset(self) -> int:
        return self.offset + 8

    @property
    def payload_size(self) -> int:
        return self.size - CHUNK_OVERHEAD

    @property
    def crc_offset(self) -> int:
        return self.offset + self.size - 4

    @property
    def end(self) -> int:
        return self.offset + self.size


@dataclass(frozen=True)
class StoredBlock:
    """One uncompressed deflate block inside the IDAT payload."""

    header_offset: int
    data_offset: int
    logical_start: int
    length: int
    final: bool


def _as_int(name: str, value) -> int:
    try:
        i = int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidDimensions(f"{name} must be an integer, got {type(value).__name__}") from exc
    if i != value:
        raise InvalidDimensions(f"{name} must be an integer, got {value!r}")
    return i


def zlib_header() -> int:
    """CMF/FLG pair: deflate, 32K window, max compression, FCHECK to a multiple of 31."""
    header = ((8 + (7 << 4)) << 8) | (3 << 6)
    header += 31 - (header % 31)
    return header


@dataclass(frozen=True)
class PngLayout:
    width: int
    height: int
    depth: int
    pixel_size: int
    data_size: int
    chunks: Dict[bytes, ChunkSpan]
    buffer_size: int

    @classmethod
    def plan(cls, width, height, depth) -> "PngLayout":
        """Compute chunk boundaries and the total buffer size.

        Raises:
            InvalidDimensions: if width or height is not positive or depth is
                outside ``[1, 256]``.
        """
        w = _as_int("width", width)
        h = _as_int("height", height)
        d = _as_int("depth", depth)
        if w <= 0 or h <= 0:
            raise InvalidDimensions(f"Invalid dimensions: {w}x{h}")
        if not 1 <= d <= MAX_DEPTH:
            raise InvalidDimensions(f"depth must be within [1, {MAX_DEPTH}], got {d}")

        # pixel data plus one filter byte per row
        pixel_size = h * (w + 1)
        blocks = -(-pixel_size // MAX_BLOCK)
        data_size = ZLIB_HEADER_SIZE + pixel_size + BLOCK_HEADER_SIZE * blocks + ADLER_SIZE

        sizes = {
            b"IHDR": CHUNK_OVERHEAD + IHDR_PAYLOAD,
            b"PLTE": CHUNK_OVERHEAD + 3 * d,
            b"tRNS": CHUNK_OVERHEAD + d,
            b"IDAT": CHUNK_OVERHEAD + data_size,
            b"IEND": CHUNK_OVERHEAD,
        }
        chunks: Dict[bytes, ChunkSpan] = {}
        offset = 0
        for name in CHUNK_ORDER:
            chunks[name] = ChunkSpan(name, offset, sizes[name])
            offset += sizes[name]

        logger.debug(
            f"PNG layout {w}x{h} depth={d}: pixel_size={pixel_size} blocks={blocks} buffer={offset}"
        )
        return cls(w, h, d, pixel_size, data_size, chunks, offset)

    @property
    def ihdr(self) -> ChunkSpan:
        return self.chunks[b"IHDR"]

    @property
    def plte(self) -> ChunkSpan:
        return self.chunks[b"PLTE"]

    @property
    def trns(self) -> ChunkSpan:
        return self.chunks[b"tRNS"]

    @property
    def idat(self) -> ChunkSpan:
        return self.chunks[b"IDAT"]

    @property
    def iend(self) -> ChunkSpan:
        return self.chunks[b"IEND"]

    @property
    def stream_offset(self) -> int:
        """Offset of the first stored-block header (just after the zlib header)."""
        return self.idat.payload_offset + ZLIB_HEADER_SIZE

    @property
    def adler_offset(self) -> int:
        return self.idat.crc_offset - ADLER_SIZE

    @property
    def block_count(self) -> int:
        return -(-self.pixel_size // MAX_BLOCK)

    def stored_blocks(self) -> Iterator[StoredBlock]:
        count = self.block_count
        for k in range(count):
            logical_start = k * MAX_BLOCK
            header_offset = self.stream_offset + k * (MAX_BLOCK + BLOCK_HEADER_SIZE)
            yield StoredBlock(
                header_offset=header_offset,
                data_offset=header_offset + BLOCK_HEADER_SIZE,
                logical_start=logical_start,
                length=min(MAX_BLOCK, self.pixel_size - logical_start),
                final=k == count - 1,
            )

    def stream_index(self, x: int, y: int) -> int:
        """Physical offset of pixel ``(x, y)``; ``x == -1`` is the row filter byte.

        No range check is done here.
        """
        i = y * (self.width + 1) + x + 1
        return self.stream_offset + BLOCK_HEADER_SIZE * (i // MAX_BLOCK + 1) + i
