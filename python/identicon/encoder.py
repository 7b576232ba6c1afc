# python/identicon/encoder.py
# Fixed-buffer PNG encoder for small palette images (identicons)
# - Plans the full file layout up front and never reallocates
# - Pixels live inside uncompressed stored deflate blocks
# - Finalization fills Adler-32 and per-chunk CRC-32 in place
# RELEVANT FILES: python/identicon/layout.py, python/identicon/palette.py, python/identicon/checksums.py, tests/test_encoder.py

from __future__ import annotations

import base64
import io
import logging
import operator
from typing import Any, Iterator, List, Union

import numpy as np

from ._bytes import byte2, byte2lsb, byte4, write
from .checksums import adler32_segments, crc32, crc32_table
from .errors import IndexOutOfRange
from .layout import CHUNK_ORDER, ChunkSpan, PngLayout, zlib_header
from .palette import RGBA, ColorAllocation, Palette, SaturationPolicy

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
BIT_DEPTH = 8
COLOR_TYPE_INDEXED = 3


class PngEncoder:
    """Indexed-color PNG held in a single pre-sized byte buffer.

    Example:
        enc = PngEncoder(8, 8, 4)
        red = enc.register_color(255, 0, 0)
        enc.write_pixel(3, 4, red)
        html = f'<img src="{enc.to_data_uri()}">'
    """

    def __init__(self, width: int, height: int, depth: int, *, policy: Union[SaturationPolicy, str] = SaturationPolicy.CLAMP):
        """Plan the layout and write every static byte of the file.

        Args:
            width: Image width in pixels (> 0)
            height: Image height in pixels (> 0)
            depth: Palette capacity in ``[1, 256]``
            policy: Behaviour once the palette is full

        Raises:
            InvalidDimensions: on out-of-range width, height or depth
        """
        self.layout = PngLayout.plan(width, height, depth)
        self.width = self.layout.width
        self.height = self.layout.height
        self.depth = self.layout.depth
        self._buffer = bytearray(self.layout.buffer_size)
        self.palette = Palette(self._buffer, self.layout, policy)
        self._write_static()
        # shared table, built once per process
        crc32_table()

    def _write_static(self) -> None:
        buf = self._buffer
        for span in self.layout.chunks.values():
            write(buf, span.offset, byte4(span.payload_size), span.name)

        write(buf, self.layout.ihdr.payload_offset, byte4(self.width), byte4(self.height), bytes((BIT_DEPTH, COLOR_TYPE_INDEXED)))
        write(buf, self.layout.idat.payload_offset, byte2(zlib_header()))

        for block in self.layout.stored_blocks():
            bits = b"\x01" if block.final else b"\x00"
            write(buf, block.header_offset, bits, byte2lsb(block.length), byte2lsb(~block.length))

    # palette -----------------------------------------------------------------

    def allocate_color(self, red, green, blue, alpha=255) -> ColorAllocation:
        """Register a color; the result tells a real index apart from saturation."""
        return self.palette.allocate(red, green, blue, alpha)

    def register_color(self, red, green, blue, alpha=255) -> int:
        """Return the palette index for a color, registering it if needed.

        Once the palette is full, unknown colors return index 0 under
        ``SaturationPolicy.CLAMP`` or raise ``PaletteExhausted`` under
        ``SaturationPolicy.RAISE``.
        """
        return self.allocate_color(red, green, blue, alpha).index

    def palette_entries(self) -> List[RGBA]:
        return self.palette.entries()

    # pixel plane -------------------------------------------------------------

    def _check_xy(self, x: int, y: int, *, allow_filter: bool) -> None:
        try:
            x, y = operator.index(x), operator.index(y)
        except TypeError:
            raise IndexOutOfRange(f"pixel coordinates must be integers, got ({x!r}, {y!r})") from None
        lo = -1 if allow_filter else 0
        if not (lo <= x < self.width and 0 <= y < self.height):
            raise IndexOutOfRange(f"pixel ({x}, {y}) outside {self.width}x{self.height} image")

    def pixel_offset(self, x: int, y: int) -> int:
        """Buffer offset of pixel ``(x, y)``; ``x == -1`` addresses the row filter byte."""
        self._check_xy(x, y, allow_filter=True)
        return self.layout.stream_index(x, y)

    def write_pixel(self, x: int, y: int, index: int) -> None:
        try:
            index = operator.index(index)
        except TypeError:
            raise ValueError(f"palette index must be an integer, got {index!r}") from None
        if x == -1:
            self._check_xy(x, y, allow_filter=True)
            if index != 0:
                raise ValueError("row filter byte must be 0 (no filter)")
        else:
            self._check_xy(x, y, allow_filter=False)
            if not 0 <= index < self.depth:
                raise ValueError(f"palette index {index} outside [0, {self.depth})")
        self._buffer[self.layout.stream_index(x, y)] = index

    def read_pixel(self, x: int, y: int) -> int:
        self._check_xy(x, y, allow_filter=True)
        return self._buffer[self.layout.stream_index(x, y)]

    def _segments(self) -> Iterator[memoryview]:
        view = memoryview(self._buffer)
        for block in self.layout.stored_blocks():
            yield view[block.data_offset:block.data_offset + block.length]

    def _stream(self) -> np.ndarray:
        """Filter bytes and pixels as one logical ``(height, width + 1)`` array."""
        flat = np.concatenate([np.frombuffer(seg, dtype=np.uint8) for seg in self._segments()])
        return flat.reshape(self.height, self.width + 1)

    def pixel_grid(self) -> np.ndarray:
        """Current palette indices as a ``(height, width)`` uint8 array."""
        return self._stream()[:, 1:].copy()

    def write_pixels(self, grid: Any) -> None:
        """Store a whole ``(height, width)`` grid of palette indices."""
        arr = np.asarray(grid)
        if not (np.issubdtype(arr.dtype, np.integer) or arr.dtype == bool):
            raise ValueError(f"grid must hold integer palette indices, got dtype {arr.dtype}")
        if arr.shape != (self.height, self.width):
            raise ValueError(f"grid must have shape ({self.height}, {self.width}), got {arr.shape}")
        if arr.size and (arr.min() < 0 or arr.max() >= self.depth):
            raise ValueError(f"grid values must lie in [0, {self.depth})")

        stream = np.zeros((self.height, self.width + 1), dtype=np.uint8)
        stream[:, 1:] = arr.astype(np.uint8)
        flat = stream.reshape(-1)
        for block in self.layout.stored_blocks():
            start = block.logical_start
            self._buffer[block.data_offset:block.data_offset + block.length] = flat[start:start + block.length].tobytes()

    # finalizer ---------------------------------------------------------------

    def compute_adler32(self) -> int:
        value = adler32_segments(self._segments())
        write(self._buffer, self.layout.adler_offset, byte4(value))
        return value

    def compute_crc32(self, chunk: Union[ChunkSpan, bytes, str]) -> int:
        span = self._span(chunk)
        value = crc32(memoryview(self._buffer)[span.offset + 4:span.crc_offset])
        write(self._buffer, span.crc_offset, byte4(value))
        return value

    def _span(self, chunk: Union[ChunkSpan, bytes, str]) -> ChunkSpan:
        if isinstance(chunk, ChunkSpan):
            return chunk
        name = chunk.encode("ascii") if isinstance(chunk, str) else bytes(chunk)
        try:
            return self.layout.chunks[name]
        except KeyError:
            raise ValueError(f"Unknown chunk {chunk!r}; expected one of {[c.decode() for c in CHUNK_ORDER]}") from None

    def finalize(self) -> None:
        """Fill in the Adler-32 trailer, then every chunk CRC (IDAT's covers the trailer)."""
        adler = self.compute_adler32()
        for name in CHUNK_ORDER:
            self.compute_crc32(name)
        logger.debug(f"Finalized {self.width}x{self.height} PNG: adler32=0x{adler:08x} size={len(self)}")

    def serialize(self) -> bytes:
        self.finalize()
        return PNG_SIGNATURE + bytes(self._buffer)

    def to_base64(self) -> str:
        return base64.b64encode(self.serialize()).decode("ascii")

    def to_data_uri(self) -> str:
        return "data:image/png;base64," + self.to_base64()

    def to_image(self):
        """Decode the finished PNG with Pillow."""
        try:
            from PIL import Image
        except Exception as exc:  # pragma: no cover - optional dependency
            raise ImportError("Pillow is required for to_image()") from exc
        img = Image.open(io.BytesIO(self.serialize()))
        img.load()
        return img

    def __len__(self) -> int:
        return len(PNG_SIGNATURE) + self.layout.buffer_size

    def __repr__(self) -> str:
        return f"PngEncoder({self.width}x{self.height}, depth={self.depth}, colors={len(self.palette)})"


def create(width: int, height: int, depth: int, *, policy: Union[SaturationPolicy, str] = SaturationPolicy.CLAMP) -> PngEncoder:
    return PngEncoder(width, height, depth, policy=policy)
