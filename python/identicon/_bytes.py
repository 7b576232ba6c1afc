# python/identicon/_bytes.py
# Byte packing helpers shared by the layout planner and finalizer
# RELEVANT FILES: python/identicon/encoder.py, python/identicon/layout.py

from __future__ import annotations

import struct


def byte2(value: int) -> bytes:
    """Big-endian 16-bit word."""
    return struct.pack(">H", value & 0xFFFF)


def byte4(value: int) -> bytes:
    """Big-endian 32-bit word."""
    return struct.pack(">I", value & 0xFFFFFFFF)


def byte2lsb(value: int) -> bytes:
    """Little-endian 16-bit word, as used by deflate block headers."""
    return struct.pack("<H", value & 0xFFFF)


def write(buffer: bytearray, offset: int, *parts: bytes) -> int:
    """Copy ``parts`` into ``buffer`` back to back starting at ``offset``.

    Returns the offset just past the last byte written. The buffer is never
    grown; writing past its end raises ``ValueError``.
    """
    for part in parts:
        end = offset + len(part)
        if end > len(buffer):
            raise ValueError(f"write of {len(part)} bytes at {offset} overruns buffer of {len(buffer)}")
        buffer[offset:end] = part
        offset = end
    return offset
