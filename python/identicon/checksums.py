# python/identicon/checksums.py
# CRC-32 (PNG chunks) and Adler-32 (zlib stream) used when finalizing a PNG
# The CRC table depends only on the polynomial, so one copy serves every encoder
# RELEVANT FILES: python/identicon/encoder.py, tests/test_checksums.py

from __future__ import annotations

from functools import lru_cache
from typing import Iterable, Tuple, Union

import numpy as np

CRC32_POLYNOMIAL = 0xEDB88320
ADLER_BASE = 65521  # largest prime smaller than 65536
# largest n such that 255n(n+1)/2 + (n+1)(BASE-1) <= 2^32-1
ADLER_NMAX = 5552

BytesLike = Union[bytes, bytearray, memoryview]


@lru_cache(maxsize=None)
def crc32_table() -> Tuple[int, ...]:
    """256-entry lookup table for the reflected CRC-32 polynomial."""
    table = []
    for n in range(256):
        c = n
        for _ in range(8):
            if c & 1:
                c = CRC32_POLYNOMIAL ^ (c >> 1)
            else:
                c >>= 1
        table.append(c)
    return tuple(table)


def crc32(data: BytesLike, crc: int = 0) -> int:
    """CRC-32 of ``data``, continuing from a previous ``crc`` value.

    Matches ``zlib.crc32`` for the same input.
    """
    table = crc32_table()
    c = (crc ^ 0xFFFFFFFF) & 0xFFFFFFFF
    for byte in bytes(data):
        c = table[(c ^ byte) & 0xFF] ^ (c >> 8)
    return c ^ 0xFFFFFFFF


def adler32(data: BytesLike, value: int = 1) -> int:
    """Adler-32 of ``data``, continuing from a previous checksum ``value``.

    Sums are reduced modulo ``ADLER_BASE`` once every ``ADLER_NMAX`` bytes.
    """
    s1 = value & 0xFFFF
    s2 = (value >> 16) & 0xFFFF
    arr = np.frombuffer(bytes(data), dtype=np.uint8).astype(np.int64)
    for start in range(0, arr.size, ADLER_NMAX):
        batch = arr[start:start + ADLER_NMAX]
        n = batch.size
        weights = np.arange(n, 0, -1, dtype=np.int64)
        s2 += n * s1 + int(np.dot(batch, weights))
        s1 += int(batch.sum())
        s1 %= ADLER_BASE
        s2 %= ADLER_BASE
    return (s2 << 16) | s1


def adler32_segments(segments: Iterable[BytesLike]) -> int:
    """Adler-32 over several buffers treated as one contiguous stream."""
    value = 1
    for segment in segments:
        value = adler32(segment, value)
    return value
