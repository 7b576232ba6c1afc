# python/identicon/palette.py
# Bounded palette that maps quantized RGBA colors to PLTE/tRNS slots
# Exists to keep the palette size fixed so the PNG layout never changes
# RELEVANT FILES: python/identicon/encoder.py, python/identicon/layout.py, tests/test_palette.py

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ._bytes import write
from .errors import PaletteExhausted
from .layout import PngLayout

logger = logging.getLogger(__name__)

SENTINEL_INDEX = 0

RGBA = Tuple[int, int, int, int]


class SaturationPolicy(Enum):
    """What happens when a new color arrives after the palette is full."""
    CLAMP = "clamp"  # return index 0 without registering
    RAISE = "raise"  # raise PaletteExhausted

    @classmethod
    def coerce(cls, value) -> "SaturationPolicy":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for member in cls:
            if member.value == key:
                return member
        raise ValueError(f"Unknown saturation policy: {value!r}")


@dataclass(frozen=True)
class ColorAllocation:
    index: int
    assigned: bool

    @property
    def saturated(self) -> bool:
        return not self.assigned


def quantize(value, label: str = "channel") -> int:
    """Round a channel value to the nearest integer and clamp it to ``[0, 255]``."""
    try:
        f = float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{label} must be a number, got {value!r}") from e
    if math.isnan(f) or math.isinf(f):
        raise ValueError(f"{label} must be a finite number")
    v = int(round(f))
    return min(255, max(0, v))


def color_key(red: int, green: int, blue: int, alpha: int) -> int:
    return (alpha << 24) | (red << 16) | (green << 8) | blue


class Palette:
    """Insertion-ordered palette writing straight into the PLTE and tRNS chunks.

    Args:
        buffer: the encoder buffer holding the chunks
        layout: layout the buffer was allocated from
        policy: saturation policy once ``layout.depth`` colors are registered
    """

    def __init__(self, buffer: bytearray, layout: PngLayout, policy: SaturationPolicy = SaturationPolicy.CLAMP):
        self._buffer = buffer
        self._layout = layout
        self.policy = SaturationPolicy.coerce(policy)
        self._indices: Dict[int, int] = {}
        self._entries: List[RGBA] = []

    @property
    def capacity(self) -> int:
        return self._layout.depth

    @property
    def is_full(self) -> bool:
        return len(self._entries) >= self.capacity

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, rgba) -> bool:
        return self.index_of(*rgba) is not None

    def allocate(self, red, green, blue, alpha=255) -> ColorAllocation:
        """Register a color and report whether it received a real slot."""
        if alpha is None or alpha < 0:
            alpha = 255
        r, g, b, a = quantize(red, "red"), quantize(green, "green"), quantize(blue, "blue"), quantize(alpha, "alpha")
        key = color_key(r, g, b, a)

        index = self._indices.get(key)
        if index is not None:
            return ColorAllocation(index, True)

        if self.is_full:
            if self.policy is SaturationPolicy.RAISE:
                raise PaletteExhausted(
                    f"palette of depth {self.capacity} is full; cannot add rgba({r}, {g}, {b}, {a})"
                )
            logger.debug(f"Palette full ({self.capacity}); rgba({r}, {g}, {b}, {a}) mapped to index {SENTINEL_INDEX}")
            return ColorAllocation(SENTINEL_INDEX, False)

        index = len(self._entries)
        write(self._buffer, self._layout.plte.payload_offset + 3 * index, bytes((r, g, b)))
        write(self._buffer, self._layout.trns.payload_offset + index, bytes((a,)))
        self._indices[key] = index
        self._entries.append((r, g, b, a))
        return ColorAllocation(index, True)

    def index_of(self, red, green, blue, alpha=255) -> Optional[int]:
        if alpha is None or alpha < 0:
            alpha = 255
        key = color_key(quantize(red, "red"), quantize(green, "green"), quantize(blue, "blue"), quantize(alpha, "alpha"))
        return self._indices.get(key)

    def entries(self) -> List[RGBA]:
        """Registered colors in index order."""
        return list(self._entries)
