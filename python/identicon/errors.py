# python/identicon/errors.py
# Error types raised by the PNG encoder and its helpers
# Exists so callers can catch encoder failures without matching message text
# RELEVANT FILES: python/identicon/encoder.py, python/identicon/palette.py, tests/test_palette.py

from __future__ import annotations


class IdenticonError(Exception):
    """Base class for all identicon encoder errors."""


class InvalidDimensions(IdenticonError, ValueError):
    """Width, height or palette depth outside the supported range."""


class PaletteExhausted(IdenticonError, RuntimeError):
    """A new color was registered after every palette slot was taken."""


class IndexOutOfRange(IdenticonError, IndexError):
    """A pixel coordinate falls outside the image."""
