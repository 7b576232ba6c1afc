# python/identicon/__init__.py
# Public Python API for the identicon PNG encoder
# RELEVANT FILES: python/identicon/encoder.py, python/identicon/identicon.py, tests/test_version.py
"""
Identicon PNG encoder.

Builds small palette-indexed PNG images in a fixed, pre-planned byte buffer
and serializes them to Base64 for inline embedding (``data:`` URIs).

Usage:
    import identicon

    enc = identicon.create(16, 16, 4)
    fg = enc.register_color(30, 144, 255)
    enc.write_pixel(2, 3, fg)
    text = enc.to_base64()
"""

from .checksums import adler32, crc32
from .config import EncoderConfig, load_encoder_config
from .encoder import PNG_SIGNATURE, PngEncoder, create
from .errors import IdenticonError, IndexOutOfRange, InvalidDimensions, PaletteExhausted
from .identicon import build, generate, generate_data_uri
from .layout import ChunkSpan, PngLayout, StoredBlock
from .palette import ColorAllocation, SaturationPolicy

__version__ = "0.1.0"

__all__ = [
    "create",
    "PngEncoder",
    "PNG_SIGNATURE",
    "generate",
    "generate_data_uri",
    "build",
    "EncoderConfig",
    "load_encoder_config",
    "SaturationPolicy",
    "ColorAllocation",
    "PngLayout",
    "ChunkSpan",
    "StoredBlock",
    "crc32",
    "adler32",
    "IdenticonError",
    "InvalidDimensions",
    "PaletteExhausted",
    "IndexOutOfRange",
    "__version__",
]
