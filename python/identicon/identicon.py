# python/identicon/identicon.py
# Top-level identicon entry point returning a Base64 PNG for inline embedding
# The seed-to-pattern mapping is supplied by the caller as a painter callable
# RELEVANT FILES: python/identicon/encoder.py, python/identicon/config.py, tests/test_generate.py

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from .config import ConfigSource, load_encoder_config
from .encoder import PngEncoder

logger = logging.getLogger(__name__)

Painter = Callable[[PngEncoder, Any], None]


def build(seed: Any, config: ConfigSource = None, *, painter: Optional[Painter] = None, **overrides: Any) -> PngEncoder:
    """Create an encoder for ``seed`` and let ``painter`` draw into it.

    Without a painter the image stays blank (every pixel palette index 0).
    """
    cfg = load_encoder_config(config, overrides)
    encoder = PngEncoder(cfg.width, cfg.height, cfg.depth, policy=cfg.saturation_policy)
    if painter is not None:
        painter(encoder, seed)
    else:
        logger.debug(f"No painter given for seed {seed!r}; emitting blank {cfg.width}x{cfg.height} image")
    return encoder


def generate(seed: Any, config: ConfigSource = None, *, painter: Optional[Painter] = None, **overrides: Any) -> str:
    """Return the identicon for ``seed`` as a Base64-encoded PNG string.

    Args:
        seed: Value handed to ``painter``
        config: ``EncoderConfig``, mapping, JSON path or None (100x100, 16 colors)
        painter: ``painter(encoder, seed)`` registers colors and writes pixels
        **overrides: Config overrides such as ``size=64`` or ``depth=4``
    """
    return build(seed, config, painter=painter, **overrides).to_base64()


def generate_data_uri(seed: Any, config: ConfigSource = None, *, painter: Optional[Painter] = None, **overrides: Any) -> str:
    return build(seed, config, painter=painter, **overrides).to_data_uri()
