# Ensure `import identicon` works from a fresh clone:
# put repo/python on sys.path so the package is importable without prior install.
# Set IDENTICON_NO_BOOTSTRAP=1 to test an installed wheel instead.
import io
import os
import sys
import zlib
from pathlib import Path

import numpy as np
import pytest


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]

def _ensure_python_path():
    repo = _repo_root()
    pkg_dir = repo / "python"
    if str(pkg_dir) not in sys.path:
        sys.path.insert(0, str(pkg_dir))


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "pillow: tests that decode output with Pillow"
    )
    config.addinivalue_line(
        "markers", "slow: slow tests"
    )


def pytest_sessionstart(session):
    if os.environ.get("IDENTICON_NO_BOOTSTRAP") == "1":
        return
    _ensure_python_path()


@pytest.fixture(autouse=True)
def _clear_policy_env(monkeypatch):
    monkeypatch.delenv("IDENTICON_PALETTE_POLICY", raising=False)


def read_chunks(png: bytes):
    """Split a PNG byte string into ``(type, payload, crc)`` tuples."""
    assert png[:8] == b"\x89PNG\r\n\x1a\n"
    chunks = []
    pos = 8
    while pos < len(png):
        length = int.from_bytes(png[pos:pos + 4], "big")
        ctype = png[pos + 4:pos + 8]
        payload = png[pos + 8:pos + 8 + length]
        crc = int.from_bytes(png[pos + 8 + length:pos + 12 + length], "big")
        chunks.append((ctype, payload, crc))
        pos += 12 + length
    return chunks


def decode_png(png: bytes):
    """Decode with Pillow; returns ``(indices (H,W), rgba (H,W,4))``."""
    from PIL import Image

    img = Image.open(io.BytesIO(png))
    img.load()
    assert img.mode == "P"
    indices = np.array(img)
    rgba = np.array(img.convert("RGBA"))
    return indices, rgba


@pytest.fixture
def chunks_of():
    return read_chunks


@pytest.fixture
def decode():
    pytest.importorskip("PIL")
    return decode_png


@pytest.fixture
def inflate_idat():
    def _inflate(png: bytes) -> bytes:
        data = b"".join(payload for ctype, payload, _ in read_chunks(png) if ctype == b"IDAT")
        return zlib.decompress(data)
    return _inflate
