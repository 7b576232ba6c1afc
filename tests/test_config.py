# tests/test_config.py
# Tests for encoder configuration parsing and validation
# Exists to ensure config sources, overrides and the policy env var merge consistently
# RELEVANT FILES: python/identicon/config.py, python/identicon/identicon.py

from __future__ import annotations

import json
from pathlib import Path

import pytest

from identicon import EncoderConfig, SaturationPolicy, load_encoder_config


def test_defaults() -> None:
    cfg = load_encoder_config()
    assert cfg.to_dict() == {"width": 100, "height": 100, "depth": 16, "policy": "clamp"}
    assert cfg.saturation_policy is SaturationPolicy.CLAMP


def test_mapping_with_aliases() -> None:
    cfg = load_encoder_config({"Width": 32, "h": "24", "palette_depth": 4, "saturation": "RAISE"})
    assert (cfg.width, cfg.height, cfg.depth) == (32, 24, 4)
    assert cfg.saturation_policy is SaturationPolicy.RAISE


def test_json_path(tmp_path: Path) -> None:
    path = tmp_path / "identicon.json"
    path.write_text(json.dumps({"width": 8, "height": 8, "depth": 2}), encoding="utf-8")
    cfg = load_encoder_config(path)
    assert (cfg.width, cfg.height, cfg.depth) == (8, 8, 2)
    assert load_encoder_config(str(path)) == cfg


def test_unsupported_file_format(tmp_path: Path) -> None:
    path = tmp_path / "identicon.yaml"
    path.write_text("width: 8", encoding="utf-8")
    with pytest.raises(ValueError):
        load_encoder_config(path)


def test_overrides_apply_on_top() -> None:
    base = EncoderConfig(width=10, height=20, depth=3)
    cfg = load_encoder_config(base, {"size": 48, "depth": None})
    assert (cfg.width, cfg.height, cfg.depth) == (48, 48, 3)
    # source object is not mutated
    assert base.width == 10


@pytest.mark.parametrize(
    "data",
    [
        {"width": 0},
        {"height": -1},
        {"depth": 0},
        {"depth": 257},
        {"width": 2.5},
        {"policy": "explode"},
        {"colour": 3},
    ],
)
def test_invalid_values(data) -> None:
    with pytest.raises(ValueError):
        load_encoder_config(data)


def test_bad_source_type() -> None:
    with pytest.raises(TypeError):
        load_encoder_config(42)  # type: ignore[arg-type]


def test_policy_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("IDENTICON_PALETTE_POLICY", "raise")
    assert load_encoder_config().saturation_policy is SaturationPolicy.RAISE
    # explicit settings win over the environment
    assert load_encoder_config({"policy": "clamp"}).saturation_policy is SaturationPolicy.CLAMP
    assert load_encoder_config(None, {"policy": "clamp"}).saturation_policy is SaturationPolicy.CLAMP


def test_bad_policy_in_environment(monkeypatch) -> None:
    monkeypatch.setenv("IDENTICON_PALETTE_POLICY", "sometimes")
    with pytest.raises(ValueError):
        load_encoder_config()


def test_validate_coerces_numeric_strings() -> None:
    cfg = EncoderConfig(width="10", height=12, depth="4")  # type: ignore[arg-type]
    cfg.validate()
    assert (cfg.width, cfg.height, cfg.depth) == (10, 12, 4)


@pytest.mark.parametrize("kwargs", [{"width": "wide"}, {"height": None}, {"depth": 1.5}])
def test_validate_rejects_non_integer_fields(kwargs) -> None:
    with pytest.raises(ValueError):
        EncoderConfig(**kwargs).validate()
