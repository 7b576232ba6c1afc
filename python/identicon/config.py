# python/identicon/config.py
# Encoder configuration parsing for identicon generation
# Exists so image size, palette depth and saturation policy come from one validated place
# RELEVANT FILES: python/identicon/identicon.py, python/identicon/encoder.py, tests/test_config.py
from __future__ import annotations

import copy
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .layout import MAX_DEPTH
from .palette import SaturationPolicy

ConfigSource = Union["EncoderConfig", Mapping[str, Any], str, Path, None]

POLICY_ENV_VAR = "IDENTICON_PALETTE_POLICY"

_KEY_ALIASES: Dict[str, str] = {
    "width": "width",
    "w": "width",
    "height": "height",
    "h": "height",
    "depth": "depth",
    "palettedepth": "depth",
    "colors": "depth",
    "policy": "policy",
    "saturation": "policy",
    "saturationpolicy": "policy",
}


def _normalize_key(value: Any) -> str:
    return "".join(
        c
        for c in str(value).strip().lower()
        if c not in {"-", "_", " ", "."}
    )


def _to_int(value: Any, label: str) -> int:
    try:
        i = int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{label} must be an integer, got {type(value).__name__}") from e
    if i != value and not isinstance(value, str):
        raise ValueError(f"{label} must be an integer, got {value!r}")
    return i


@dataclass
class EncoderConfig:
    width: int = 100
    height: int = 100
    depth: int = 16
    policy: str = SaturationPolicy.CLAMP.value

    def to_dict(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "depth": self.depth,
            "policy": self.policy,
        }

    def copy(self) -> "EncoderConfig":
        return copy.deepcopy(self)

    def validate(self) -> None:
        self.width = _to_int(self.width, "width")
        self.height = _to_int(self.height, "height")
        self.depth = _to_int(self.depth, "depth")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"width and height must be > 0, got {self.width}x{self.height}")
        if not 1 <= self.depth <= MAX_DEPTH:
            raise ValueError(f"depth must be within [1, {MAX_DEPTH}]")
        SaturationPolicy.coerce(self.policy)

    @property
    def saturation_policy(self) -> SaturationPolicy:
        return SaturationPolicy.coerce(self.policy)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], default: Optional["EncoderConfig"] = None) -> "EncoderConfig":
        base = copy.deepcopy(default) if default is not None else cls()
        for raw_key, value in data.items():
            key = _KEY_ALIASES.get(_normalize_key(raw_key))
            if key is None:
                raise ValueError(f"Unknown encoder config key: {raw_key!r}")
            if key == "policy":
                base.policy = SaturationPolicy.coerce(value).value
            else:
                setattr(base, key, _to_int(value, key))
        return base


def _load_from_path(path: Path) -> Mapping[str, Any]:
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix in {".json", ""}:
        data = json.loads(text)
        if not isinstance(data, Mapping):
            raise TypeError(f"Encoder config file must hold a JSON object: {path}")
        return data
    raise ValueError(f"Unsupported encoder config file format: {path}")


def _build_override_mapping(overrides: Mapping[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in overrides.items():
        if value is None:
            continue
        if key == "size":
            out["width"] = value
            out["height"] = value
        else:
            out[key] = value
    return out


def _mentions_policy(data: Mapping[str, Any]) -> bool:
    return any(_KEY_ALIASES.get(_normalize_key(k)) == "policy" for k in data)


def load_encoder_config(config: ConfigSource = None, overrides: Optional[Mapping[str, Any]] = None) -> EncoderConfig:
    """Build a validated ``EncoderConfig``.

    ``config`` may be an ``EncoderConfig``, a mapping, a path to a JSON file
    or ``None`` for defaults. ``overrides`` are applied on top. When neither
    sets a saturation policy, ``IDENTICON_PALETTE_POLICY`` is consulted.
    """
    if isinstance(config, EncoderConfig):
        cfg = config.copy()
        policy_set = True
    elif isinstance(config, Mapping):
        cfg = EncoderConfig.from_mapping(config)
        policy_set = _mentions_policy(config)
    elif isinstance(config, (str, Path)):
        data = _load_from_path(Path(config))
        cfg = EncoderConfig.from_mapping(data)
        policy_set = _mentions_policy(data)
    elif config is None:
        cfg = EncoderConfig()
        policy_set = False
    else:
        raise TypeError("config must be EncoderConfig, mapping, path, or None")

    if overrides:
        merged = _build_override_mapping(overrides)
        if merged:
            cfg = EncoderConfig.from_mapping(merged, cfg)
            policy_set = policy_set or _mentions_policy(merged)

    env_policy = os.environ.get(POLICY_ENV_VAR, "").strip()
    if env_policy and not policy_set:
        cfg.policy = SaturationPolicy.coerce(env_policy).value

    cfg.validate()
    return cfg
