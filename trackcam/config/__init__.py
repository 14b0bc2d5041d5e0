"""
Load configuration from YAML.
Default: trackcam/config/default.yaml. Override: --config <file> or TRACKCAM_CONFIG.
"""
import os
from pathlib import Path
from typing import Any

import yaml

from trackcam.core.config import (
    DEFAULT_CLIP_FACTORS,
    DEFAULT_DISTANCE_BOUNDS,
    DEFAULT_QUEUE_SIZE,
    DEFAULT_VIEWPORT,
    ENV_CONFIG,
)
from trackcam.core.exceptions import ConfigError

_CACHE: dict[str, Any] | None = None
_CONFIG_DIR = Path(__file__).resolve().parent


def _deep_merge(base: dict, override: dict) -> dict:
    """Merge override into base (recursive). base is not mutated."""
    out = dict(base)
    for k, v in override.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _load_yaml(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    return data if isinstance(data, dict) else {}


def _defaults() -> dict:
    """Built-in defaults (no file)."""
    return {
        "frame": {"target": [0.0, 0.0, 0.0], "eye": [2.0, 2.0, 2.0], "up": [0.0, 1.0, 0.0]},
        "scope": {
            "distance_bounds": list(DEFAULT_DISTANCE_BOUNDS),
            "fov_deg": 45.0,
            "fov_bounds_deg": [5.0, 120.0],
            "clip_factors": list(DEFAULT_CLIP_FACTORS),
        },
        "input": {},
        "viewport": list(DEFAULT_VIEWPORT),
        "queue_size": DEFAULT_QUEUE_SIZE,
    }


_SECTIONS = ("frame", "scope", "input")


def _check_sections(config: dict) -> None:
    for name in _SECTIONS:
        if config.get(name) is not None and not isinstance(config[name], dict):
            raise ConfigError(f"config section '{name}' must be a mapping, got {type(config[name]).__name__}")
    viewport = config.get("viewport")
    if viewport is not None and (not isinstance(viewport, (list, tuple)) or len(viewport) != 2):
        raise ConfigError(f"viewport must be [width, height], got {viewport!r}")


def load_config(override_path: str | Path | None = None) -> dict:
    """
    Load config: defaults + default.yaml + env TRACKCAM_CONFIG + optional override file.
    Returns merged dict. Cached after first call unless override_path is given.
    A missing override file is a ConfigError.
    """
    global _CACHE
    if override_path is not None:
        _CACHE = None

    if _CACHE is not None:
        return _CACHE

    base = _defaults()
    default_file = _CONFIG_DIR / "default.yaml"
    if default_file.exists():
        base = _deep_merge(base, _load_yaml(default_file))

    env_path = os.environ.get(ENV_CONFIG)
    if env_path and Path(env_path).exists():
        base = _deep_merge(base, _load_yaml(Path(env_path)))

    if override_path is not None:
        p = Path(override_path)
        if not p.exists():
            raise ConfigError(f"Config file not found: {p}")
        base = _deep_merge(base, _load_yaml(p))

    _check_sections(base)
    _CACHE = base
    return base


def reset_config() -> None:
    """Clear cache (e.g. for tests)."""
    global _CACHE
    _CACHE = None
