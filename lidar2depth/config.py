# lidar2depth/config.py
import copy
from pathlib import Path

import yaml

DEFAULTS = {
    "pipeline": {
        "projection": "pinhole",
        "rasterizer": "nearest",
        "encoder": "kitti16",
        "depth": "z",
        "workers": 1,
    },
    "gate": {"x": None, "y": None, "z": [0.0, 80.0]},
    "image": {"height": 375, "width": 1242},
}


def _merge(base, over, where):
    for k, v in over.items():
        if k not in base:
            raise ValueError(f"unknown config key '{where}{k}'")
        if isinstance(base[k], dict):
            if not isinstance(v, dict):
                raise ValueError(f"config section '{where}{k}' must be a mapping")
            _merge(base[k], v, f"{where}{k}.")
        else:
            base[k] = v
    return base


def _check(cfg):
    for ax, b in cfg["gate"].items():
        if b is None:
            continue
        if not isinstance(b, (list, tuple)) or len(b) != 2:
            raise ValueError(f"gate.{ax} must be null or [lo, hi], got {b!r}")
        if float(b[0]) > float(b[1]):
            raise ValueError(f"gate.{ax}: lo > hi ({b[0]} > {b[1]})")
    if int(cfg["pipeline"]["workers"]) < 1:
        raise ValueError("pipeline.workers must be >= 1")
    for k in ("height", "width"):
        if int(cfg["image"][k]) <= 0:
            raise ValueError(f"image.{k} must be positive")
    return cfg


def from_dict(over=None):
    cfg = copy.deepcopy(DEFAULTS)
    return _check(_merge(cfg, over or {}, ""))


def load_config(path=None):
    if path is None:
        return from_dict()
    with open(Path(path), "r", encoding="utf-8") as f:
        over = yaml.safe_load(f) or {}
    if not isinstance(over, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return from_dict(over)
