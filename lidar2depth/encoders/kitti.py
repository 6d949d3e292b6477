# lidar2depth/encoders/kitti.py
# KITTI depth maps: uint16 PNG, 0 = invalid, otherwise depth_m = I(u,v) / 256.0
import numpy as np
from .base import Encoder
from ..registry import register

KITTI_DEPTH_SCALE = 256.0
INVALID = 0
UINT16_MAX = np.iinfo(np.uint16).max


def encode(depth):
    d = np.asarray(depth, dtype=np.float64)
    if not np.all(np.isfinite(d)) or np.any(d < 0):
        raise ValueError("depth must be finite and >= 0")
    # d >= 0, so floor(x + 0.5) is round-half-away-from-zero
    q = np.floor(d * KITTI_DEPTH_SCALE + 0.5)
    # a valid return never collides with INVALID
    q = np.clip(q, 1, UINT16_MAX).astype(np.uint16)
    return int(q) if q.ndim == 0 else q


def decode(value):
    v = np.asarray(value)
    out = np.where(v == INVALID, 0.0, v.astype(np.float64) / KITTI_DEPTH_SCALE)
    return float(out) if out.ndim == 0 else out


@register("enc", "kitti16")
class Kitti16(Encoder):
    scale = KITTI_DEPTH_SCALE
    max_depth = UINT16_MAX / KITTI_DEPTH_SCALE

    def encode(self, depth):
        return encode(depth)

    def decode(self, value):
        return decode(value)
