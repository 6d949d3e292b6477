# lidar2depth/gate.py
import numpy as np

AXES = ("x", "y", "z")


def _bound(name, b):
    if b is None:
        return None
    lo, hi = b
    lo, hi = float(lo), float(hi)
    if lo > hi:
        raise ValueError(f"gate bound for {name}: lo={lo} > hi={hi}")
    return lo, hi


class RangeGate:
    """
    Axis-aligned box in the camera frame, bounds inclusive, None = unbounded.
    All axes are tested in one predicate per point; z <= 0 is always rejected.
    """
    def __init__(self, x=None, y=None, z=None):
        self.bounds = {"x": _bound("x", x), "y": _bound("y", y), "z": _bound("z", z)}

    @classmethod
    def from_config(cls, cfg):
        cfg = cfg or {}
        unknown = set(cfg) - set(AXES)
        if unknown:
            raise ValueError(f"unknown gate axes: {sorted(unknown)}")
        return cls(**{k: cfg.get(k) for k in AXES})

    def mask(self, points):
        P = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        keep = P[:, 2] > 0
        for i, ax in enumerate(AXES):
            b = self.bounds[ax]
            if b is not None:
                keep &= (P[:, i] >= b[0]) & (P[:, i] <= b[1])
        return keep

    def apply(self, cloud):
        return cloud.with_points(cloud.points[self.mask(cloud.points)])

    def __repr__(self):
        return f"RangeGate(x={self.bounds['x']}, y={self.bounds['y']}, z={self.bounds['z']})"
