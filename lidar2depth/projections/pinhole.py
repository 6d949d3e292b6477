# lidar2depth/projections/pinhole.py
import logging
import numpy as np
from .base import Projection
from ..registry import register
from ..types import ProjectedPoint, ProjectedPoints

log = logging.getLogger(__name__)

DEPTH_MODES = ("z", "range")


def round_half_away(a):
    a = np.asarray(a, dtype=np.float64)
    return (np.sign(a) * np.floor(np.abs(a) + 0.5)).astype(np.int64)


@register("proj", "pinhole")
class Pinhole(Projection):
    """
    u = fx * x/z + cx,  v = fy * y/z + cy, no lens distortion.

    depth="z" stores the distance along the optical axis (depth-map convention).
    depth="range" stores |xyz|, the distance to the camera centre, which grows
    towards the image border for points on the same plane.
    """
    def __init__(self, depth="z"):
        if depth not in DEPTH_MODES:
            raise ValueError(f"depth must be one of {DEPTH_MODES}, got '{depth}'")
        self.depth = depth

    def project_point(self, xyz, intrinsics):
        x, y, z = (float(c) for c in np.asarray(xyz, dtype=np.float64).reshape(3))
        if not z > 0:
            return None
        u = intrinsics.fx * (x / z) + intrinsics.cx
        v = intrinsics.fy * (y / z) + intrinsics.cy
        d = z if self.depth == "z" else float(np.sqrt(x*x + y*y + z*z))
        return ProjectedPoint(int(round_half_away(u)), int(round_half_away(v)), d)

    def project(self, points, intrinsics):
        P = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        ok = P[:, 2] > 0
        if not ok.all():
            log.debug("dropped %d unprojectable points (z <= 0)", int((~ok).sum()))
        P = P[ok]
        if P.shape[0] == 0:
            return ProjectedPoints.empty()
        X, Y, Z = P.T
        u = intrinsics.fx * (X / Z) + intrinsics.cx
        v = intrinsics.fy * (Y / Z) + intrinsics.cy
        d = Z if self.depth == "z" else np.linalg.norm(P, axis=1)
        return ProjectedPoints(round_half_away(u), round_half_away(v), d)
