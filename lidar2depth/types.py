# lidar2depth/types.py
from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple

import numpy as np

from .errors import FrameMismatch, InvalidIntrinsics
from .encoders.kitti import decode

ORTHO_TOL = 1e-3


@dataclass(frozen=True)
class PointCloudFrame:
    """
    points: (N,3) x,y,z in `frame_id`. Wider arrays (x,y,z,intensity,...) are cut to xyz.
    stamp: capture time in seconds.
    """
    points: np.ndarray
    frame_id: str
    stamp: float = 0.0

    def __post_init__(self):
        pts = np.asarray(self.points, dtype=np.float64)
        if pts.size == 0:
            pts = pts.reshape(0, 3)
        if pts.ndim != 2 or pts.shape[1] < 3:
            raise ValueError(f"points must be (N,3), got {pts.shape}")
        object.__setattr__(self, "points", pts[:, :3])

    def __len__(self):
        return self.points.shape[0]

    def with_points(self, points, frame_id=None) -> "PointCloudFrame":
        return PointCloudFrame(points, frame_id if frame_id is not None else self.frame_id, self.stamp)


@dataclass(frozen=True)
class RigidTransform:
    """
    p_target = R @ p_source + t
    """
    rotation: np.ndarray     # (3,3)
    translation: np.ndarray  # (3,)
    source_frame: str = ""
    target_frame: str = ""

    def __post_init__(self):
        R = np.asarray(self.rotation, dtype=np.float64)
        t = np.asarray(self.translation, dtype=np.float64).reshape(-1)
        if R.shape != (3, 3) or t.shape != (3,):
            raise ValueError(f"rotation must be (3,3) and translation (3,), got {R.shape} / {t.shape}")
        if not np.allclose(R @ R.T, np.eye(3), atol=ORTHO_TOL) or abs(np.linalg.det(R) - 1.0) > ORTHO_TOL:
            raise ValueError("rotation is not orthonormal with det=+1")
        object.__setattr__(self, "rotation", R)
        object.__setattr__(self, "translation", t)

    @classmethod
    def identity(cls, frame: str = "") -> "RigidTransform":
        return cls(np.eye(3), np.zeros(3), frame, frame)

    @classmethod
    def from_matrix(cls, T, source_frame: str = "", target_frame: str = "") -> "RigidTransform":
        T = np.asarray(T, dtype=np.float64)
        if T.shape not in ((3, 4), (4, 4)):
            raise ValueError(f"expected a 3x4 or 4x4 matrix, got {T.shape}")
        return cls(T[:3, :3], T[:3, 3], source_frame, target_frame)

    @classmethod
    def from_quaternion(cls, q_xyzw, translation, source_frame: str = "", target_frame: str = "") -> "RigidTransform":
        # ROS ordering (x, y, z, w), normalised before use
        x, y, z, w = np.asarray(q_xyzw, dtype=np.float64)
        n = np.sqrt(x*x + y*y + z*z + w*w)
        if n < 1e-9:
            raise ValueError("zero-length quaternion")
        x, y, z, w = x/n, y/n, z/n, w/n
        R = np.array([
            [1 - 2*(y*y + z*z), 2*(x*y - z*w),     2*(x*z + y*w)],
            [2*(x*y + z*w),     1 - 2*(x*x + z*z), 2*(y*z - x*w)],
            [2*(x*z - y*w),     2*(y*z + x*w),     1 - 2*(x*x + y*y)],
        ])
        return cls(R, translation, source_frame, target_frame)

    def as_matrix(self) -> np.ndarray:
        T = np.eye(4)
        T[:3, :3] = self.rotation
        T[:3, 3] = self.translation
        return T

    def apply(self, points: np.ndarray) -> np.ndarray:
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        return pts @ self.rotation.T + self.translation

    def inverse(self) -> "RigidTransform":
        Rt = self.rotation.T
        return RigidTransform(Rt, -Rt @ self.translation, self.target_frame, self.source_frame)

    def compose(self, other: "RigidTransform") -> "RigidTransform":
        """self after other: other maps a->b, self maps b->c, result maps a->c."""
        if self.source_frame != other.target_frame:
            raise FrameMismatch(self.source_frame, other.target_frame)
        return RigidTransform(self.rotation @ other.rotation,
                              self.rotation @ other.translation + self.translation,
                              other.source_frame, self.target_frame)


@dataclass(frozen=True)
class CameraIntrinsics:
    fx: float
    fy: float
    cx: float
    cy: float
    width: int
    height: int
    frame_id: Optional[str] = None

    @classmethod
    def from_matrix(cls, K, width: int, height: int, frame_id: Optional[str] = None) -> "CameraIntrinsics":
        K = np.asarray(K, dtype=np.float64)
        return cls(float(K[0, 0]), float(K[1, 1]), float(K[0, 2]), float(K[1, 2]),
                   int(width), int(height), frame_id)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.height, self.width

    def validate(self) -> "CameraIntrinsics":
        bad = [k for k in ("width", "height", "fx", "fy") if not getattr(self, k) > 0]
        if bad:
            raise InvalidIntrinsics(f"non-positive intrinsics: {', '.join(f'{k}={getattr(self, k)}' for k in bad)}")
        return self


class ProjectedPoint(NamedTuple):
    u: int
    v: int
    depth: float


@dataclass(frozen=True)
class ProjectedPoints:
    u: np.ndarray      # (M,) int64 column
    v: np.ndarray      # (M,) int64 row
    depth: np.ndarray  # (M,) float64 meters

    @classmethod
    def empty(cls) -> "ProjectedPoints":
        return cls(np.zeros(0, np.int64), np.zeros(0, np.int64), np.zeros(0, np.float64))

    def __len__(self):
        return self.depth.shape[0]


@dataclass(frozen=True)
class DepthImage:
    data: np.ndarray  # (H,W) uint16, 0 = no return
    frame_id: str = ""
    stamp: float = 0.0

    @property
    def shape(self) -> Tuple[int, int]:
        return self.data.shape

    def valid_mask(self) -> np.ndarray:
        return self.data > 0

    def to_meters(self) -> np.ndarray:
        return decode(self.data)

    def coverage(self) -> float:
        return float(self.valid_mask().mean()) if self.data.size else 0.0
