# tests/conftest.py
import sys
from pathlib import Path

import numpy as np
import pytest

# Resolve repo root no matter where pytest is run from
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from lidar2depth.types import CameraIntrinsics, RigidTransform  # noqa: E402

# velodyne (x fwd, y left, z up) -> camera (x right, y down, z fwd)
VELO_TO_CAM_R = np.array([[0., -1., 0.],
                          [0., 0., -1.],
                          [1., 0., 0.]])


@pytest.fixture
def K():
    H, W = 480, 640
    return CameraIntrinsics(fx=500.0, fy=500.0, cx=W/2, cy=H/2, width=W, height=H)


@pytest.fixture
def cam_identity():
    return RigidTransform.identity("camera")


@pytest.fixture
def velo_to_cam():
    return RigidTransform(VELO_TO_CAM_R, np.zeros(3), "velodyne", "camera")
