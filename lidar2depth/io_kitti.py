# lidar2depth/io_kitti.py
import os
from pathlib import Path
import cv2
import numpy as np

from .types import CameraIntrinsics, DepthImage, PointCloudFrame, RigidTransform

LIDAR_FRAME = "velodyne"
CAMERA_FRAME = "cam2"


def read_velodyne(bin_path: Path):
    # KITTI velodyne: float32 x,y,z,reflectance
    pts = np.fromfile(bin_path, dtype=np.float32)
    if pts.size % 4 != 0:
        raise ValueError(f"Velodyne file has unexpected size: {bin_path}")
    return pts.reshape(-1, 4)


def read_cloud(bin_path: Path, frame_id=LIDAR_FRAME, stamp=0.0) -> PointCloudFrame:
    return PointCloudFrame(read_velodyne(bin_path), frame_id, stamp)


def _floats(s):
    return np.array([float(x) for x in s.split()], dtype=np.float64)


def read_calib(calib_path: Path):
    """
    KITTI object calib: P2 (3x4), R0_rect (3x3), Tr_velo_to_cam (3x4).
    R0 falls back to identity when the file has none.
    """
    mats = {}
    with open(calib_path, "r") as f:
        for line in f:
            if ":" not in line:
                continue
            k, v = line.split(":", 1)
            k = k.strip()
            if k == "P2":
                mats["P2"] = _floats(v).reshape(3, 4)
            elif k in ("R0_rect", "R_rect_00"):
                mats["R0"] = _floats(v).reshape(3, 3)
            elif k in ("Tr_velo_to_cam", "Tr_velo_cam"):
                mats["Tr"] = _floats(v).reshape(3, 4)
    for key in ("P2", "Tr"):
        if key not in mats:
            raise KeyError(f"{key} not found in calib: {calib_path}")
    mats.setdefault("R0", np.eye(3))
    return mats  # {'P2','R0','Tr'}


def calib_to_camera(calib, out_hw, lidar_frame=LIDAR_FRAME, camera_frame=CAMERA_FRAME):
    """
    Split P2 = K [I | t] into pinhole intrinsics K and a rigid velodyne->camera transform
    Tr, then R0_rect, then the stereo baseline offset t.
    Returns: (CameraIntrinsics, RigidTransform)
    """
    H, W = out_hw
    P2 = np.asarray(calib["P2"], dtype=np.float64)
    K = P2[:, :3]
    t_cam = np.linalg.solve(K, P2[:, 3])
    velo_to_cam0 = RigidTransform.from_matrix(calib["Tr"], lidar_frame, "cam0")
    rect = RigidTransform(calib["R0"], np.zeros(3), "cam0", "cam0_rect")
    offset = RigidTransform(np.eye(3), t_cam, "cam0_rect", camera_frame)
    tf = offset.compose(rect.compose(velo_to_cam0))
    return CameraIntrinsics.from_matrix(K, W, H, frame_id=camera_frame), tf


def write_depth_png(path, image):
    data = image.data if isinstance(image, DepthImage) else np.asarray(image)
    if data.dtype != np.uint16 or data.ndim != 2:
        raise ValueError(f"depth PNG must be single-channel uint16, got {data.dtype} {data.shape}")
    path = str(path)
    if os.path.dirname(path):
        os.makedirs(os.path.dirname(path), exist_ok=True)
    ok = cv2.imwrite(path, data)
    if not ok:
        raise IOError(f"Failed to write image: {path}")


def read_depth_png(path, frame_id="", stamp=0.0) -> DepthImage:
    img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if img is None:
        raise FileNotFoundError(f"Failed to read image: {path}")
    if img.dtype != np.uint16 or img.ndim != 2:
        raise ValueError(f"{path} is not a 16-bit single-channel depth map ({img.dtype}, {img.shape})")
    return DepthImage(img, frame_id, stamp)
