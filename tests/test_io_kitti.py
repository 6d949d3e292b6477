# tests/test_io_kitti.py
import cv2
import numpy as np
import pytest
from lidar2depth.io_kitti import (calib_to_camera, read_calib, read_cloud, read_depth_png,
                                  read_velodyne, write_depth_png)
from lidar2depth.pipeline import Lidar2Depth
from lidar2depth.config import from_dict
from lidar2depth.types import DepthImage

# P2 = K [I | (0.1, 0, 0)], Tr = standard velodyne->camera axes, R0 = I
CALIB = """calib_time: 09-Jan-2012 13:57:47
P0: 500 0 320 0 0 500 240 0 0 0 1 0
P2: 500 0 320 50 0 500 240 0 0 0 1 0
R0_rect: 1 0 0 0 1 0 0 0 1
Tr_velo_to_cam: 0 -1 0 0 0 0 -1 0 1 0 0 0
"""


def write_frame(dirpath, pts, name="000000"):
    velo = dirpath / f"{name}.bin"
    calib = dirpath / f"{name}.txt"
    np.asarray(pts, dtype=np.float32).tofile(velo)
    calib.write_text(CALIB)
    return velo, calib


def test_read_calib_and_velodyne(tmp_path):
    velo, calib = write_frame(tmp_path, [[1, 2, 3, 0.5], [4, 5, 6, 0.1]])
    pts = read_velodyne(velo)
    assert pts.shape == (2, 4) and pts.dtype == np.float32
    mats = read_calib(calib)
    assert set(mats) == {"P2", "R0", "Tr"}
    assert mats["P2"][0, 3] == 50.0
    cloud = read_cloud(velo)
    assert cloud.frame_id == "velodyne" and cloud.points.shape == (2, 3)


def test_bad_velodyne_size(tmp_path):
    p = tmp_path / "bad.bin"
    np.zeros(5, np.float32).tofile(p)
    with pytest.raises(ValueError):
        read_velodyne(p)


def test_missing_calib_entry(tmp_path):
    p = tmp_path / "calib.txt"
    p.write_text("P2: 500 0 320 0 0 500 240 0 0 0 1 0\n")
    with pytest.raises(KeyError):
        read_calib(p)


def test_calib_to_camera_folds_baseline(tmp_path):
    _, calib = write_frame(tmp_path, np.zeros((1, 4)))
    K, tf = calib_to_camera(read_calib(calib), (480, 640))
    assert (K.fx, K.fy, K.cx, K.cy, K.width, K.height) == (500, 500, 320, 240, 640, 480)
    assert (tf.source_frame, tf.target_frame) == ("velodyne", "cam2")
    np.testing.assert_allclose(tf.apply([[5.0, 0.0, 0.0]]), [[0.1, 0.0, 5.0]], atol=1e-12)


def test_process_one(tmp_path):
    velo, calib = write_frame(tmp_path, [[5, 0, 0, 1], [-5, 0, 0, 1]])
    pipe = Lidar2Depth.from_config(from_dict())
    img = pipe.process_one(velo, calib, (480, 640))
    # u = 500 * 0.1 / 5 + 320
    assert img.data[240, 330] == 1280
    assert np.count_nonzero(img.data) == 1


def test_depth_png_round_trip(tmp_path):
    data = np.zeros((4, 5), np.uint16)
    data[1, 2] = 512
    data[3, 4] = 65535
    path = tmp_path / "sub" / "d.png"
    write_depth_png(path, DepthImage(data))
    back = read_depth_png(path)
    np.testing.assert_array_equal(back.data, data)
    assert back.to_meters()[1, 2] == 2.0
    assert back.coverage() == pytest.approx(2 / 20)


def test_depth_png_rejects_8bit(tmp_path):
    path = tmp_path / "u8.png"
    cv2.imwrite(str(path), np.zeros((3, 3), np.uint8))
    with pytest.raises(ValueError):
        read_depth_png(path)
    with pytest.raises(ValueError):
        write_depth_png(tmp_path / "x.png", np.zeros((3, 3), np.float32))
    with pytest.raises(FileNotFoundError):
        read_depth_png(tmp_path / "missing.png")
