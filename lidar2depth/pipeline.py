# lidar2depth/pipeline.py
import logging
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from .errors import FrameMismatch
from .gate import RangeGate
from .io_kitti import calib_to_camera, read_calib, read_cloud
from .registry import build
from .transforms import transform_cloud
from .types import DepthImage

log = logging.getLogger(__name__)

# minimum points per worker chunk
MIN_CHUNK = 4096


class Lidar2Depth:
    """
    One point cloud + camera model + lidar->camera transform in, one KITTI-style depth image out.
    Holds no per-frame state; a single instance can serve concurrent callers.
    """
    def __init__(self, proj, rast, enc, gate=None, workers=1):
        self.proj = proj
        self.rast = rast
        self.enc = enc
        self.gate = gate if gate is not None else RangeGate()
        self.workers = max(1, int(workers))

    @classmethod
    def from_config(cls, cfg):
        p = cfg["pipeline"]
        return cls(build("proj", p["projection"], depth=p["depth"]),
                   build("rast", p["rasterizer"]),
                   build("enc", p["encoder"]),
                   gate=RangeGate.from_config(cfg["gate"]),
                   workers=p["workers"])

    def process(self, cloud, intrinsics, tf):
        intrinsics.validate()
        if tf.source_frame != cloud.frame_id:
            raise FrameMismatch(tf.source_frame, cloud.frame_id)
        if intrinsics.frame_id and tf.target_frame and intrinsics.frame_id != tf.target_frame:
            raise FrameMismatch(intrinsics.frame_id, tf.target_frame)

        n_chunks = min(self.workers, max(1, len(cloud) // MIN_CHUNK))
        if n_chunks > 1:
            chunks = np.array_split(cloud.points, n_chunks)
            with ThreadPoolExecutor(max_workers=n_chunks) as ex:
                partials = list(ex.map(lambda pts: self._rasterize(cloud.with_points(pts), intrinsics, tf), chunks))
            img = self.rast.merge(partials)
        else:
            img = self._rasterize(cloud, intrinsics, tf)

        log.debug("frame %s @ %.6f: %d points -> %d valid pixels (%d chunks)",
                  cloud.frame_id, cloud.stamp, len(cloud), int((img > 0).sum()), n_chunks)
        return DepthImage(img, cloud.frame_id, cloud.stamp)

    def _rasterize(self, cloud, intrinsics, tf):
        cam = transform_cloud(cloud, tf)
        gated = self.gate.apply(cam)
        P = self.proj.project(gated.points, intrinsics)
        log.debug("transformed %d, gated %d, projected %d", len(cam), len(gated), len(P))
        return self.rast.rasterize(P, intrinsics.shape, self.enc)

    def process_lookup(self, cloud, intrinsics, source, camera_frame=None):
        """Resolve the lidar->camera transform at the cloud's stamp; TransformUnavailable propagates."""
        target = camera_frame or intrinsics.frame_id
        if not target:
            raise ValueError("camera frame unknown: pass camera_frame or set intrinsics.frame_id")
        tf = source.lookup(target, cloud.frame_id, cloud.stamp)
        return self.process(cloud, intrinsics, tf)

    def process_one(self, velo_path, calib_path, out_hw):
        cloud = read_cloud(velo_path)
        intrinsics, tf = calib_to_camera(read_calib(calib_path), out_hw, lidar_frame=cloud.frame_id)
        return self.process(cloud, intrinsics, tf)
