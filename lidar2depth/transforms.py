# lidar2depth/transforms.py
from .types import PointCloudFrame, RigidTransform


def transform_cloud(cloud: PointCloudFrame, tf: RigidTransform) -> PointCloudFrame:
    """Move every point into tf.target_frame; count and order are kept. Frame checks are the caller's job."""
    return cloud.with_points(tf.apply(cloud.points), frame_id=tf.target_frame)
