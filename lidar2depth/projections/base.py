# lidar2depth/projections/base.py
class Projection:
    def project_point(self, xyz, intrinsics):
        """
        xyz: (3,) point in camera frame (x right, y down, z forward)
        Returns: ProjectedPoint(u, v, depth) or None when the point cannot be projected
        """
        raise NotImplementedError

    def project(self, points, intrinsics):
        """
        points: (N,3) camera-frame points
        intrinsics: CameraIntrinsics
        Returns: ProjectedPoints with rounded integer u (column), v (row) and metric depth.
          Rows that cannot be projected are dropped; pixels are NOT bounds-checked here.
        """
        raise NotImplementedError
