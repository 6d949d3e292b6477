# lidar2depth/rasterizers/base.py
class Rasterizer:
    def rasterize(self, projected, out_hw, encoder):
        """
        projected: ProjectedPoints (integer u, v; metric depth), any order, may fall outside the image
        out_hw: (H,W)
        encoder: Encoder applied to every written depth
        Returns: (H,W) uint16 image, 0 where nothing landed
        """
        raise NotImplementedError

    def merge(self, partials):
        """Combine images rasterized from disjoint point subsets of the same frame."""
        raise NotImplementedError
