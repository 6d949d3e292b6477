# lidar2depth/rasterizers/nearest.py
import logging
import numpy as np
from .base import Rasterizer
from ..registry import register

log = logging.getLogger(__name__)


@register("rast", "nearest")
class Nearest(Rasterizer):
    """Z-buffer: the smallest encoded depth per pixel wins, ties keep the first point seen."""

    def rasterize(self, projected, out_hw, encoder):
        H, W = out_hw
        img = np.zeros((H, W), dtype=np.uint16)
        u, v = projected.u, projected.v
        m = (u >= 0) & (u < W) & (v >= 0) & (v < H)
        if not m.any():
            return img
        codes = np.asarray(encoder.encode(projected.depth[m]), dtype=np.uint16)
        # flatten index
        idx = v[m] * W + u[m]
        arrival = np.arange(idx.size)
        # group by pixel, nearest first, then by arrival so equal codes keep the earlier point
        order = np.lexsort((arrival, codes, idx))
        idx_s = idx[order]
        first = np.ones(idx_s.size, dtype=bool)
        first[1:] = idx_s[1:] != idx_s[:-1]
        win = order[first]
        img.flat[idx[win]] = codes[win]
        log.debug("rasterized %d/%d in-bounds points onto %d pixels", idx.size, len(projected), win.size)
        return img

    def merge(self, partials):
        partials = list(partials)
        if not partials:
            raise ValueError("nothing to merge")
        out = np.array(partials[0], dtype=np.uint16, copy=True)
        for p in partials[1:]:
            if p.shape != out.shape:
                raise ValueError(f"partial image shape {p.shape} != {out.shape}")
            take = (p > 0) & ((out == 0) | (p < out))
            out[take] = p[take]
        return out
