# lidar2depth/tf_source.py
from .errors import TransformUnavailable
from .types import RigidTransform


class TransformSource:
    def lookup(self, target_frame, source_frame, stamp):
        """
        Returns: RigidTransform mapping source_frame -> target_frame at `stamp`
        Raises: TransformUnavailable
        """
        raise NotImplementedError


class StaticTransformSource(TransformSource):
    """Fixed extrinsics (e.g. a calibration file); the stamp is ignored."""

    def __init__(self, transforms=()):
        self._tfs = {}
        for tf in transforms:
            self.add(tf)

    def add(self, tf: RigidTransform):
        if not tf.source_frame or not tf.target_frame:
            raise ValueError("static transforms need both source_frame and target_frame")
        self._tfs[(tf.source_frame, tf.target_frame)] = tf

    def lookup(self, target_frame, source_frame, stamp=None):
        if source_frame == target_frame:
            return RigidTransform.identity(source_frame)
        tf = self._tfs.get((source_frame, target_frame))
        if tf is not None:
            return tf
        tf = self._tfs.get((target_frame, source_frame))
        if tf is not None:
            return tf.inverse()
        raise TransformUnavailable(f"no transform from '{source_frame}' to '{target_frame}'")
