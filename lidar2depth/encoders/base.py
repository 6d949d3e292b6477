# lidar2depth/encoders/base.py
class Encoder:
    def encode(self, depth):
        """
        depth: metric depth in meters (float scalar or array), >= 0
        Returns: integer pixel value(s) with 0 reserved for "no measurement"
        """
        raise NotImplementedError

    def decode(self, value):
        raise NotImplementedError
