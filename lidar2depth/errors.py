# lidar2depth/errors.py
class Lidar2DepthError(Exception):
    """Frame-level failure: the whole frame is skipped, no image is produced."""


class FrameMismatch(Lidar2DepthError):
    def __init__(self, expected, got):
        super().__init__(f"frame mismatch: expected '{expected}', got '{got}'")
        self.expected = expected
        self.got = got


class InvalidIntrinsics(Lidar2DepthError):
    pass


class TransformUnavailable(Lidar2DepthError):
    pass
