# tests/test_encoders.py
import numpy as np
import pytest
from lidar2depth.encoders.kitti import encode, decode, Kitti16, UINT16_MAX
from lidar2depth.registry import build


def test_kitti_scale():
    assert encode(2.0) == 512
    assert decode(512) == 2.0
    assert decode(0) == 0.0


def test_zero_depth_never_invalid():
    assert encode(0.0) == 1
    assert encode(0.001) == 1


def test_round_trip_within_half_step():
    d = np.linspace(1.0 / 512, UINT16_MAX / 256.0, 5001)
    err = np.abs(decode(encode(d)) - d)
    assert err.max() <= 1.0 / 512 + 1e-12


def test_rounds_half_up_and_saturates():
    assert encode(1.5 / 256.0) == 2
    assert encode(2.5 / 256.0) == 3
    assert encode(1e6) == UINT16_MAX


def test_array_dtype():
    out = encode(np.array([0.0, 1.0, 300.0]))
    assert out.dtype == np.uint16
    assert out.tolist() == [1, 256, UINT16_MAX]
    assert decode(out).dtype == np.float64


@pytest.mark.parametrize("bad", [-0.5, np.nan, np.inf])
def test_rejects_invalid_depth(bad):
    with pytest.raises(ValueError):
        encode(bad)


def test_registry():
    enc = build("enc", "kitti16")
    assert isinstance(enc, Kitti16)
    assert enc.decode(enc.encode(1.5)) == 1.5
