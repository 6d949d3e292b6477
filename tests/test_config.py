# tests/test_config.py
import pytest
import yaml
from lidar2depth.config import DEFAULTS, from_dict, load_config


def test_defaults():
    cfg = load_config()
    assert cfg == DEFAULTS
    assert cfg is not DEFAULTS


def test_yaml_override(tmp_path):
    p = tmp_path / "exp.yaml"
    p.write_text(yaml.safe_dump({"gate": {"x": [-6, 6], "z": [0, 6]}, "pipeline": {"workers": 2}}))
    cfg = load_config(p)
    assert cfg["gate"] == {"x": [-6, 6], "y": None, "z": [0, 6]}
    assert cfg["pipeline"]["workers"] == 2
    assert cfg["pipeline"]["encoder"] == "kitti16"


def test_shipped_default_yaml():
    from pathlib import Path
    cfg = load_config(Path(__file__).resolve().parents[1] / "configs" / "default.yaml")
    assert cfg["image"] == {"height": 375, "width": 1242}


@pytest.mark.parametrize("over", [
    {"camera": {}},
    {"gate": {"w": [0, 1]}},
    {"gate": {"z": [5, 1]}},
    {"gate": {"z": 3}},
    {"pipeline": {"workers": 0}},
    {"image": {"width": -1}},
    {"pipeline": 3},
])
def test_rejects_bad_config(over):
    with pytest.raises(ValueError):
        from_dict(over)
