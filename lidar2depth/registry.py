# lidar2depth/registry.py
import importlib

REGISTRY = {"proj": {}, "rast": {}, "enc": {}}

# modules whose import populates REGISTRY
BUILTINS = (
    "lidar2depth.projections.pinhole",
    "lidar2depth.rasterizers.nearest",
    "lidar2depth.encoders.kitti",
)

def register(kind, name):
    def deco(cls):
        REGISTRY[kind][name] = cls
        return cls
    return deco

def _load_builtins():
    for mod in BUILTINS:
        importlib.import_module(mod)

def available(kind):
    _load_builtins()
    return sorted(REGISTRY[kind])

def build(kind, name, **kwargs):
    if kind not in REGISTRY:
        raise KeyError(f"unknown component kind '{kind}' (expected one of {sorted(REGISTRY)})")
    _load_builtins()
    try:
        cls = REGISTRY[kind][name]
    except KeyError:
        raise KeyError(f"no {kind} named '{name}', available: {available(kind)}") from None
    return cls(**kwargs)
