# lidar2depth/cli.py
import argparse
import datetime
import json
import logging
import sys
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path

import cv2
import numpy as np
from tqdm import tqdm

from .config import load_config
from .errors import Lidar2DepthError
from .io_kitti import read_depth_png, write_depth_png
from .pipeline import Lidar2Depth

log = logging.getLogger(__name__)


def _gen_one(pipe, k, velo_path, calib_path, out_png, out_hw):
    img = pipe.process_one(velo_path, calib_path, out_hw)
    write_depth_png(out_png, img)
    return k, img


def _preview(img, rgb_path, out_path):
    vis = cv2.normalize(img.data, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)
    vis = cv2.applyColorMap(vis, cv2.COLORMAP_JET)
    vis[~img.valid_mask()] = 0
    rgb = cv2.imread(str(rgb_path), cv2.IMREAD_COLOR) if rgb_path.exists() else None
    if rgb is not None:
        if rgb.shape[:2] != vis.shape[:2]:
            vis = cv2.resize(vis, (rgb.shape[1], rgb.shape[0]), interpolation=cv2.INTER_NEAREST)
        vis = cv2.addWeighted(rgb, 0.55, vis, 0.45, 0)
    cv2.imwrite(str(out_path), vis)


def cmd_gen(args):
    cfg = load_config(args.config)
    H = args.H or cfg["image"]["height"]
    W = args.W or cfg["image"]["width"]
    pipe = Lidar2Depth.from_config(cfg)

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    root = Path(args.root)
    velo_dir = root / "training" / "velodyne"
    calib_dir = root / "training" / "calib"
    rgb_dir = root / "training" / "image_2"  # only for previews

    ids = [x.strip() for x in Path(args.split_file).read_text().splitlines() if x.strip()]
    log.info("%d frames from %s", len(ids), args.split_file)

    jobs = []
    for k in ids:
        vpath, cpath = velo_dir / f"{k}.bin", calib_dir / f"{k}.txt"
        if not vpath.exists() or not cpath.exists():
            log.warning("Missing input for %s: velodyne=%s calib=%s. Skipping.", k, vpath.exists(), cpath.exists())
            continue
        jobs.append((k, vpath, cpath, out_dir / f"{k}.png", (H, W)))

    previews_left = max(0, int(args.preview))
    prev_dir = out_dir / "_preview"
    if previews_left > 0:
        prev_dir.mkdir(exist_ok=True)

    wrote, failed = 0, []
    coverages = []

    def done(k, img):
        nonlocal wrote, previews_left
        wrote += 1
        coverages.append(img.coverage())
        if previews_left > 0:
            _preview(img, rgb_dir / f"{k}.png", prev_dir / f"{k}.png")
            previews_left -= 1

    if args.workers > 1:
        with ProcessPoolExecutor(max_workers=args.workers) as ex:
            futs = {ex.submit(_gen_one, pipe, *job): job[0] for job in jobs}
            for fut in tqdm(as_completed(futs), total=len(futs), desc="lidar2depth"):
                try:
                    done(*fut.result())
                except Lidar2DepthError as e:
                    log.warning("Frame %s skipped: %s", futs[fut], e)
                    failed.append(futs[fut])
    else:
        for job in tqdm(jobs, desc="lidar2depth"):
            try:
                done(*_gen_one(pipe, *job))
            except Lidar2DepthError as e:
                log.warning("Frame %s skipped: %s", job[0], e)
                failed.append(job[0])

    meta = {
        "created": datetime.datetime.now().isoformat(timespec="seconds"),
        "root": str(root),
        "split_file": str(Path(args.split_file).resolve()),
        "frames_requested": len(ids),
        "frames_written": wrote,
        "frames_failed": failed,
        "H": H,
        "W": W,
        "encoding": "uint16 png, depth_m = value / 256.0, 0 = invalid",
        "mean_coverage": float(np.mean(coverages)) if coverages else 0.0,
        "config": cfg,
    }
    (out_dir / "meta.json").write_text(json.dumps(meta, indent=2))
    log.info("Done. Out: %s | wrote=%d/%d | HxW=%dx%d", out_dir, wrote, len(ids), H, W)
    return 0 if not failed else 1


def cmd_inspect(args):
    for p in args.png:
        img = read_depth_png(p)
        d = img.to_meters()[img.valid_mask()]
        if d.size == 0:
            print(f"{p}: {img.shape[1]}x{img.shape[0]} coverage=0.00% (empty)")
            continue
        print(f"{p}: {img.shape[1]}x{img.shape[0]} coverage={img.coverage()*100:.2f}% "
              f"min={d.min():.3f}m median={np.median(d):.3f}m max={d.max():.3f}m")
    return 0


def build_parser():
    ap = argparse.ArgumentParser(prog="lidar2depth",
                                 description="Project lidar scans into KITTI-style uint16 depth maps")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = ap.add_subparsers(dest="cmd", required=True)

    g = sub.add_parser("gen", help="Generate depth maps for a KITTI split")
    g.add_argument("--root", required=True, help="KITTI root directory")
    g.add_argument("--split-file", required=True, help="Path to txt with frame IDs (one per line)")
    g.add_argument("--out", required=True, help="Output directory for depth PNGs")
    g.add_argument("--config", default=None, help="Experiment YAML (defaults built in)")
    g.add_argument("--H", type=int, default=None, help="Output height (overrides config)")
    g.add_argument("--W", type=int, default=None, help="Output width (overrides config)")
    g.add_argument("--workers", type=int, default=1, help="Parallel frames")
    g.add_argument("--preview", type=int, default=0, help="Save N colormap overlays for sanity check")
    g.set_defaults(func=cmd_gen)

    i = sub.add_parser("inspect", help="Print coverage and depth range of depth PNGs")
    i.add_argument("png", nargs="+")
    i.set_defaults(func=cmd_inspect)
    return ap


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="[%(levelname)s] %(message)s")
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
