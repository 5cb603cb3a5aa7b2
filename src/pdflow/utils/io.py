"""I/O utilities: frame readers and result writers."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

logger = logging.getLogger(__name__)


# ── Result naming ────────────────────────────────────────────────────

def results_path(output_root: str | Path, index: int) -> Path:
    return Path(f"{output_root}_results{index:02d}.txt")


def representation_path(output_root: str | Path, index: int) -> Path:
    return Path(f"{output_root}_representation{index:02d}.png")


# ── Frame readers ────────────────────────────────────────────────────

def read_intensity(path: Path) -> np.ndarray | None:
    """Read an image as 8-bit grayscale. Returns None if it cannot be decoded."""
    import cv2

    return cv2.imread(str(path), cv2.IMREAD_GRAYSCALE)


def read_depth(path: Path) -> np.ndarray | None:
    """Read a depth image keeping its bit depth (16-bit PNG expected)."""
    import cv2

    depth = cv2.imread(str(path), cv2.IMREAD_ANYDEPTH)
    if depth is not None and depth.ndim == 3:
        depth = depth[..., 0]
    return depth


# ── Result writers ───────────────────────────────────────────────────

def save_flow_txt(flow: np.ndarray, path: Path) -> Path:
    """Write scene flow as text, one pixel per line: ``row col dx dy dz``.

    The header records the grid size so the file can be reshaped on load.
    """
    _, rows, cols = flow.shape
    vv, uu = np.mgrid[0:rows, 0:cols]
    table = np.column_stack([
        vv.ravel(), uu.ravel(),
        flow[0].ravel(), flow[1].ravel(), flow[2].ravel(),
    ])
    path.parent.mkdir(parents=True, exist_ok=True)
    np.savetxt(
        str(path), table,
        fmt=["%d", "%d", "%.6f", "%.6f", "%.6f"],
        header=f"rows {rows} cols {cols}\nrow col dx dy dz",
    )
    logger.debug(f"Wrote {path}")
    return path


def load_flow_txt(path: Path) -> np.ndarray:
    """Read a file written by save_flow_txt back into a (3, rows, cols) array."""
    with open(path, encoding="utf-8") as f:
        header = f.readline().lstrip("#").split()
    rows, cols = int(header[1]), int(header[3])
    table = np.loadtxt(str(path), ndmin=2)
    flow = np.zeros((3, rows, cols), dtype=np.float32)
    v, u = table[:, 0].astype(int), table[:, 1].astype(int)
    for axis in range(3):
        flow[axis, v, u] = table[:, 2 + axis]
    return flow


def save_image(image: np.ndarray, path: Path) -> Path:
    import cv2

    path.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(path), image):
        raise OSError(f"Failed to write image: {path}")
    logger.debug(f"Wrote {path}")
    return path
