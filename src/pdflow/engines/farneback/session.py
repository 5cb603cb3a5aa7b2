"""CPU reference resource session: dense Farneback flow lifted to 3D with depth.

Planar motion comes from ``cv2.calcOpticalFlowFarneback`` on the intensity
frames. Each pixel is back-projected with a pinhole model built from the
configured field of view, so dx/dy are metric; dz is the depth change along
the flow. Pixels with no valid depth in either frame get zero motion.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from pdflow.core.contracts import RESOLUTION_TIERS, FramePair, ResultArtifact
from pdflow.core.errors import EngineInitFailure, FrameLoadFailure
from pdflow.utils.io import read_depth, read_intensity
from pdflow.utils.visualization import flow_to_image

from .config import FarnebackConfig

logger = logging.getLogger(__name__)


class FarnebackSession:
    name = "farneback"

    def __init__(self, rows: int = 240, config: FarnebackConfig | None = None):
        if rows not in RESOLUTION_TIERS:
            raise ValueError(f"rows must be one of {list(RESOLUTION_TIERS)}, got {rows}")
        self.rows = rows
        self.cols = rows * 4 // 3
        self.config = config or FarnebackConfig()
        self.acquired = False
        self._intensity: list[np.ndarray] = []
        self._depth: list[np.ndarray] = []
        self._pairs: list[FramePair] = []
        self._flow: np.ndarray | None = None

    # -- lifecycle ---------------------------------------------------------

    def acquire(self) -> None:
        if self.acquired:
            raise EngineInitFailure(f"[{self.name}] session already acquired")
        try:
            import cv2  # noqa: F401
        except ImportError as e:
            raise EngineInitFailure(
                "OpenCV is required for the Farneback engine: pip install opencv-python"
            ) from e

        self.fx = (self.cols / 2.0) / math.tan(math.radians(self.config.fov_h_deg) / 2.0)
        self.fy = (self.rows / 2.0) / math.tan(math.radians(self.config.fov_v_deg) / 2.0)
        self.cx = (self.cols - 1) / 2.0
        self.cy = (self.rows - 1) / 2.0
        self._grid_x, self._grid_y = np.meshgrid(
            np.arange(self.cols, dtype=np.float32), np.arange(self.rows, dtype=np.float32)
        )
        self.acquired = True
        logger.info(f"[{self.name}] Acquired working buffers at {self.rows}x{self.cols}")

    def release(self) -> None:
        self._require_acquired()
        self._intensity, self._depth, self._pairs = [], [], []
        self._flow = None
        del self._grid_x, self._grid_y
        self.acquired = False
        logger.info(f"[{self.name}] Released")

    # -- frames ------------------------------------------------------------

    def load_initial(self, first: FramePair, second: FramePair) -> None:
        self._require_acquired()
        i0, z0 = self._read(first)
        i1, z1 = self._read(second)
        self._intensity, self._depth = [i0, i1], [z0, z1]
        self._pairs = [first, second]
        self._flow = None

    def advance(self, pair: FramePair) -> None:
        self._require_loaded()
        i1, z1 = self._read(pair)
        self._intensity = [self._intensity[1], i1]
        self._depth = [self._depth[1], z1]
        self._pairs = [self._pairs[1], pair]
        self._flow = None

    def _read(self, pair: FramePair) -> tuple[np.ndarray, np.ndarray]:
        import cv2

        intensity = read_intensity(pair.intensity)
        if intensity is None:
            raise FrameLoadFailure(f"Cannot read intensity image: {pair.intensity}")
        depth = read_depth(pair.depth)
        if depth is None:
            raise FrameLoadFailure(f"Cannot read depth image: {pair.depth}")

        size = (self.cols, self.rows)
        intensity = cv2.resize(intensity, size, interpolation=cv2.INTER_AREA)
        depth = cv2.resize(depth, size, interpolation=cv2.INTER_NEAREST)
        return intensity, depth.astype(np.float32) * self.config.depth_scale

    # -- solve -------------------------------------------------------------

    def solve(self) -> None:
        import cv2

        self._require_loaded()
        c = self.config
        uv = cv2.calcOpticalFlowFarneback(
            self._intensity[0], self._intensity[1], None,
            c.pyr_scale, c.levels, c.winsize, c.iterations, c.poly_n, c.poly_sigma, 0,
        )
        map_x = self._grid_x + uv[..., 0]
        map_y = self._grid_y + uv[..., 1]

        z0 = self._depth[0]
        z1 = cv2.remap(
            self._depth[1], map_x, map_y,
            interpolation=cv2.INTER_NEAREST,
            borderMode=cv2.BORDER_CONSTANT, borderValue=0,
        )
        valid = (z0 > 0) & (z1 > 0)

        dx = (map_x - self.cx) * z1 / self.fx - (self._grid_x - self.cx) * z0 / self.fx
        dy = (map_y - self.cy) * z1 / self.fy - (self._grid_y - self.cy) * z0 / self.fy
        dz = z1 - z0

        flow = np.stack([dx, dy, dz]).astype(np.float32)
        flow[:, ~valid] = 0.0
        self._flow = flow
        logger.debug(f"[{self.name}] {int(valid.sum())} pixels with valid depth")

    def produce_artifact(self, index: int) -> ResultArtifact:
        if self._flow is None:
            raise RuntimeError(f"[{self.name}] produce_artifact called before solve")
        return ResultArtifact(
            index=index,
            first=self._pairs[0],
            second=self._pairs[1],
            flow=self._flow.copy(),
            image=flow_to_image(self._flow),
        )

    # -- guards ------------------------------------------------------------

    def _require_acquired(self) -> None:
        if not self.acquired:
            raise RuntimeError(f"[{self.name}] session is not acquired")

    def _require_loaded(self) -> None:
        self._require_acquired()
        if len(self._pairs) != 2:
            raise RuntimeError(f"[{self.name}] no frames loaded")
