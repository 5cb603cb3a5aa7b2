"""Visualization utilities for scene flow results."""

from __future__ import annotations

import numpy as np

from pdflow.utils.io import read_depth, read_intensity

WINDOW_NAME = "Scene flow"
INTENSITY_WINDOW = "Intensity"
DEPTH_WINDOW = "Depth"


def flow_to_image(flow: np.ndarray) -> np.ndarray:
    """Per-axis absolute motion as a BGR image.

    Red, green and blue carry |dx|, |dy| and |dz| respectively, all scaled
    by the largest component so the strongest motion saturates.
    """
    magnitude = np.abs(flow)
    max_val = float(magnitude.max()) if magnitude.size else 0.0
    if max_val <= 0.0:
        return np.zeros((*flow.shape[1:], 3), dtype=np.uint8)
    rgb = np.clip(magnitude / max_val * 255.0, 0, 255).astype(np.uint8)
    # (3, H, W) rgb -> (H, W, 3) bgr
    return np.ascontiguousarray(rgb[::-1].transpose(1, 2, 0))


def show_image(image: np.ndarray, window: str = WINDOW_NAME) -> None:
    import cv2

    cv2.namedWindow(window, cv2.WINDOW_AUTOSIZE)
    cv2.imshow(window, image)


def wait_for_key() -> int:
    """Block until a key is pressed over an OpenCV window."""
    import cv2

    return cv2.waitKey(0)


def depth_to_image(depth: np.ndarray) -> np.ndarray:
    """Scale a raw depth map to 8-bit so the farthest valid point is white."""
    max_val = float(depth.max()) if depth.size else 0.0
    if max_val <= 0.0:
        return np.zeros(depth.shape, dtype=np.uint8)
    return np.clip(depth.astype(np.float32) / max_val * 255.0, 0, 255).astype(np.uint8)


def show_frame_pair(pair, show=show_image) -> None:
    """Display the input intensity and depth frames of ``pair`` in their own windows.

    Frames that cannot be decoded are skipped.
    """
    intensity = read_intensity(pair.intensity)
    if intensity is not None:
        show(intensity, INTENSITY_WINDOW)
    depth = read_depth(pair.depth)
    if depth is not None:
        show(depth_to_image(depth), DEPTH_WINDOW)
