"""FramePair Enumerator: build the ordered BatchSequence for a run."""

from __future__ import annotations

import logging
from pathlib import Path

from .contracts import FRAME_EXTENSION, BatchSequence, Configuration
from .errors import InsufficientFrames, InvalidFramePair

logger = logging.getLogger(__name__)

MIN_FRAMES = 2


def list_frames(directory: Path, extension: str = FRAME_EXTENSION) -> list[Path]:
    """Regular files in ``directory`` with the given suffix, in native path order.

    A missing path or a non-directory lists as empty.
    """
    directory = Path(directory)
    if not directory.is_dir():
        logger.warning(f"Frame directory not found: {directory}")
        return []
    return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix == extension)


def check_explicit_frames(paths: list[Path], extension: str = FRAME_EXTENSION) -> None:
    """Raise InvalidFramePair unless every path is an existing regular file with ``extension``."""
    problems = []
    for p in paths:
        if not p.is_file():
            problems.append(f"Frame not found: {p}")
        elif p.suffix != extension:
            problems.append(f"Unrecognized frame extension (expected {extension}): {p}")
    if problems:
        raise InvalidFramePair(problems)


def enumerate_frames(config: Configuration) -> BatchSequence:
    """Produce the BatchSequence for ``config``.

    Both checks run before anything is acquired: explicit mode raises
    InvalidFramePair for a missing or unrecognized file, directory mode raises
    InsufficientFrames when either listing has fewer than two frames.
    """
    if not config.directory_mode:
        logger.info("Explicit mode: one pair from the four given files")
        check_explicit_frames(
            [config.intensity_1, config.intensity_2, config.depth_1, config.depth_2]
        )
        return BatchSequence(
            intensity=[config.intensity_1, config.intensity_2],
            depth=[config.depth_1, config.depth_2],
            source="explicit",
        )

    intensities = list_frames(config.intensity_dir)
    depths = list_frames(config.depth_dir)
    for directory, frames in ((config.intensity_dir, intensities), (config.depth_dir, depths)):
        if len(frames) < MIN_FRAMES:
            raise InsufficientFrames(directory, len(frames), MIN_FRAMES)

    if len(intensities) != len(depths):
        n = min(len(intensities), len(depths))
        logger.warning(
            f"Frame count mismatch: {len(intensities)} intensity vs {len(depths)} depth, "
            f"using the first {n} of each"
        )
        intensities, depths = intensities[:n], depths[:n]

    logger.info(f"Directory mode: {len(intensities)} frames, {len(intensities) - 1} transitions")
    return BatchSequence(intensity=intensities, depth=depths, source="directory")
