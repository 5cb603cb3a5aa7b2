"""Shared pytest fixtures for pdflow tests."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from pdflow.core.contracts import FramePair, ResultArtifact


class RecordingSession:
    """In-memory resource session that records every call.

    ``fail_on`` maps an operation name to the 1-based call number that should
    raise, e.g. ``{"solve": 2}`` fails the second solve.
    """

    def __init__(self, fail_on: dict[str, int] | None = None, error: type[Exception] = RuntimeError):
        self.fail_on = fail_on or {}
        self.error = error
        self.calls: list[tuple] = []
        self.counts: dict[str, int] = {}
        self.window: list[FramePair] = []

    def _hit(self, op: str, *args) -> None:
        self.calls.append((op, *args))
        self.counts[op] = self.counts.get(op, 0) + 1
        if self.fail_on.get(op) == self.counts[op]:
            raise self.error(f"injected {op} failure")

    @property
    def acquire_count(self) -> int:
        return self.counts.get("acquire", 0)

    @property
    def release_count(self) -> int:
        return self.counts.get("release", 0)

    def acquire(self) -> None:
        self._hit("acquire")

    def load_initial(self, first: FramePair, second: FramePair) -> None:
        self._hit("load_initial", first, second)
        self.window = [first, second]

    def advance(self, pair: FramePair) -> None:
        self._hit("advance", pair)
        self.window = [self.window[1], pair]

    def solve(self) -> None:
        self._hit("solve", tuple(p.intensity.name for p in self.window))

    def produce_artifact(self, index: int) -> ResultArtifact:
        self._hit("produce_artifact", index)
        return ResultArtifact(
            index=index,
            first=self.window[0],
            second=self.window[1],
            flow=np.zeros((3, 3, 4), dtype=np.float32),
        )

    def release(self) -> None:
        self._hit("release")

    def solved_windows(self) -> list[tuple[str, str]]:
        return [c[1] for c in self.calls if c[0] == "solve"]


class RecordingSink:
    def __init__(self, fail_on: int | None = None, error: type[BaseException] = OSError):
        self.artifacts: list[ResultArtifact] = []
        self.fail_on = fail_on
        self.error = error

    def emit(self, artifact: ResultArtifact) -> list[Path]:
        if self.fail_on == artifact.index:
            raise self.error("injected sink failure")
        self.artifacts.append(artifact)
        return [Path(f"artifact{artifact.index:02d}")]


def _touch_frames(directory: Path, names: list[str]) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    for name in names:
        (directory / name).write_bytes(b"fake")
    return directory


@pytest.fixture
def make_frame_dirs(tmp_path: Path):
    """Factory creating intensity/depth directories of placeholder frames."""

    def _make(intensity: list[str], depth: list[str] | None = None) -> tuple[Path, Path]:
        depth = depth if depth is not None else [f"d_{n}" for n in intensity]
        return (
            _touch_frames(tmp_path / "rgb", intensity),
            _touch_frames(tmp_path / "depth", depth),
        )

    return _make


@pytest.fixture
def explicit_frames(tmp_path: Path) -> dict[str, Path]:
    """Four existing placeholder files for explicit mode."""
    names = {"intensity_1": "i1.png", "intensity_2": "i2.png", "depth_1": "z1.png", "depth_2": "z2.png"}
    paths = {key: tmp_path / name for key, name in names.items()}
    for p in paths.values():
        p.write_bytes(b"fake")
    return paths


@pytest.fixture
def rgbd_dirs(tmp_path: Path) -> tuple[Path, Path]:
    """Real decodable RGB-D frames: a textured image shifting right, constant depth."""
    cv2 = pytest.importorskip("cv2")
    rgb_dir = tmp_path / "rgb_real"
    depth_dir = tmp_path / "depth_real"
    rgb_dir.mkdir()
    depth_dir.mkdir()

    rng = np.random.default_rng(0)
    base = cv2.GaussianBlur(rng.integers(0, 255, (120, 200), dtype=np.uint8), (7, 7), 2)
    for i in range(3):
        frame = np.roll(base, 2 * i, axis=1)[:, :160]
        cv2.imwrite(str(rgb_dir / f"frame_{i:03d}.png"), frame)
        depth = np.full((120, 160), 5000 + 50 * i, dtype=np.uint16)  # ~1 m
        cv2.imwrite(str(depth_dir / f"depth_{i:03d}.png"), depth)
    return rgb_dir, depth_dir


@pytest.fixture
def session_factory():
    """RecordingSession class, for tests that configure failure injection."""
    return RecordingSession


@pytest.fixture
def sink_factory():
    return RecordingSink
