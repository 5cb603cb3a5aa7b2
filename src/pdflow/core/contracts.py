"""Common Pydantic models shared across the resolver, enumerator, driver and sinks."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Literal

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

RESOLUTION_TIERS: tuple[int, ...] = (15, 30, 60, 120, 240, 480)
FRAME_EXTENSION = ".png"


class Configuration(BaseModel):
    """Immutable run configuration produced once by the resolver."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    rows: int = Field(240, description="Rows at the finest pyramid level (resolution tier)")
    intensity_1: Path = Field(Path("i1.png"), description="First intensity image")
    intensity_2: Path = Field(Path("i2.png"), description="Second intensity image")
    intensity_dir: Path | None = Field(None, description="Directory of intensity frames")
    depth_1: Path = Field(Path("z1.png"), description="First depth image")
    depth_2: Path = Field(Path("z2.png"), description="Second depth image")
    depth_dir: Path | None = Field(None, description="Directory of depth frames")
    output_root: str = Field("pdflow", description="Output artifact name root, no extension")
    no_show: bool = Field(False, description="Batch mode: skip interactive display and wait")

    @field_validator("rows")
    @classmethod
    def _check_tier(cls, v: int) -> int:
        if v not in RESOLUTION_TIERS:
            raise ValueError(f"rows must be one of {list(RESOLUTION_TIERS)}, got {v}")
        return v

    @property
    def directory_mode(self) -> bool:
        """Both directories set: directory discovery supersedes explicit files."""
        return self.intensity_dir is not None and self.depth_dir is not None

    @property
    def cols(self) -> int:
        return self.rows * 4 // 3


class FramePair(BaseModel):
    """One intensity frame and one depth frame at the same sequence position."""

    index: int
    intensity: Path
    depth: Path

    def missing(self) -> list[Path]:
        """Members that do not name an existing regular file."""
        return [p for p in (self.intensity, self.depth) if not p.is_file()]


class BatchSequence(BaseModel):
    """Ordered intensity and depth frame lists, paired by position."""

    intensity: list[Path] = Field(default_factory=list)
    depth: list[Path] = Field(default_factory=list)
    source: Literal["explicit", "directory"] = "explicit"

    @model_validator(mode="after")
    def _check_lengths(self) -> "BatchSequence":
        if len(self.intensity) != len(self.depth):
            raise ValueError(
                f"intensity ({len(self.intensity)}) and depth ({len(self.depth)}) "
                "frame lists must have equal length"
            )
        return self

    @property
    def length(self) -> int:
        return len(self.intensity)

    @property
    def num_transitions(self) -> int:
        return max(0, self.length - 1)

    def pairs(self) -> list[FramePair]:
        return [
            FramePair(index=i, intensity=ip, depth=dp)
            for i, (ip, dp) in enumerate(zip(self.intensity, self.depth))
        ]


class ResultArtifact(BaseModel):
    """Solver output for one processed transition."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    index: int = Field(..., description="1-based transition number")
    first: FramePair
    second: FramePair
    flow: np.ndarray = Field(..., description="(3, rows, cols) dx, dy, dz in metres")
    image: np.ndarray | None = Field(None, description="BGR uint8 representation")


class OutcomeStatus(str, Enum):
    SOLVED = "solved"
    LOAD_FAILED = "load_failed"
    SOLVE_FAILED = "solve_failed"
    SINK_FAILED = "sink_failed"


class FrameOutcome(BaseModel):
    """Per-transition outcome reported by the driver."""

    index: int
    intensity: Path
    depth: Path
    status: OutcomeStatus
    elapsed_seconds: float = 0.0
    outputs: list[Path] = Field(default_factory=list)


class RunReport(BaseModel):
    """Summary of one driver run, filled in as the run progresses."""

    source: Literal["explicit", "directory"] = "explicit"
    total_transitions: int = 0
    acquired: bool = False
    released: bool = False
    outcomes: list[FrameOutcome] = Field(default_factory=list)
    failure: str | None = None
    release_error: str | None = None
    elapsed_seconds: float = 0.0

    @property
    def transitions(self) -> int:
        return sum(1 for o in self.outcomes if o.status == OutcomeStatus.SOLVED)
