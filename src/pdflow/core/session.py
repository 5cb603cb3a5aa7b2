"""Protocol interfaces for the resource session and the result sink."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from .contracts import FramePair, ResultArtifact


@runtime_checkable
class ResourceSession(Protocol):
    """Capability interface of a stateful scene-flow solver.

    The session holds exclusive two-frame state (a "first" and a "second"
    frame pair) plus whatever compute resources the solver needs. The driver
    calls ``acquire`` once, then ``load_initial``, then alternates ``solve``/
    ``produce_artifact`` with ``advance``, and finally ``release`` once.
    """

    def acquire(self) -> None:
        """Allocate solver resources (e.g. accelerator memory)."""
        ...

    def load_initial(self, first: FramePair, second: FramePair) -> None:
        """Load the first two frame pairs of the sequence."""
        ...

    def solve(self) -> None:
        """Blocking solve between the current first and second frames."""
        ...

    def advance(self, pair: FramePair) -> None:
        """Sliding-window step.

        The current second frame becomes the first frame; ``pair`` is loaded
        as the new second frame. Only one new frame per modality is supplied.
        """
        ...

    def produce_artifact(self, index: int) -> ResultArtifact:
        """Build the result artifact of the last solve."""
        ...

    def release(self) -> None:
        """Free everything acquired by ``acquire``."""
        ...


@runtime_checkable
class ResultSink(Protocol):
    """Receives each artifact before the driver advances."""

    def emit(self, artifact: ResultArtifact) -> list[Path]:
        """Render and/or persist ``artifact``. Returns the written paths."""
        ...
