"""Error taxonomy for configuration, discovery and processing failures.

Errors raised before a resource session is acquired (``InvalidArgument``,
``InsufficientFrames``, ``InvalidFramePair``) terminate the run directly. Errors raised after
acquisition derive from ``ProcessingFailure`` and are only re-raised once the
session has been released.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .contracts import RunReport


class PdflowError(Exception):
    """Base class for every error raised by pdflow."""


class HelpRequested(PdflowError):
    """``--help`` was seen before any parse error."""


class InvalidArgument(PdflowError):
    """Malformed or unknown command token, or a flag missing its value."""

    def __init__(self, message: str, token: str | None = None):
        super().__init__(message)
        self.token = token


class InsufficientFrames(PdflowError):
    """A frame directory yielded fewer than two usable frames."""

    def __init__(self, directory: Path | str | None, found: int, required: int = 2):
        where = f" in {directory}" if directory is not None else ""
        super().__init__(f"Need at least {required} frames{where}, found {found}")
        self.directory = Path(directory) if directory is not None else None
        self.found = found
        self.required = required


class InvalidFramePair(PdflowError):
    """An explicit frame is missing, not a regular file, or has an unrecognized extension."""

    def __init__(self, problems: list[str]):
        super().__init__("; ".join(problems))
        self.problems = problems


class EngineInitFailure(PdflowError):
    """The resource session could not be acquired. Nothing needs releasing."""


class ProcessingFailure(PdflowError):
    """A failure after acquisition; the session is released before this propagates."""

    def __init__(self, message: str, frame_index: int | None = None):
        super().__init__(message)
        self.frame_index = frame_index
        self.report: RunReport | None = None


class FrameLoadFailure(ProcessingFailure):
    """A frame pair could not be loaded into the session."""


class SolveFailure(ProcessingFailure):
    """The blocking solve call (or artifact production) failed."""
