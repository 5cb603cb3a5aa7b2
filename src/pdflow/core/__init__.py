"""pdflow core: resolver, enumerator, driver, sinks, shared contracts."""

from .config_resolver import USAGE, load_configuration, resolve_configuration
from .contracts import (
    RESOLUTION_TIERS,
    BatchSequence,
    Configuration,
    FrameOutcome,
    FramePair,
    ResultArtifact,
    RunReport,
)
from .driver import DriverState, ProcessingDriver
from .enumerator import enumerate_frames, list_frames
from .errors import (
    EngineInitFailure,
    FrameLoadFailure,
    HelpRequested,
    InsufficientFrames,
    InvalidArgument,
    InvalidFramePair,
    PdflowError,
    ProcessingFailure,
    SolveFailure,
)
from .logging import setup_logging
from .pipeline_runner import run_pipeline
from .result_sink import BatchSink, InteractiveSink, make_sink
from .session import ResourceSession, ResultSink

__all__ = [
    "USAGE",
    "RESOLUTION_TIERS",
    "Configuration",
    "BatchSequence",
    "FramePair",
    "FrameOutcome",
    "ResultArtifact",
    "RunReport",
    "resolve_configuration",
    "load_configuration",
    "enumerate_frames",
    "list_frames",
    "ResourceSession",
    "ResultSink",
    "DriverState",
    "ProcessingDriver",
    "BatchSink",
    "InteractiveSink",
    "make_sink",
    "run_pipeline",
    "setup_logging",
    "PdflowError",
    "HelpRequested",
    "InvalidArgument",
    "InsufficientFrames",
    "InvalidFramePair",
    "EngineInitFailure",
    "ProcessingFailure",
    "FrameLoadFailure",
    "SolveFailure",
]
