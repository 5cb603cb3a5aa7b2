"""Run orchestrator: enumerate frames, build session and sink, drive the batch."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TypeVar

import yaml
from pydantic import BaseModel

from .contracts import Configuration, RunReport
from .driver import ProcessingDriver
from .enumerator import enumerate_frames
from .result_sink import make_sink
from .session import ResourceSession, ResultSink

logger = logging.getLogger(__name__)

ConfigT = TypeVar("ConfigT", bound=BaseModel)


def load_engine_config(config_path: Path | None, config_class: type[ConfigT]) -> ConfigT:
    """Load an engine-specific YAML config into its Pydantic model."""
    if config_path is None:
        return config_class()
    with open(config_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return config_class(**raw)


def build_session(config: Configuration, engine_config_path: Path | None = None) -> ResourceSession:
    """Default resource session: the Farneback reference engine at the configured tier."""
    from pdflow.engines.farneback.config import FarnebackConfig
    from pdflow.engines.farneback.session import FarnebackSession

    engine_config = load_engine_config(engine_config_path, FarnebackConfig)
    return FarnebackSession(rows=config.rows, config=engine_config)


def run_pipeline(
    config: Configuration,
    session: ResourceSession | None = None,
    sink: ResultSink | None = None,
    engine_config_path: Path | None = None,
) -> RunReport:
    """Execute one batch run.

    Frame discovery (and its InsufficientFrames and InvalidFramePair checks) completes before the
    session is built or acquired.
    """
    mode = "directory" if config.directory_mode else "explicit"
    logger.info(
        f"Pipeline: rows={config.rows}, mode={mode}, output_root='{config.output_root}', "
        f"{'batch' if config.no_show else 'interactive'}"
    )
    batch = enumerate_frames(config)

    if session is None:
        session = build_session(config, engine_config_path)
    if sink is None:
        sink = make_sink(config)

    report = ProcessingDriver(session, sink).run(batch)
    logger.info("Pipeline complete.")
    return report
