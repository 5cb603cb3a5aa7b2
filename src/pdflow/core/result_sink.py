"""Result sinks: persist each artifact, optionally display it and wait for a key."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from pdflow.utils.io import representation_path, results_path, save_flow_txt, save_image
from pdflow.utils.visualization import flow_to_image, show_frame_pair, show_image, wait_for_key

from .contracts import Configuration, FramePair, ResultArtifact

logger = logging.getLogger(__name__)


class BatchSink:
    """Writes ``<root>_resultsNN.txt`` and ``<root>_representationNN.png``; never blocks."""

    def __init__(self, output_root: str | Path):
        self.output_root = str(output_root)

    def render(self, artifact: ResultArtifact):
        return artifact.image if artifact.image is not None else flow_to_image(artifact.flow)

    def emit(self, artifact: ResultArtifact) -> list[Path]:
        image = self.render(artifact)
        written = [
            save_flow_txt(artifact.flow, results_path(self.output_root, artifact.index)),
            save_image(image, representation_path(self.output_root, artifact.index)),
        ]
        logger.info(f"Saved transition {artifact.index}: {', '.join(p.name for p in written)}")
        return written


class InteractiveSink(BatchSink):
    """Shows the input frames and the artifact, persists it, then blocks for one key press."""

    def __init__(
        self,
        output_root: str | Path,
        show: Callable[..., None] = show_image,
        wait: Callable[[], int] = wait_for_key,
        show_inputs: Callable[[FramePair], None] = show_frame_pair,
    ):
        super().__init__(output_root)
        self._show = show
        self._wait = wait
        self._show_inputs = show_inputs

    def emit(self, artifact: ResultArtifact) -> list[Path]:
        self._show_inputs(artifact.second)
        self._show(self.render(artifact))
        written = super().emit(artifact)
        logger.info("Push any key over the scene flow image to continue")
        self._wait()
        return written


def make_sink(config: Configuration) -> BatchSink:
    """Batch sink for ``--no-show``, interactive sink otherwise."""
    if config.no_show:
        return BatchSink(config.output_root)
    return InteractiveSink(config.output_root)
